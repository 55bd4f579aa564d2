#!/usr/bin/env python3
"""
lighting_config.py

Calculator knobs resolved from the environment (a local .env is honoured):

  GRID_RESOLUTION   – heatmap cells per axis (points per axis = N + 1)
  MC_SAMPLES        – Monte Carlo sample count for the power metrics
  CANOPY_FRACTION   – canopy plane height as a fraction of room height
  PHOTOPERIOD_H     – hours of light per day used for DLI
  PPFD_CONVERSION   – photon-to-PPFD constant of the point-source model
  MOUNT_OFFSET      – ceiling offset for optimized fixtures (room units)
  CALC_CACHE_SIZE   – host-side result cache capacity
  LOG_LEVEL         – logging level for the CLI / HTTP bridge

Defaults reproduce the browser worker: 50x50 grid, 100 samples, 12 h.
Resolution and sample count are capped (MAX_RESOLUTION, MAX_SAMPLES) since
per-message options come straight from HTTP clients.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from calc_errors import LightingInputError

DEFAULT_RESOLUTION = 50
DEFAULT_SAMPLES = 100
DEFAULT_CANOPY_FRACTION = 0.75
DEFAULT_PHOTOPERIOD_H = 12.0
DEFAULT_PPFD_CONVERSION = 4.6
DEFAULT_MOUNT_OFFSET = 2.0
DEFAULT_CACHE_SIZE = 50

# Upper bounds on client-controlled work per request
MAX_RESOLUTION = 1000
MAX_SAMPLES = 100_000


def _env_float(name: str, default: float) -> float:
    v = os.environ.get(name)
    if v is None or str(v).strip() == "":
        return float(default)
    try:
        return float(v)
    except ValueError:
        raise LightingInputError(f"{name} must be a number, got {v!r}")


def _env_int(name: str, default: int) -> int:
    v = os.environ.get(name)
    if v is None or str(v).strip() == "":
        return int(default)
    try:
        return int(v)
    except ValueError:
        raise LightingInputError(f"{name} must be an integer, got {v!r}")


@dataclass(frozen=True)
class LightingConfig:
    resolution: int = DEFAULT_RESOLUTION
    samples: int = DEFAULT_SAMPLES
    canopy_fraction: float = DEFAULT_CANOPY_FRACTION
    photoperiod_hours: float = DEFAULT_PHOTOPERIOD_H
    ppfd_conversion: float = DEFAULT_PPFD_CONVERSION
    mount_offset: float = DEFAULT_MOUNT_OFFSET
    cache_size: int = DEFAULT_CACHE_SIZE
    seed: Optional[int] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if not 1 <= self.resolution <= MAX_RESOLUTION:
            raise LightingInputError(f"resolution must lie in [1, {MAX_RESOLUTION}]")
        if not 1 <= self.samples <= MAX_SAMPLES:
            raise LightingInputError(f"samples must lie in [1, {MAX_SAMPLES}]")
        if self.seed is not None and self.seed < 0:
            raise LightingInputError("seed must be a non-negative integer")
        if not 0.0 <= self.canopy_fraction <= 1.0:
            raise LightingInputError("canopy_fraction must lie in [0, 1]")
        if self.photoperiod_hours < 0 or self.photoperiod_hours > 24:
            raise LightingInputError("photoperiod_hours must lie in [0, 24]")
        if self.cache_size < 0:
            raise LightingInputError("cache_size must be >= 0")

    def with_options(self, options: Optional[Dict[str, Any]]) -> "LightingConfig":
        """Apply per-message overrides ({resolution, samples, seed, photoperiodHours})."""
        if not options:
            return self
        if not isinstance(options, dict):
            raise LightingInputError("options must be an object")
        changes: Dict[str, Any] = {}
        try:
            if options.get("resolution") is not None:
                changes["resolution"] = int(options["resolution"])
            if options.get("samples") is not None:
                changes["samples"] = int(options["samples"])
            if options.get("seed") is not None:
                changes["seed"] = int(options["seed"])
            if options.get("photoperiodHours") is not None:
                changes["photoperiod_hours"] = float(options["photoperiodHours"])
        except (TypeError, ValueError) as e:
            raise LightingInputError(f"invalid option value: {e}")
        return replace(self, **changes)


def load_config(dotenv: bool = True) -> LightingConfig:
    if dotenv:
        load_dotenv()
    return LightingConfig(
        resolution=_env_int("GRID_RESOLUTION", DEFAULT_RESOLUTION),
        samples=_env_int("MC_SAMPLES", DEFAULT_SAMPLES),
        canopy_fraction=_env_float("CANOPY_FRACTION", DEFAULT_CANOPY_FRACTION),
        photoperiod_hours=_env_float("PHOTOPERIOD_H", DEFAULT_PHOTOPERIOD_H),
        ppfd_conversion=_env_float("PPFD_CONVERSION", DEFAULT_PPFD_CONVERSION),
        mount_offset=_env_float("MOUNT_OFFSET", DEFAULT_MOUNT_OFFSET),
        cache_size=_env_int("CALC_CACHE_SIZE", DEFAULT_CACHE_SIZE),
        seed=_env_int("MC_SEED", 0) if os.environ.get("MC_SEED", "").strip() else None,
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
