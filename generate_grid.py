#!/usr/bin/env python3
"""
generate_grid.py

Regular heatmap grid over the room footprint and the PPFD sampled on it.

The footprint is split into RESOLUTION cells per axis, so a 50-cell grid has
51 x 51 = 2601 intersections, corners included. Intersection (i, j) lies at
(i/N · length, j/N · width) in the room's native unit. Irradiance is evaluated
on the canopy plane (CANOPY_FRACTION of room height) in meters.

Environment variables (CLI only):

  LENGTH_M / LENGTH_FT, WIDTH_M / WIDTH_FT, HEIGHT_M / HEIGHT_FT
  GRID_RESOLUTION    – cells per axis (default 50)
  CANOPY_FRACTION    – canopy plane height as fraction of room height
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Dict, List, Sequence, Tuple

import numpy as np

from irradiance import LightSource, PPFD_CONVERSION, ppfd_at_points
from lighting_config import DEFAULT_CANOPY_FRACTION, DEFAULT_RESOLUTION
from room_units import Room, to_meters_factor

logger = logging.getLogger(__name__)


def grid_axes(length: float, width: float, resolution: int = DEFAULT_RESOLUTION) -> Tuple[np.ndarray, np.ndarray]:
    """Axis coordinates (native unit) of the (N+1) x (N+1) grid intersections."""
    if resolution < 1:
        raise ValueError("resolution must be >= 1")
    frac = np.arange(resolution + 1, dtype=float) / resolution
    return frac * length, frac * width


def grid_points(length: float, width: float, resolution: int = DEFAULT_RESOLUTION) -> Tuple[np.ndarray, np.ndarray]:
    """Flattened (xs, ys), x-major: all y for x=0 first, then x=1/N, ..."""
    x_coords, y_coords = grid_axes(length, width, resolution)
    X, Y = np.meshgrid(x_coords, y_coords, indexing="ij")
    return X.ravel(), Y.ravel()


def compute_heatmap(
    sources: Sequence[LightSource],
    length: float,
    width: float,
    height: float,
    unit: str = "meters",
    *,
    resolution: int = DEFAULT_RESOLUTION,
    canopy_fraction: float = DEFAULT_CANOPY_FRACTION,
    conversion: float = PPFD_CONVERSION,
) -> List[Dict[str, float]]:
    """
    Heatmap points {x, y, value} for every grid intersection.

    Returns (resolution + 1)² points regardless of fixture count; with no
    fixtures every value is 0.0.
    """
    scale = to_meters_factor(unit)
    xs, ys = grid_points(length, width, resolution)
    canopy_z = height * canopy_fraction
    values = ppfd_at_points(sources, xs, ys, canopy_z, scale=scale, conversion=conversion)
    logger.debug("Heatmap: %d points x %d sources (res=%d, unit=%s)",
                 xs.size, len(sources), resolution, unit)
    return [
        {"x": float(x), "y": float(y), "value": float(v)}
        for x, y, v in zip(xs, ys, values)
    ]


def compute_room_heatmap(sources: Sequence[LightSource], room: Room, **kwargs) -> List[Dict[str, float]]:
    return compute_heatmap(sources, room.length, room.width, room.height, room.unit, **kwargs)


def heatmap_peak(points: Sequence[Dict[str, float]]) -> Dict[str, float]:
    """Grid point with the highest value (first one on ties)."""
    if not points:
        raise ValueError("empty heatmap")
    return max(points, key=lambda p: p["value"])


# ──────────────────────────────────────────────────────────────────────────────
# CLI: dump the grid the same way the ppfd_map.txt tooling expects
# ──────────────────────────────────────────────────────────────────────────────

def _f(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except Exception:
        return default


def _room_from_env() -> Room:
    if os.environ.get("LENGTH_FT") or os.environ.get("WIDTH_FT"):
        return Room(_f("LENGTH_FT", 12.0), _f("WIDTH_FT", 12.0), _f("HEIGHT_FT", 10.0), "feet")
    return Room(_f("LENGTH_M", 3.6576), _f("WIDTH_M", 3.6576), _f("HEIGHT_M", 3.048), "meters")


def print_coords_mode(room: Room, resolution: int, canopy_fraction: float):
    xs, ys = grid_points(room.length, room.width, resolution)
    z = room.height * canopy_fraction
    print("x y z")
    for x, y in zip(xs, ys):
        print(f"{x:.6f} {y:.6f} {z:.6f}")


def usage_and_exit():
    print("Usage: generate_grid.py coords")
    sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) != 2 or sys.argv[1].lower() != "coords":
        usage_and_exit()
    print_coords_mode(
        _room_from_env(),
        int(os.environ.get("GRID_RESOLUTION", DEFAULT_RESOLUTION)),
        _f("CANOPY_FRACTION", DEFAULT_CANOPY_FRACTION),
    )
