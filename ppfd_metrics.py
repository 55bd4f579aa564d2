#!/usr/bin/env python3
"""ppfd_metrics.py

Whole-room power / uniformity metrics.

The full 2601-point heatmap is too heavy for the quick summary panel, so the
room-level numbers come from a Monte Carlo estimate: a handful of planar
points drawn uniformly over the footprint and evaluated with the same
point-source kernel as the heatmap (irradiance.ppfd_at_points).

Reported per calculation:
  totalPower     W, plain sum of fixture wattages
  powerDensity   W/m²
  avgPPFD/minPPFD/maxPPFD   µmol/m²/s, rounded to integers
  uniformity     min/avg of the raw samples
  dli            mol/m²/day, avg · 0.0864 · photoperiod hours
  efficacy       avgPPFD per W/m²

All inputs are in µmol/m^2/s unless stated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Optional, Sequence

import numpy as np

from calc_errors import DegenerateInputError
from irradiance import LightSource, PPFD_CONVERSION, ppfd_at_points, total_wattage
from lighting_config import DEFAULT_CANOPY_FRACTION, DEFAULT_PHOTOPERIOD_H, DEFAULT_SAMPLES
from room_units import Room

logger = logging.getLogger(__name__)

DLI_FACTOR = 0.0864


def round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def _as_1d(a: np.ndarray) -> np.ndarray:
    a = np.asarray(a, dtype=float)
    return a.ravel()


def compute_ppfd_metrics(ppfd: np.ndarray) -> dict[str, float]:
    """Summary statistics of a PPFD sample set (grid or Monte Carlo).

    Returns mean, min, max, p05, p50, p95 and the min/mean uniformity ratio.
    An all-zero field has uniformity 0.0.
    """
    p = _as_1d(ppfd)
    if p.size == 0:
        raise DegenerateInputError("ppfd array is empty")

    mean = float(np.mean(p))
    pmin = float(np.min(p))
    pmax = float(np.max(p))

    return {
        "mean": mean,
        "min": pmin,
        "max": pmax,
        "p05": float(np.percentile(p, 5)),
        "p50": float(np.percentile(p, 50)),
        "p95": float(np.percentile(p, 95)),
        "uniformity": pmin / mean if mean > 0 else 0.0,
    }


@dataclass(frozen=True)
class PowerMetrics:
    totalPower: float
    powerDensity: float
    avgPPFD: int
    minPPFD: int
    maxPPFD: int
    uniformity: float
    dli: float
    efficacy: float

    def to_message(self, **extra: Any) -> dict[str, Any]:
        out = asdict(self)
        out.update(extra)
        return out


def sample_points(room: Room, samples: int, rng: Optional[np.random.Generator] = None):
    """Uniform planar samples over [0, length) x [0, width), native unit."""
    if rng is None:
        rng = np.random.default_rng()
    u = rng.random((samples, 2))
    return u[:, 0] * room.length, u[:, 1] * room.width


def compute_power_metrics(
    sources: Sequence[LightSource],
    room: Room,
    *,
    samples: int = DEFAULT_SAMPLES,
    rng: Optional[np.random.Generator] = None,
    photoperiod_hours: float = DEFAULT_PHOTOPERIOD_H,
    canopy_fraction: float = DEFAULT_CANOPY_FRACTION,
    conversion: float = PPFD_CONVERSION,
) -> PowerMetrics:
    """Monte Carlo room metrics. Raises DegenerateInputError for an empty
    fixture list or zero total power (density and efficacy are undefined)."""
    if not sources:
        raise DegenerateInputError("cannot compute power metrics without fixtures")

    total_power = total_wattage(sources)
    area_m2 = room.area_m2
    if area_m2 <= 0:
        raise DegenerateInputError("room area must be positive")
    if total_power <= 0:
        raise DegenerateInputError("total fixture power must be positive")
    power_density = total_power / area_m2

    xs, ys = sample_points(room, samples, rng)
    ppfd = ppfd_at_points(
        sources, xs, ys, room.height * canopy_fraction,
        scale=room.meters_factor, conversion=conversion,
    )
    stats = compute_ppfd_metrics(ppfd)
    avg = stats["mean"]

    metrics = PowerMetrics(
        totalPower=total_power,
        powerDensity=power_density,
        avgPPFD=round_half_up(avg),
        minPPFD=round_half_up(stats["min"]),
        maxPPFD=round_half_up(stats["max"]),
        uniformity=stats["uniformity"],
        dli=avg * DLI_FACTOR * photoperiod_hours,
        efficacy=avg / power_density,
    )
    logger.debug("Power metrics over %d samples: %s", samples, metrics)
    return metrics


def format_power_metrics_line(m: PowerMetrics | dict[str, Any]) -> str:
    """Human-readable multi-line block for logs / CLI."""
    if isinstance(m, PowerMetrics):
        m = asdict(m)

    lines: list[str] = []
    lines.append(
        "power: "
        f"total={m['totalPower']:.0f} W density={m['powerDensity']:.2f} W/m²"
    )
    lines.append(
        "ppfd: "
        f"avg={m['avgPPFD']} min={m['minPPFD']} max={m['maxPPFD']} "
        f"uniformity={m['uniformity']:.3f}"
    )
    lines.append(f"dli: {m['dli']:.2f} mol/m²/day  efficacy: {m['efficacy']:.1f}")
    if "calculationTime" in m:
        lines.append(f"time: {m['calculationTime']:.1f} ms")
    return "\n".join(lines)
