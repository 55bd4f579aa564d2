#!/usr/bin/env python3
"""irradiance.py

Point-source irradiance model shared by the heatmap grid and the Monte Carlo
power metrics.

Each fixture is an unobstructed isotropic point emitter. At a planar sample
point on the canopy plane the contribution is

    PPFD_i = PPF_i / (4·π·d²) · 4.6

summed over fixtures. There is no beam angle, no occlusion and no
reflectance. Distances are in meters; callers convert from the room unit
before handing points over.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from calc_errors import DegenerateInputError, LightingInputError
from room_units import as_number

PPFD_CONVERSION = 4.6


@dataclass(frozen=True)
class LightSource:
    """Read-only projection of a fixture used by the calculator."""
    id: Any
    x: float
    y: float
    z: float
    ppf: float
    wattage: float
    spectrum: Dict[Any, float] = field(default_factory=dict)


def _spec_block(fx: Dict[str, Any]) -> Dict[str, Any]:
    model = fx.get("model")
    if isinstance(model, dict):
        specs = model.get("specifications")
        if isinstance(specs, dict):
            return specs
        return model
    return fx


def light_source_from_fixture(fx: Dict[str, Any], index: int = 0) -> LightSource:
    """
    Map a host fixture to a LightSource.

    Host shape: {id, position:{x,y,z}, model:{specifications:{ppf, power, spectrum}}}
    Flat shape (already projected): {id, x, y, z, ppf, wattage, spectrum}
    """
    if not isinstance(fx, dict):
        raise LightingInputError(f"fixture[{index}] must be an object")
    pos = fx.get("position") if isinstance(fx.get("position"), dict) else fx
    specs = _spec_block(fx)

    watts = specs.get("power", specs.get("wattage"))
    spectrum = specs.get("spectrum")
    if spectrum is None:
        spectrum = {}
    elif not isinstance(spectrum, dict):
        raise LightingInputError(f"fixture[{index}].spectrum must be an object")

    return LightSource(
        id=fx.get("id", index),
        x=as_number(pos.get("x"), f"fixture[{index}].position.x"),
        y=as_number(pos.get("y"), f"fixture[{index}].position.y"),
        z=as_number(pos.get("z"), f"fixture[{index}].position.z"),
        ppf=as_number(specs.get("ppf"), f"fixture[{index}].ppf"),
        wattage=as_number(watts, f"fixture[{index}].power"),
        spectrum=spectrum,
    )


def light_sources_from_fixtures(fixtures: Any) -> List[LightSource]:
    if not isinstance(fixtures, (list, tuple)):
        raise LightingInputError(f"fixtures must be a list, got {type(fixtures).__name__}")
    return [light_source_from_fixture(fx, i) for i, fx in enumerate(fixtures)]


def ppfd_at_points(
    sources: Sequence[LightSource],
    xs: Iterable[float],
    ys: Iterable[float],
    canopy_z: float,
    *,
    scale: float = 1.0,
    conversion: float = PPFD_CONVERSION,
) -> np.ndarray:
    """
    Summed PPFD at each (x, y) sample on the canopy plane.

    xs/ys/canopy_z and the source positions share one unit; `scale` converts
    that unit to meters (0.3048 for feet). Returns a float array shaped like xs.
    Raises DegenerateInputError if any sample coincides with a source.
    """
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    if xs.shape != ys.shape:
        raise LightingInputError("xs and ys must have the same shape")
    if not sources:
        return np.zeros_like(xs)

    sx = np.array([s.x for s in sources], dtype=float)
    sy = np.array([s.y for s in sources], dtype=float)
    sz = np.array([s.z for s in sources], dtype=float)
    ppf = np.array([s.ppf for s in sources], dtype=float)

    # (n_points, n_sources)
    dx = (xs.reshape(-1, 1) - sx[None, :]) * scale
    dy = (ys.reshape(-1, 1) - sy[None, :]) * scale
    dz = (sz[None, :] - canopy_z) * scale
    d2 = dx * dx + dy * dy + dz * dz

    if not np.all(d2 > 0.0):
        hit = int(np.argwhere(~(d2 > 0.0))[0][1])
        raise DegenerateInputError(
            f"light source {sources[hit].id!r} lies on a sample point (zero distance)"
        )

    contrib = ppf[None, :] / (4.0 * math.pi * d2) * conversion
    return contrib.sum(axis=1).reshape(xs.shape)


def total_wattage(sources: Sequence[LightSource]) -> float:
    return float(sum(s.wattage for s in sources))


def spectrum_intensity(source: LightSource, wavelength: int) -> float:
    """Exact-key lookup; JSON payloads carry string keys, so '380' counts too."""
    spd = source.spectrum or {}
    v: Optional[Any] = spd.get(wavelength)
    if v is None:
        v = spd.get(str(wavelength))
    if v is None:
        return 0.0
    intensity = as_number(v, f"spectrum[{wavelength}]")
    if intensity < 0:
        raise LightingInputError(f"spectrum[{wavelength}] of {source.id!r} must be non-negative, got {intensity}")
    return intensity
