#!/usr/bin/env python3
# spectral_composite.py
# Facility-level spectrum: per-fixture spectral weights averaged bucket by
# bucket over 380–780 nm in 5 nm steps (81 buckets).
#
# Intensity at a bucket is the arithmetic mean over fixtures, so it moves with
# fleet mix rather than scaling with fixture count. Keys must hit the 5 nm
# grid exactly; there is no interpolation.

from __future__ import annotations

from typing import Dict, List, Sequence

from calc_errors import DegenerateInputError
from irradiance import LightSource, spectrum_intensity

WL_MIN = 380
WL_MAX = 780
WL_STEP = 5
WAVELENGTHS = list(range(WL_MIN, WL_MAX + 1, WL_STEP))


def compute_spectrum(sources: Sequence[LightSource]) -> List[Dict[str, float]]:
    if not sources:
        raise DegenerateInputError("cannot average a spectrum over zero fixtures")
    n = float(len(sources))
    out = []
    for wl in WAVELENGTHS:
        total = sum(spectrum_intensity(s, wl) for s in sources)
        out.append({"wavelength": wl, "intensity": total / n})
    return out


def par_fraction(spectrum: Sequence[Dict[str, float]]) -> float:
    """Share of composite intensity inside PAR (400–700 nm); 0 for a dark spectrum."""
    total = sum(p["intensity"] for p in spectrum)
    if total <= 0:
        return 0.0
    par = sum(p["intensity"] for p in spectrum if 400 <= p["wavelength"] <= 700)
    return par / total
