#!/usr/bin/env python3
# room_units.py
#
# Room footprint + unit handling. Rooms arrive in the host's native unit
# ("feet" or "meters"); every distance the irradiance model sees is in
# meters, while coordinates handed back to the host stay native.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict

from calc_errors import DegenerateInputError, LightingInputError

FT_TO_M = 0.3048
FT2_TO_M2 = 0.092903

UNITS = ("feet", "meters")


def as_number(value: Any, name: str) -> float:
    """Coerce a JSON-ish value to a finite float or raise LightingInputError."""
    if isinstance(value, bool) or value is None:
        raise LightingInputError(f"{name} must be a number, got {value!r}")
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise LightingInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(v):
        raise LightingInputError(f"{name} must be finite, got {value!r}")
    return v


def to_meters_factor(unit: str) -> float:
    return FT_TO_M if unit == "feet" else 1.0


@dataclass(frozen=True)
class Room:
    length: float
    width: float
    height: float
    unit: str = "meters"

    def __post_init__(self):
        if self.unit not in UNITS:
            raise LightingInputError(f"unit must be one of {UNITS}, got {self.unit!r}")
        for name in ("length", "width", "height"):
            if getattr(self, name) <= 0:
                raise DegenerateInputError(f"room {name} must be positive, got {getattr(self, name)}")

    @classmethod
    def from_dict(cls, room: Dict[str, Any]) -> "Room":
        """Accepts {dimensions: {length, width, height}, unit} (unit defaults to meters)."""
        if not isinstance(room, dict):
            raise LightingInputError("room must be an object")
        dims = room.get("dimensions")
        if not isinstance(dims, dict):
            raise LightingInputError("room.dimensions must be an object")
        unit = room.get("unit") or "meters"
        return cls(
            length=as_number(dims.get("length"), "room.dimensions.length"),
            width=as_number(dims.get("width"), "room.dimensions.width"),
            height=as_number(dims.get("height"), "room.dimensions.height"),
            unit=str(unit),
        )

    @property
    def meters_factor(self) -> float:
        return to_meters_factor(self.unit)

    @property
    def area_m2(self) -> float:
        area = self.length * self.width
        return area * FT2_TO_M2 if self.unit == "feet" else area
