#!/usr/bin/env python3
# rect_layout.py
#
# Uniform rectangular fixture grid for a target PPFD.
#
#   footprint = sqrt(ppf / target_ppfd) * 2
#   rows      = floor(length / footprint)
#   cols      = floor(width  / footprint)
#
# Fixtures sit at index 1..rows / 1..cols of an even pitch
# (length/(rows+1), width/(cols+1)), so nothing lands on a wall, and hang
# MOUNT_OFFSET below the ceiling. The footprint is a coverage heuristic, not
# derived from the irradiance kernel.

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Tuple

from calc_errors import LightingInputError
from lighting_config import DEFAULT_MOUNT_OFFSET
from room_units import Room, as_number

logger = logging.getLogger(__name__)


def fixture_footprint(ppf: float, target_ppfd: float) -> float:
    if target_ppfd <= 0:
        raise LightingInputError(f"targetPPFD must be positive, got {target_ppfd}")
    if ppf < 0:
        raise LightingInputError(f"fixture ppf must be non-negative, got {ppf}")
    return math.sqrt(ppf / target_ppfd) * 2.0


def grid_shape(length: float, width: float, footprint: float) -> Tuple[int, int]:
    # A zero-ppf fixture has no footprint: nothing meaningful to place.
    if footprint <= 0:
        return 0, 0
    return int(math.floor(length / footprint)), int(math.floor(width / footprint))


def build_rect_grid(
    room: Room,
    rows: int,
    cols: int,
    mount_offset: float = DEFAULT_MOUNT_OFFSET,
) -> List[Dict[str, float]]:
    """Interior grid positions, x-major, in the room's native unit."""
    positions: List[Dict[str, float]] = []
    if rows <= 0 or cols <= 0:
        return positions
    pitch_x = room.length / (rows + 1)
    pitch_y = room.width / (cols + 1)
    z = room.height - mount_offset
    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            positions.append({"x": float(i * pitch_x), "y": float(j * pitch_y), "z": float(z)})
    return positions


def optimize_layout(
    room: Room,
    target_ppfd: float,
    fixture_model: Dict[str, Any],
    mount_offset: float = DEFAULT_MOUNT_OFFSET,
) -> List[Dict[str, float]]:
    """
    Fixture positions for `fixture_model` ({ppf}) hitting `target_ppfd`.

    A footprint larger than the room is not an error: the answer is simply
    an empty layout.
    """
    if not isinstance(fixture_model, dict):
        raise LightingInputError("fixtureModel must be an object")
    ppf = as_number(fixture_model.get("ppf"), "fixtureModel.ppf")
    target = as_number(target_ppfd, "targetPPFD")

    footprint = fixture_footprint(ppf, target)
    rows, cols = grid_shape(room.length, room.width, footprint)
    positions = build_rect_grid(room, rows, cols, mount_offset)
    logger.info("Layout: footprint=%.3f %s -> %d x %d = %d fixtures",
                footprint, room.unit, rows, cols, len(positions))
    return positions
