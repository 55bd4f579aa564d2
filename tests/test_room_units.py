"""
Tests for room parsing and unit handling.
"""

import math

import pytest

from calc_errors import DegenerateInputError, LightingInputError
from room_units import Room, as_number
from tests.conftest import make_room


def test_from_dict_defaults_to_meters():
    room = Room.from_dict({"dimensions": {"length": 4, "width": 3, "height": 2}})
    assert room == Room(4.0, 3.0, 2.0, "meters")
    assert room.meters_factor == 1.0
    assert room.area_m2 == 12.0


def test_feet_area_uses_square_foot_factor():
    room = Room.from_dict(make_room(10, 10, 8, "feet"))
    assert room.meters_factor == 0.3048
    assert room.area_m2 == pytest.approx(9.2903)


def test_unknown_unit_rejected():
    with pytest.raises(LightingInputError):
        Room.from_dict(make_room(unit="cubits"))


@pytest.mark.parametrize("dims", [(0, 10, 3), (10, -1, 3), (10, 10, 0)])
def test_non_positive_dimension_is_degenerate(dims):
    with pytest.raises(DegenerateInputError):
        Room.from_dict(make_room(*dims))


@pytest.mark.parametrize("room", [None, {"unit": "meters"}, {"dimensions": {"length": "x"}}])
def test_malformed_room_rejected(room):
    with pytest.raises(LightingInputError):
        Room.from_dict(room)


@pytest.mark.parametrize("value", [None, True, "abc", math.inf, float("nan")])
def test_as_number_rejects(value):
    with pytest.raises(LightingInputError):
        as_number(value, "v")


def test_as_number_accepts_numeric_strings():
    assert as_number("2.5", "v") == 2.5
