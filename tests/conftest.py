"""
Shared fixtures: host-shaped fixtures and rooms as the browser posts them.
"""

import pytest


def make_fixture(x, y, z, ppf=1800.0, power=600.0, spectrum=None, fid="fx-1"):
    return {
        "id": fid,
        "position": {"x": x, "y": y, "z": z},
        "model": {
            "specifications": {
                "ppf": ppf,
                "power": power,
                "spectrum": {} if spectrum is None else spectrum,
            }
        },
    }


def make_room(length=10.0, width=10.0, height=3.0, unit="meters"):
    return {"dimensions": {"length": length, "width": width, "height": height}, "unit": unit}


@pytest.fixture
def center_fixture():
    """One 600 W / 1800 µmol/s fixture over the middle of a 10 m room."""
    return make_fixture(5.0, 5.0, 3.0)


@pytest.fixture
def room_10m():
    return make_room()


@pytest.fixture
def calculate_message(center_fixture, room_10m):
    return {"type": "calculate", "data": {"fixtures": [center_fixture], "room": room_10m}}
