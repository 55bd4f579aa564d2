"""
Tests for the heatmap grid sampler.
"""

import pytest

from generate_grid import compute_heatmap, compute_room_heatmap, grid_points, heatmap_peak
from irradiance import LightSource
from room_units import Room


def _src(x, y, z, ppf=1800.0):
    return LightSource(id="s", x=x, y=y, z=z, ppf=ppf, wattage=600.0)


def test_default_grid_has_2601_points_without_fixtures():
    points = compute_heatmap([], 10, 10, 3, "meters")
    assert len(points) == 51 * 51
    assert all(p["value"] == 0.0 for p in points)


def test_grid_cardinality_independent_of_fixture_count():
    sources = [_src(2, 2, 3), _src(5, 5, 3), _src(8, 8, 3)]
    assert len(compute_heatmap(sources, 12, 6, 3, "meters")) == 2601


def test_resolution_is_configurable():
    assert len(compute_heatmap([], 10, 10, 3, resolution=10)) == 121


def test_grid_spans_corners_in_native_units():
    xs, ys = grid_points(12.0, 8.0, 4)
    assert (xs[0], ys[0]) == (0.0, 0.0)
    assert (xs[-1], ys[-1]) == (12.0, 8.0)
    # x-major ordering: y advances first
    assert xs[1] == 0.0 and ys[1] == 2.0


def test_center_fixture_peaks_under_itself():
    points = compute_heatmap([_src(5, 5, 3)], 10, 10, 3, "meters")
    peak = heatmap_peak(points)
    assert (peak["x"], peak["y"]) == (5.0, 5.0)

    corners = [p for p in points if p["x"] in (0.0, 10.0) and p["y"] in (0.0, 10.0)]
    assert len(corners) == 4
    assert all(peak["value"] > c["value"] for c in corners)


def test_feet_room_reports_native_coordinates_and_metric_values():
    ft = 1 / 0.3048
    feet = compute_room_heatmap([_src(5 * ft, 5 * ft, 3 * ft)], Room(10 * ft, 10 * ft, 3 * ft, "feet"),
                                resolution=10)
    meters = compute_room_heatmap([_src(5, 5, 3)], Room(10, 10, 3, "meters"), resolution=10)

    assert feet[-1]["x"] == pytest.approx(10 * ft)
    for f, m in zip(feet, meters):
        assert f["value"] == pytest.approx(m["value"])


def test_canopy_plane_is_three_quarters_of_height():
    # Source sitting exactly on the canopy plane above a grid point is degenerate
    from calc_errors import DegenerateInputError
    with pytest.raises(DegenerateInputError):
        compute_heatmap([_src(5, 5, 3.0)], 10, 10, 4.0, "meters")


def test_heatmap_peak_rejects_empty():
    with pytest.raises(ValueError):
        heatmap_peak([])
