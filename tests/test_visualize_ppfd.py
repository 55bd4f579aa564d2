"""
Tests for heatmap plotting helpers (Agg backend, no display needed).
"""

import pytest

from generate_grid import compute_heatmap
from irradiance import LightSource
from visualize_ppfd import heatmap_data_url, heatmap_frame, load_ppfd_map, save_figures


@pytest.fixture
def points():
    src = LightSource(id="a", x=5.0, y=5.0, z=3.0, ppf=1800.0, wattage=600.0, spectrum={})
    return compute_heatmap([src], 10.0, 10.0, 3.0, resolution=10)


def test_frame_is_y_by_x(points):
    table = heatmap_frame(points)
    assert table.shape == (11, 11)
    assert table.loc[5.0, 5.0] == max(p["value"] for p in points)


def test_empty_points_rejected():
    with pytest.raises(ValueError):
        heatmap_frame([])


def test_save_figures_writes_pngs(points, tmp_path):
    spectrum = [{"wavelength": wl, "intensity": 0.5} for wl in range(380, 781, 5)]
    written = save_figures(points, tmp_path / "out", fixtures=[{"x": 5.0, "y": 5.0}],
                           spectrum=spectrum, dpi=40)
    assert [p.name for p in written] == [
        "ppfd_heatmap_annotated.png", "ppfd_heatmap_overlay.png", "spectrum.png"]
    assert all(p.stat().st_size > 0 for p in written)


def test_data_url(points):
    assert heatmap_data_url(points).startswith("data:image/png;base64,")


def test_load_ppfd_map(tmp_path):
    path = tmp_path / "ppfd_map.txt"
    path.write_text("0.0 0.0 2.25 10.5\n1.0 0.0 2.25 12.0\n")
    assert load_ppfd_map(path) == [{"x": 0.0, "y": 0.0, "value": 10.5},
                                   {"x": 1.0, "y": 0.0, "value": 12.0}]
