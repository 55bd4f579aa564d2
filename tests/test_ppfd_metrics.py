"""
Tests for the Monte Carlo power / uniformity metrics.
"""

import numpy as np
import pytest

from calc_errors import DegenerateInputError
from irradiance import LightSource
from ppfd_metrics import (
    DLI_FACTOR,
    PowerMetrics,
    compute_power_metrics,
    compute_ppfd_metrics,
    format_power_metrics_line,
    round_half_up,
)
from room_units import Room


def _src(x, y, z, ppf=1800.0, wattage=600.0):
    return LightSource(id="s", x=x, y=y, z=z, ppf=ppf, wattage=wattage)


@pytest.fixture
def metrics():
    return compute_power_metrics([_src(5, 5, 3)], Room(10, 10, 3), rng=np.random.default_rng(42))


def test_end_to_end_power_numbers(metrics):
    assert metrics.totalPower == 600.0
    assert metrics.powerDensity == pytest.approx(6.0)


def test_ppfd_statistics_are_ordered_integers(metrics):
    assert isinstance(metrics.avgPPFD, int)
    assert metrics.minPPFD <= metrics.avgPPFD <= metrics.maxPPFD
    assert 0.0 <= metrics.uniformity <= 1.0


def test_dli_and_efficacy_are_numeric(metrics):
    assert isinstance(metrics.dli, float)
    assert isinstance(metrics.efficacy, float)
    assert metrics.dli == pytest.approx(metrics.avgPPFD * DLI_FACTOR * 12, abs=0.6)
    assert metrics.efficacy == pytest.approx(metrics.avgPPFD / 6.0, abs=0.1)


def test_photoperiod_scales_dli():
    room = Room(10, 10, 3)
    m12 = compute_power_metrics([_src(5, 5, 3)], room, rng=np.random.default_rng(1))
    m18 = compute_power_metrics([_src(5, 5, 3)], room, rng=np.random.default_rng(1), photoperiod_hours=18)
    assert m18.dli == pytest.approx(m12.dli * 1.5)


def test_seeded_runs_are_reproducible():
    room = Room(10, 10, 3)
    a = compute_power_metrics([_src(5, 5, 3)], room, rng=np.random.default_rng(7))
    b = compute_power_metrics([_src(5, 5, 3)], room, rng=np.random.default_rng(7))
    assert a == b


def test_feet_and_meters_describe_the_same_room():
    ft = 1 / 0.3048
    feet = compute_power_metrics(
        [_src(5 * ft, 5 * ft, 3 * ft)], Room(10 * ft, 10 * ft, 3 * ft, "feet"),
        rng=np.random.default_rng(3),
    )
    meters = compute_power_metrics([_src(5, 5, 3)], Room(10, 10, 3), rng=np.random.default_rng(3))

    assert feet.totalPower == meters.totalPower
    assert feet.powerDensity == pytest.approx(meters.powerDensity, rel=1e-4)
    assert feet.avgPPFD == pytest.approx(meters.avgPPFD, abs=1)
    assert feet.uniformity == pytest.approx(meters.uniformity, rel=1e-6)


def test_sample_count_is_configurable():
    m = compute_power_metrics([_src(5, 5, 3)], Room(10, 10, 3), samples=1, rng=np.random.default_rng(0))
    # a single sample is its own min, max and average
    assert m.minPPFD == m.avgPPFD == m.maxPPFD
    assert m.uniformity == pytest.approx(1.0)


def test_no_fixtures_is_degenerate():
    with pytest.raises(DegenerateInputError):
        compute_power_metrics([], Room(10, 10, 3))


def test_zero_power_is_degenerate():
    with pytest.raises(DegenerateInputError, match="power"):
        compute_power_metrics([_src(5, 5, 3, wattage=0.0)], Room(10, 10, 3))


def test_ppfd_summary_of_dark_field():
    stats = compute_ppfd_metrics(np.zeros(10))
    assert stats["mean"] == 0.0
    assert stats["uniformity"] == 0.0


def test_ppfd_summary_rejects_empty():
    with pytest.raises(DegenerateInputError):
        compute_ppfd_metrics(np.array([]))


def test_ppfd_summary_values():
    stats = compute_ppfd_metrics(np.array([100.0, 200.0, 300.0]))
    assert stats["mean"] == pytest.approx(200.0)
    assert stats["min"] == 100.0
    assert stats["max"] == 300.0
    assert stats["uniformity"] == pytest.approx(0.5)


@pytest.mark.parametrize("value,expected", [(2.5, 3), (2.49, 2), (0.0, 0), (-0.5, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_format_line_applies_display_precision():
    m = PowerMetrics(600.0, 6.0, 100, 50, 200, 0.5, 103.68, 16.666)
    text = format_power_metrics_line(m.to_message(calculationTime=12.34))
    assert "dli: 103.68 mol/m²/day" in text
    assert "efficacy: 16.7" in text
    assert "time: 12.3 ms" in text
