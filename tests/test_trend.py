from __future__ import annotations

import pytest

from spacetime_engine.analytics import TrendEngine
from spacetime_engine.analytics.trend import time_unit, y_axis_range


@pytest.mark.parametrize("series", [[], [(0, 1)], [(0, 1), (1, 2)]])
def test_short_series_has_no_trend(series: list) -> None:
    assert TrendEngine().smooth(series) == []


def test_zero_x_range_has_no_trend() -> None:
    assert TrendEngine().smooth([(5, 1), (5, 2), (5, 3)]) == []


def test_sample_count_is_capped() -> None:
    series = [(float(x), float(x % 7)) for x in range(250)]

    trend = TrendEngine().smooth(series)

    assert len(trend) == 100
    assert trend[0][0] == 0.0
    assert trend[-1][0] == 249.0


def test_sample_count_follows_short_series() -> None:
    trend = TrendEngine().smooth([(0, 1), (1, 2), (2, 3), (3, 4)])
    assert len(trend) == 4


def test_constant_series_stays_constant() -> None:
    trend = TrendEngine().smooth([(x, 3.0) for x in range(20)])
    assert all(y == pytest.approx(3.0) for _, y in trend)


def test_linear_series_keeps_its_trend() -> None:
    trend = TrendEngine(bandwidth=0.3).smooth([(x, 2.0 * x) for x in range(50)])
    ys = [y for _, y in trend]

    assert ys == sorted(ys)
    # Symmetric neighbourhood in the middle reproduces the line
    middle = trend[len(trend) // 2]
    assert middle[1] == pytest.approx(2.0 * middle[0], rel=1e-6)


def test_unordered_input_is_sorted_first() -> None:
    ordered = [(x, float(x * x)) for x in range(10)]
    shuffled = ordered[5:] + ordered[:5]

    assert TrendEngine().smooth(shuffled) == TrendEngine().smooth(ordered)


def test_invalid_bandwidth() -> None:
    with pytest.raises(ValueError):
        TrendEngine(bandwidth=0)


def test_y_axis_range() -> None:
    assert y_axis_range([]) == (0.0, 1.0)
    assert y_axis_range([(0, 2), (1, 2)]) == (1.5, 2.5)
    assert y_axis_range([(0, 0), (1, 10)]) == pytest.approx((-1.0, 11.0))


def test_time_unit() -> None:
    day = 86_400_000
    assert time_unit([(0, 1), (30_000, 1)]) == "millisecond"
    assert time_unit([(0, 1), (3 * day, 1)]) == "day"
    assert time_unit([(0, 1), (400 * day, 1)]) == "year"


def test_samples_without_neighbours_are_skipped() -> None:
    trend = TrendEngine().smooth([(0.0, 1.0), (0.01, 1.0), (1.0, 5.0)])

    assert len(trend) < 3
    assert [x for x, _ in trend] == [0.0, 1.0]
    assert all(abs(x - 0.5) > 0.1 for x, _ in trend)
    assert trend[-1][1] == pytest.approx(5.0)
