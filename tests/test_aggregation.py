from __future__ import annotations

import math

import pytest

from spacetime_engine.analytics import (
    AggregationKind,
    CellAggregator,
    RegionAggregator,
    RegionSummary,
    aggregate,
    mode,
    summarize,
)
from spacetime_engine.geometry import DataPoint, HexBinner, Region

MS_PER_DAY = 86_400_000.0


def _points(values, timestamp=None):
    return [DataPoint(0, 0, timestamp=timestamp, value=v) for v in values]


def test_empty_sum_is_zero() -> None:
    assert aggregate([], None, AggregationKind.SUM) == 0


def test_empty_after_window_returns_default() -> None:
    points = _points([1, 2, 3], timestamp=1000)

    assert aggregate(points, (0, 10), AggregationKind.SUM) == 0
    assert aggregate(points, (0, 10), AggregationKind.MAX, default_value=1) == 1


def test_repeated_points_collapse_before_outer_kind() -> None:
    points = _points([1, 2, 3, 4], timestamp=100)

    assert aggregate(points, None, AggregationKind.SUM, AggregationKind.MEAN) == 2.5


def test_repeated_points_groups_by_exact_timestamp() -> None:
    points = [
        DataPoint(0, 0, timestamp=1, value=2),
        DataPoint(0, 0, timestamp=1, value=4),
        DataPoint(0, 0, timestamp=2, value=10),
    ]

    assert aggregate(points, None, AggregationKind.SUM, AggregationKind.MAX) == 14
    assert aggregate(points, None, AggregationKind.COUNT, AggregationKind.FIRST) == 2


def test_mode_prefers_first_value_to_reach_top_count() -> None:
    assert mode([1, 2, 2, 3, 3]) == 2
    assert aggregate(_points([1, 2, 2, 3, 3]), None, AggregationKind.MODE) == 2


def test_non_numeric_values() -> None:
    points = _points([2, "n/a", None, 4])

    assert aggregate(points, None, AggregationKind.SUM) == 6
    assert aggregate(points, None, AggregationKind.MEAN) == 1.5
    assert aggregate(points, None, AggregationKind.COUNT) == 4
    assert aggregate(points, None, AggregationKind.MIN) == 2
    assert aggregate(points, None, AggregationKind.MAX) == 4
    assert aggregate(_points(["a", "b"]), None, AggregationKind.MIN, default_value=0) == 0


def test_nan_never_leaks_into_results() -> None:
    result = aggregate(_points([float("nan"), 1.0]), None, AggregationKind.MEAN)
    assert not math.isnan(result)
    assert result == 0.5


def test_window_is_inclusive() -> None:
    points = [DataPoint(0, 0, timestamp=t, value=1) for t in (10, 20, 30)]

    assert aggregate(points, (10, 30), AggregationKind.COUNT) == 3
    assert aggregate(points, (11, 30), AggregationKind.COUNT) == 2


def test_timeless_points_ignore_window() -> None:
    assert aggregate(_points([1, 2]), (100, 200), AggregationKind.SUM) == 3


def test_first_is_not_an_outer_kind() -> None:
    with pytest.raises(ValueError):
        aggregate(_points([1]), None, AggregationKind.FIRST)


def test_kind_parse_is_case_insensitive() -> None:
    assert AggregationKind.parse("mean") is AggregationKind.MEAN
    with pytest.raises(ValueError):
        AggregationKind.parse("median")


def test_summarize() -> None:
    summary = summarize(_points([1, 2, "x", 5]))

    assert summary == RegionSummary(count=4, sum=8.0, avg=2.0, min=0.0, max=5.0)
    assert summarize([]) == RegionSummary()


def test_region_aggregator_buckets_every_region(two_regions: list[Region], daily_points: list[DataPoint]) -> None:
    bad = Region.from_feature({"properties": {"id": "bad"}, "geometry": None})
    aggregator = RegionAggregator(color_kind=AggregationKind.MEAN)

    result = aggregator.aggregate(two_regions + [bad], daily_points, (0, 2 * MS_PER_DAY))

    assert set(result.buckets) == {"south", "north", "bad"}
    assert result.get("south").count == 3
    assert result.get("south").color_value == 1.0
    assert result.get("north").summary.sum == 33.0
    assert result.get("bad").count == 0
    assert result.get("bad").summary == RegionSummary()
    assert result.get("bad").color_value == 0
    assert result.color_extent.as_tuple() == (1.0, 11.0)
    assert aggregator.last_result is result


def test_bucket_series_is_time_ordered(two_regions: list[Region], daily_points: list[DataPoint]) -> None:
    result = RegionAggregator().aggregate(two_regions, list(reversed(daily_points)))

    series = result.get("north").series()
    assert [t for t, _ in series] == sorted(t for t, _ in series)
    assert len(series) == 10


def test_cell_aggregator_uses_its_own_default(daily_points: list[DataPoint]) -> None:
    aggregator = CellAggregator(
        HexBinner(5000),
        color_kind=AggregationKind.MAX,
        elevation_kind=AggregationKind.COUNT,
        include_empty_cells=True,
    )

    result = aggregator.aggregate(daily_points, (100 * MS_PER_DAY, 200 * MS_PER_DAY))

    assert len(result.buckets) == 2
    for bucket in result.buckets.values():
        assert bucket.count == 0
        assert bucket.color_value == 1
        assert bucket.elevation_value == 1
        assert bucket.position is not None
    assert result.color_extent is None


def test_cell_aggregator_drops_empty_cells_by_default(daily_points: list[DataPoint]) -> None:
    aggregator = CellAggregator(HexBinner(5000))

    assert aggregator.aggregate(daily_points, (100 * MS_PER_DAY, 200 * MS_PER_DAY)).buckets == {}

    result = aggregator.aggregate(daily_points)
    assert sorted(b.count for b in result.buckets.values()) == [10, 10]
