from __future__ import annotations

import logging

import pytest

from spacetime_engine.geometry import DataPoint, to_epoch_ms
from spacetime_engine.logging import create_logger
from spacetime_engine.timefilter import (
    AnimationStepper,
    DurationPreset,
    TimeFilter,
    TimeFilterEngine,
    ViewMode,
    minimum_gap,
    project_to_reference_year,
)

MS_PER_DAY = 86_400_000.0
MS_PER_HOUR = 3_600_000.0


def test_seasonal_projection_keeps_calendar_position() -> None:
    point = DataPoint(0, 0, timestamp=to_epoch_ms("2019-03-15T12:30:00Z"), value=1)

    (projected,) = project_to_reference_year([point])

    assert projected.timestamp == to_epoch_ms("2000-03-15T12:30:00Z")
    assert projected.original_timestamp == point.timestamp
    assert projected.display_timestamp == point.timestamp


def test_seasonal_projection_is_idempotent() -> None:
    points = [
        DataPoint(0, 0, timestamp=to_epoch_ms("2016-02-29T06:00:00Z")),
        DataPoint(0, 0, timestamp=to_epoch_ms("2021-12-31T23:59:59Z")),
        DataPoint(0, 0),
    ]

    once = project_to_reference_year(points)
    twice = project_to_reference_year(once)

    assert twice == once
    assert once[0].timestamp == to_epoch_ms("2000-02-29T06:00:00Z")
    assert once[2].timestamp is None


def test_reference_year_must_be_leap() -> None:
    with pytest.raises(ValueError):
        project_to_reference_year([], reference_year=2001)


def test_minimum_gap() -> None:
    assert minimum_gap([0, 10, 10, 25]) == 10.0
    assert minimum_gap([5, 5]) is None
    assert minimum_gap([None, 1]) is None


def test_presets_narrower_than_gap_are_excluded(daily_points: list[DataPoint]) -> None:
    engine = TimeFilterEngine()
    engine.load(daily_points)

    presets = engine.available_presets()

    assert engine.min_gap == MS_PER_DAY
    assert DurationPreset.MINUTE not in presets
    assert DurationPreset.HOUR not in presets
    assert DurationPreset.DAY in presets
    assert DurationPreset.ALL in presets


def test_narrow_custom_window_is_rejected(daily_points: list[DataPoint], caplog: pytest.LogCaptureFixture) -> None:
    engine = TimeFilterEngine(logger=create_logger("filter-test"))
    engine.load(daily_points)
    before = engine.time_filter

    with caplog.at_level(logging.WARNING, logger="spacetime_engine.filter-test"):
        change = engine.set_window(0, MS_PER_HOUR)

    assert not change.applied
    assert change.warning
    assert engine.time_filter == before
    assert any("filter.window.rejected" in record.getMessage() for record in caplog.records)


def test_custom_window_is_applied(daily_points: list[DataPoint]) -> None:
    engine = TimeFilterEngine()
    engine.load(daily_points)

    change = engine.set_window(MS_PER_DAY, 3 * MS_PER_DAY)

    assert change.applied
    assert engine.time_filter == TimeFilter(MS_PER_DAY, 3 * MS_PER_DAY, ViewMode.HISTORICAL)


def test_preset_anchors_at_current_start(daily_points: list[DataPoint]) -> None:
    engine = TimeFilterEngine()
    engine.load(daily_points)
    engine.set_window(2 * MS_PER_DAY, 5 * MS_PER_DAY)

    change = engine.select_preset("week")
    assert change.time_filter.bounds == (2 * MS_PER_DAY, 9 * MS_PER_DAY)

    change = engine.select_preset(DurationPreset.ALL)
    assert change.time_filter.bounds == (0.0, 9 * MS_PER_DAY)


def test_narrow_preset_is_rejected(daily_points: list[DataPoint]) -> None:
    engine = TimeFilterEngine()
    engine.load(daily_points)

    change = engine.select_preset("hour")

    assert not change.applied
    assert engine.time_filter.bounds == (0.0, 9 * MS_PER_DAY)


def test_seasonal_bounds_recomputed_on_mode_change() -> None:
    points = [
        DataPoint(0, 0, timestamp=to_epoch_ms("2019-06-01T00:00:00Z"), value=1),
        DataPoint(0, 0, timestamp=to_epoch_ms("2021-02-01T00:00:00Z"), value=2),
    ]
    engine = TimeFilterEngine()
    engine.load(points)
    assert engine.domain == (points[0].timestamp, points[1].timestamp)

    engine.set_view_mode("seasonal")

    assert engine.view_mode is ViewMode.SEASONAL
    assert engine.domain == (to_epoch_ms("2000-02-01T00:00:00Z"), to_epoch_ms("2000-06-01T00:00:00Z"))
    assert engine.time_filter.view_mode is ViewMode.SEASONAL
    assert [p.display_timestamp for p in engine.active_points] == [p.timestamp for p in points]

    engine.set_view_mode(ViewMode.HISTORICAL)
    assert engine.domain == (points[0].timestamp, points[1].timestamp)


def test_timeless_data_has_no_filter() -> None:
    engine = TimeFilterEngine()

    assert engine.load([DataPoint(0, 0, value=1)]) is None
    assert not engine.has_time
    assert not engine.set_window(0, 10).applied

    engine.play()
    assert engine.tick() is None


def test_animation_restarts_wide_windows() -> None:
    stepper = AnimationStepper(10)
    assert stepper.step((0, 90), (0, 100)) == (0, 20)


def test_animation_advances_and_wraps() -> None:
    stepper = AnimationStepper(10)

    assert stepper.step((0, 20), (0, 100)) == (10, 30)
    assert stepper.step((85, 95), (0, 100)) == (0, 10)


def test_animation_speed_is_days_per_tick(daily_points: list[DataPoint]) -> None:
    engine = TimeFilterEngine(animation_speed=2)
    engine.load(daily_points)
    engine.set_window(0, MS_PER_DAY)

    assert engine.tick() is None

    engine.play()
    assert engine.tick().bounds == (2 * MS_PER_DAY, 3 * MS_PER_DAY)

    engine.pause()
    assert engine.tick() is None
