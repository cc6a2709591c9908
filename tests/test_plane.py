from __future__ import annotations

import pytest

from spacetime_control import CommandNotAvailableError, InteractionPlane
from spacetime_session import AggregationConfig, ViewerConfig, ViewerSession

from conftest import MS_PER_DAY, RecordingRenderTarget


@pytest.fixture
def plane(render_target: RecordingRenderTarget, two_regions, daily_points) -> InteractionPlane:
    session = ViewerSession(
        ViewerConfig(aggregation=AggregationConfig(layer="region")),
        render_target=render_target,
    )
    session.load(daily_points, two_regions)
    return InteractionPlane(session)


def test_all_commands_registered(plane: InteractionPlane) -> None:
    assert plane.command_registry.available_commands == {
        "hover", "click", "leave", "set_window", "select_preset",
        "set_view_mode", "play", "pause", "tick", "frame",
        "set_aggregation", "set_preserve_domains", "set_column", "filter_categories",
    }


def test_hover_region_then_frame(plane: InteractionPlane, render_target: RecordingRenderTarget) -> None:
    content = plane.dispatch({"command": "hover", "region": "north", "screen_xy": [200, 120]})

    assert content.delegated
    assert plane.dispatch({"command": "FRAME"})
    assert render_target.created == ["north"]
    assert render_target.position == (215, 135)


def test_leave_hides_overlay(plane: InteractionPlane, render_target: RecordingRenderTarget) -> None:
    plane.dispatch({"command": "hover", "region": "south"})
    plane.dispatch({"command": "frame"})

    plane.dispatch({"command": "leave"})

    assert not render_target.visible


def test_unknown_region_is_rejected(plane: InteractionPlane) -> None:
    with pytest.raises(ValueError):
        plane.dispatch({"command": "hover", "region": "east"})


def test_unknown_cell_is_rejected(plane: InteractionPlane) -> None:
    with pytest.raises(ValueError):
        plane.dispatch({"command": "click", "cell": "hex:9:9"})


def test_set_window_parses_iso_strings(plane: InteractionPlane) -> None:
    change = plane.dispatch({
        "command": "set_window",
        "start": "1970-01-02T00:00:00Z",
        "end": "1970-01-04T00:00:00Z",
    })

    assert change.applied
    assert change.time_filter.bounds == (MS_PER_DAY, 3 * MS_PER_DAY)


def test_malformed_messages(plane: InteractionPlane) -> None:
    with pytest.raises(ValueError):
        plane.dispatch({})
    with pytest.raises(ValueError):
        plane.dispatch({"command": "set_window", "start": 0})
    with pytest.raises(ValueError):
        plane.dispatch({"command": "select_preset"})
    with pytest.raises(CommandNotAvailableError):
        plane.dispatch({"command": "zoom"})


def test_preset_and_view_mode(plane: InteractionPlane) -> None:
    assert plane.dispatch({"command": "select_preset", "preset": "day"}).applied
    assert plane.dispatch({"command": "set_view_mode", "view_mode": "seasonal"}) is not None
    assert plane.session.time_engine.view_mode.value == "seasonal"


def test_aggregation_commands_reconfigure_session(plane: InteractionPlane) -> None:
    plane.dispatch({"command": "set_aggregation", "color": "mean", "repeated": "FIRST"})
    plane.dispatch({"command": "set_preserve_domains", "preserve": True})
    plane.dispatch({"command": "set_column", "column": "reading"})

    aggregation = plane.session.config.aggregation
    assert aggregation.color_aggregation == "MEAN"
    assert aggregation.repeated_points_aggregation == "FIRST"
    assert aggregation.preserve_domains
    assert aggregation.column_name == "reading"


def test_filter_categories_command(plane: InteractionPlane) -> None:
    plane.dispatch({"command": "filter_categories", "categories": ["oak"]})
    assert plane.session.categories == frozenset({"oak"})

    plane.dispatch({"command": "filter_categories", "categories": []})
    assert plane.session.categories is None


def test_malformed_aggregation_commands(plane: InteractionPlane) -> None:
    with pytest.raises(ValueError):
        plane.dispatch({"command": "set_aggregation"})
    with pytest.raises(ValueError):
        plane.dispatch({"command": "set_aggregation", "color": "FIRST"})
    with pytest.raises(ValueError):
        plane.dispatch({"command": "set_preserve_domains", "preserve": "yes"})
    with pytest.raises(ValueError):
        plane.dispatch({"command": "filter_categories", "categories": "oak"})
