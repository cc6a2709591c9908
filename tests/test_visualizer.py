from __future__ import annotations

import numpy as np
import pytest

from spacetime_engine.rendering import CanvasRenderTarget, ChartSeries, ChartVisualizer, OverlayManager, ImmediateScheduler


def _series() -> ChartSeries:
    points = tuple((float(x), float(x % 5)) for x in range(20))
    trend = tuple((float(x), 2.0) for x in range(20))
    return ChartSeries(title="north", points=points, trend=trend, y_range=(-0.4, 4.4))


def test_render_draws_on_blank_canvas() -> None:
    visualizer = ChartVisualizer(width=400, height=240, margin=30)

    image = visualizer.render(_series())

    assert image.shape == (240, 400, 3)
    assert image.dtype == np.uint8
    assert (image != 255).any()


def test_render_handles_empty_series() -> None:
    image = ChartVisualizer().render(ChartSeries(title=""))
    assert image.shape == (300, 500, 3)


def test_error_placeholder_is_drawn() -> None:
    visualizer = ChartVisualizer()
    assert (visualizer.render_error("boom") != visualizer.blank()).any()


def test_canvas_too_small_for_margin() -> None:
    with pytest.raises(ValueError):
        ChartVisualizer(width=50, height=50, margin=40)


def test_canvas_target_tracks_shown_chart() -> None:
    target = CanvasRenderTarget(ChartVisualizer(width=300, height=200, margin=20), viewport=(800, 600))
    overlay = OverlayManager(target, ImmediateScheduler())

    overlay.show("north", _series, pointer=(790, 590))

    assert target.visible
    assert target.created == 1
    assert target.canvas.shape == (200, 300, 3)
    assert target.position == (475, 375)

    overlay.dispose()
    assert target.disposed == 1
    assert target.canvas is None
    assert not target.visible
