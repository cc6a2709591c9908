from __future__ import annotations

from typing import Any

import pytest

from spacetime_engine.geometry.shapes import DataPoint, Region
from spacetime_engine.rendering.overlay import ChartSeries

MS_PER_DAY = 86_400_000.0


class RecordingRenderTarget:
    """RenderTarget double that records every call."""

    def __init__(self, viewport: tuple[int, int] = (1000, 800), overlay: tuple[int, int] = (300, 200)) -> None:
        self.viewport = viewport
        self.overlay = overlay
        self.calls: list[tuple[str, Any]] = []
        self.created: list[Any] = []
        self.disposed: list[Any] = []
        self.errors: list[tuple[Any, str]] = []
        self.position: tuple[int, int] | None = None
        self.visible = False
        self._next_handle = 0

    def create_chart(self, key: Any, series: ChartSeries) -> str:
        self._next_handle += 1
        handle = f"{key}#{self._next_handle}"
        self.created.append(key)
        self.calls.append(("create", key))
        return handle

    def dispose_chart(self, handle: Any) -> None:
        self.disposed.append(handle)
        self.calls.append(("dispose", handle))

    def reveal(self, handle: Any) -> None:
        self.visible = True
        self.calls.append(("reveal", handle))

    def conceal(self) -> None:
        self.visible = False
        self.calls.append(("conceal", None))

    def move_to(self, x: int, y: int) -> None:
        self.position = (x, y)
        self.calls.append(("move", (x, y)))

    def show_error(self, key: Any, message: str) -> None:
        self.visible = True
        self.errors.append((key, message))
        self.calls.append(("error", key))

    def viewport_size(self) -> tuple[int, int]:
        return self.viewport

    def overlay_size(self) -> tuple[int, int]:
        return self.overlay


@pytest.fixture
def render_target() -> RecordingRenderTarget:
    return RecordingRenderTarget()


@pytest.fixture
def triangle() -> Region:
    return Region.from_rings("triangle", [[[0, 0], [2, 0], [1, 2]]])


@pytest.fixture
def two_regions() -> list[Region]:
    return [
        Region.from_rings("south", [[[0, 0], [2, 0], [2, 1], [0, 1]]], {"name": "South"}),
        Region.from_rings("north", [[[0, 1], [2, 1], [2, 2], [0, 2]]], {"name": "North"}),
    ]


@pytest.fixture
def daily_points() -> list[DataPoint]:
    """Ten days of readings: one in the south region, one in the north region per day."""
    points = []
    for day in range(10):
        timestamp = day * MS_PER_DAY
        points.append(DataPoint(lng=0.5, lat=0.5, timestamp=timestamp, value=float(day)))
        points.append(DataPoint(lng=1.5, lat=1.5, timestamp=timestamp, value=float(10 + day)))
    return points


def series(title: str = "chart", values: tuple[float, ...] = (1.0, 2.0, 3.0)) -> ChartSeries:
    points = tuple((float(i), v) for i, v in enumerate(values))
    return ChartSeries(title=title, points=points)
