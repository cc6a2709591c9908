"""
Chart Visualizer Module
=======================

Default canvas backend for the overlay: draws a time series and its trend
line into a numpy image.

Design:
- ChartVisualizer is stateless (pure drawing, configurable styles)
- CanvasRenderTarget implements the RenderTarget protocol on top of it;
  a chart handle is the rendered image
- Uses supervision drawing utilities

Dependencies:
- supervision (draw utilities, Color, Point, Rect)
- numpy (canvas arrays)
"""

from typing import Hashable, Optional, Sequence, Tuple

import numpy as np
import supervision as sv

from spacetime_engine.rendering.overlay import ChartSeries

Sample = Tuple[float, float]


class ChartVisualizer:
    """
    Stateless chart renderer.

    Usage:
        visualizer = ChartVisualizer(width=500, height=300)
        image = visualizer.render(series)
        image = visualizer.render_error("Could not generate plot.")
    """

    def __init__(
        self,
        width: int = 500,
        height: int = 300,
        margin: int = 40,
        background_color: sv.Color = sv.Color(r=255, g=255, b=255),
        axis_color: sv.Color = sv.Color(r=120, g=120, b=120),
        point_color: sv.Color = sv.Color(r=70, g=130, b=180),
        trend_color: sv.Color = sv.Color(r=220, g=20, b=60),
        text_color: sv.Color = sv.Color(r=0, g=0, b=0),
        error_color: sv.Color = sv.Color(r=200, g=0, b=0),
        point_size: int = 4,
        thickness: int = 2,
        text_scale: float = 0.5,
        text_thickness: int = 1,
    ):
        """
        Args:
            width: Canvas width in pixels
            height: Canvas height in pixels
            margin: Plot area inset from every edge
            background_color: Canvas fill
            axis_color: Axis lines
            point_color: Raw sample markers
            trend_color: Trend line
            text_color: Title and labels
            error_color: Error placeholder text
            point_size: Marker side length in pixels
            thickness: Line thickness
            text_scale: Text scale factor
            text_thickness: Text stroke thickness
        """
        if width <= 2 * margin or height <= 2 * margin:
            raise ValueError(f"Canvas {width}x{height} too small for margin {margin}")

        self.width = width
        self.height = height
        self.margin = margin
        self.background_color = background_color
        self.axis_color = axis_color
        self.point_color = point_color
        self.trend_color = trend_color
        self.text_color = text_color
        self.error_color = error_color
        self.point_size = point_size
        self.thickness = thickness
        self.text_scale = text_scale
        self.text_thickness = text_thickness

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def blank(self) -> np.ndarray:
        canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        canvas[:] = self.background_color.as_bgr()
        return canvas

    def _x_bounds(self, series: ChartSeries) -> Tuple[float, float]:
        xs = [x for x, _ in series.points] + [x for x, _ in series.trend]
        if not xs:
            return (0.0, 1.0)
        low, high = min(xs), max(xs)
        if high == low:
            return (low - 0.5, high + 0.5)
        return (low, high)

    def _projector(self, series: ChartSeries):
        x_low, x_high = self._x_bounds(series)
        y_low, y_high = series.y_range
        if y_high == y_low:
            y_low, y_high = y_low - 0.5, y_high + 0.5

        plot_w = self.width - 2 * self.margin
        plot_h = self.height - 2 * self.margin

        def project(sample: Sample) -> sv.Point:
            x, y = sample
            px = self.margin + (x - x_low) / (x_high - x_low) * plot_w
            py = self.height - self.margin - (y - y_low) / (y_high - y_low) * plot_h
            return sv.Point(x=int(round(px)), y=int(round(py)))

        return project

    def _draw_axes(self, frame: np.ndarray) -> np.ndarray:
        origin = sv.Point(x=self.margin, y=self.height - self.margin)
        frame = sv.draw_line(
            scene=frame,
            start=origin,
            end=sv.Point(x=self.width - self.margin, y=self.height - self.margin),
            color=self.axis_color,
            thickness=1,
        )
        return sv.draw_line(
            scene=frame,
            start=origin,
            end=sv.Point(x=self.margin, y=self.margin),
            color=self.axis_color,
            thickness=1,
        )

    def _draw_text(self, frame: np.ndarray, text: str, anchor: sv.Point, color: sv.Color) -> np.ndarray:
        return sv.draw_text(
            scene=frame,
            text=text,
            text_anchor=anchor,
            text_color=color,
            text_scale=self.text_scale,
            text_thickness=self.text_thickness,
            text_padding=4,
            background_color=self.background_color,
        )

    def draw_points(self, frame: np.ndarray, points: Sequence[Sample], project) -> np.ndarray:
        half = self.point_size // 2
        for sample in points:
            center = project(sample)
            frame = sv.draw_filled_rectangle(
                scene=frame,
                rect=sv.Rect(x=center.x - half, y=center.y - half, width=self.point_size, height=self.point_size),
                color=self.point_color,
            )
        return frame

    def draw_trend(self, frame: np.ndarray, trend: Sequence[Sample], project) -> np.ndarray:
        projected = [project(sample) for sample in trend]
        for start, end in zip(projected, projected[1:]):
            frame = sv.draw_line(
                scene=frame,
                start=start,
                end=end,
                color=self.trend_color,
                thickness=self.thickness,
            )
        return frame

    def render(self, series: ChartSeries) -> np.ndarray:
        """
        Draw a chart.

        Args:
            series: Raw samples, trend and axis ranges

        Returns:
            BGR image of shape (height, width, 3)
        """
        frame = self._draw_axes(self.blank())
        project = self._projector(series)

        frame = self.draw_points(frame, series.points, project)
        frame = self.draw_trend(frame, series.trend, project)

        if series.title:
            frame = self._draw_text(
                frame, series.title, sv.Point(x=self.width // 2, y=self.margin // 2), self.text_color
            )
        frame = self._draw_text(
            frame,
            f"time ({series.x_unit})",
            sv.Point(x=self.width // 2, y=self.height - self.margin // 2),
            self.axis_color,
        )
        return frame

    def render_error(self, message: str) -> np.ndarray:
        """Placeholder image carrying an error message."""
        return self._draw_text(
            self.blank(),
            f"Error: {message}",
            sv.Point(x=self.width // 2, y=self.height // 2),
            self.error_color,
        )


class CanvasRenderTarget:
    """
    Off-screen RenderTarget backed by ChartVisualizer.

    Keeps the image currently shown and the overlay's position so hosts
    (and the CLI snapshot) can read them back.
    """

    def __init__(
        self,
        visualizer: Optional[ChartVisualizer] = None,
        viewport: Tuple[int, int] = (1280, 720),
    ):
        self.visualizer = visualizer if visualizer is not None else ChartVisualizer()
        self.viewport = viewport

        self.canvas: Optional[np.ndarray] = None
        self.position: Tuple[int, int] = (0, 0)
        self.visible = False
        self.error: Optional[str] = None
        self.created = 0
        self.disposed = 0

    def create_chart(self, key: Hashable, series: ChartSeries) -> np.ndarray:
        self.created += 1
        return self.visualizer.render(series)

    def dispose_chart(self, handle: np.ndarray) -> None:
        self.disposed += 1
        if handle is self.canvas:
            self.canvas = None

    def reveal(self, handle: np.ndarray) -> None:
        self.canvas = handle
        self.error = None
        self.visible = True

    def conceal(self) -> None:
        self.visible = False

    def move_to(self, x: int, y: int) -> None:
        self.position = (x, y)

    def show_error(self, key: Hashable, message: str) -> None:
        self.canvas = self.visualizer.render_error(message)
        self.error = message
        self.visible = True

    def viewport_size(self) -> Tuple[int, int]:
        return self.viewport

    def overlay_size(self) -> Tuple[int, int]:
        return self.visualizer.size
