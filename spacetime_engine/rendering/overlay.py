"""
Overlay Manager Module
======================

One shared overlay slot that shows at most one chart at a time.

Design:
- Explicit object with an injectable RenderTarget (no ambient globals)
- Chart handles and last series are owned maps, evicted on key change only
- Rendering is deferred through a single-slot FrameScheduler; the deferred
  callback reads the pending request at fire time, so the latest show()
  wins
- Builder or render failures become an error placeholder; no exception
  leaves the overlay
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Optional, Protocol, Tuple

from spacetime_engine.logging import LogEvent, StructuredLogger
from spacetime_engine.rendering.scheduler import FrameScheduler

Sample = Tuple[float, float]

DEFAULT_PADDING = 15


@dataclass(frozen=True)
class ChartSeries:
    """
    Chart content for one overlay key.

    Compared by value: an identical series for the active key is not
    rebuilt.

    Attributes:
        title: Chart heading
        points: Raw (x, y) samples
        trend: Smoothed (x, y) samples
        y_range: Y axis bounds
        x_unit: Time unit label for the x axis
    """

    title: str
    points: Tuple[Sample, ...] = ()
    trend: Tuple[Sample, ...] = ()
    y_range: Tuple[float, float] = (0.0, 1.0)
    x_unit: str = "day"


class RenderTarget(Protocol):
    """Host surface the overlay draws into."""

    def create_chart(self, key: Hashable, series: ChartSeries) -> Any:
        """Build a chart and return its handle."""

    def dispose_chart(self, handle: Any) -> None:
        """Release a chart handle."""

    def reveal(self, handle: Any) -> None:
        """Show the overlay with the given chart."""

    def conceal(self) -> None:
        """Hide the overlay."""

    def move_to(self, x: int, y: int) -> None:
        """Place the overlay's top-left corner."""

    def show_error(self, key: Hashable, message: str) -> None:
        """Show an error placeholder in the overlay."""

    def viewport_size(self) -> Tuple[int, int]:
        """(width, height) of the viewport."""

    def overlay_size(self) -> Tuple[int, int]:
        """(width, height) of the overlay."""


@dataclass
class _RenderRequest:
    key: Hashable
    builder: Callable[[], ChartSeries]
    pointer: Optional[Tuple[int, int]] = None


@dataclass
class OverlayState:
    """Mutable overlay state; at most one active key."""

    active_key: Optional[Hashable] = None
    chart_handles: Dict[Hashable, Any] = field(default_factory=dict)
    last_series: Dict[Hashable, ChartSeries] = field(default_factory=dict)
    visible: bool = False
    tracking_pointer: bool = False
    pointer: Optional[Tuple[int, int]] = None


class OverlayManager:
    """
    Chart overlay lifecycle and positioning.

    Usage:
        overlay = OverlayManager(CanvasRenderTarget(), FrameScheduler())
        overlay.show("region-a", lambda: series, pointer=(120, 80))
        scheduler.run_pending()         # renders once per frame
        overlay.on_pointer_move(130, 90)
        overlay.hide()
        overlay.dispose()               # shutdown only
    """

    def __init__(
        self,
        render_target: RenderTarget,
        scheduler: Optional[FrameScheduler] = None,
        padding: int = DEFAULT_PADDING,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            render_target: Surface that builds and shows charts
            scheduler: Frame scheduler for deferred rendering
            padding: Offset between pointer and overlay, in pixels
            logger: Structured logger (optional)
        """
        self.render_target = render_target
        self.scheduler = scheduler if scheduler is not None else FrameScheduler()
        self.padding = padding
        self.logger = logger

        self.state = OverlayState()
        self._pending: Optional[_RenderRequest] = None

    @property
    def active_key(self) -> Optional[Hashable]:
        return self.state.active_key

    @property
    def visible(self) -> bool:
        return self.state.visible

    @property
    def pending(self) -> bool:
        return self._pending is not None

    # ------------------------------------------------------------- lifecycle

    def show(
        self,
        key: Hashable,
        builder: Callable[[], ChartSeries],
        pointer: Optional[Tuple[int, int]] = None,
    ) -> None:
        """
        Request a chart for key on the next frame.

        Args:
            key: Overlay key (region id, cell key or point id)
            builder: Callable producing the ChartSeries at render time
            pointer: Pointer position in viewport pixels
        """
        if pointer is None and self._pending is not None:
            pointer = self._pending.pointer
        self._pending = _RenderRequest(key=key, builder=builder, pointer=pointer)
        self.state.tracking_pointer = True
        self.scheduler.schedule(self._render_pending)

    def hide(self) -> None:
        """Conceal the overlay; chart handles stay cached."""
        self._pending = None
        self.state.tracking_pointer = False
        if self.state.visible:
            self.render_target.conceal()
            self.state.visible = False
            if self.logger:
                self.logger.debug(
                    event=LogEvent.OVERLAY_HIDDEN,
                    message="Overlay hidden",
                    metadata={'active_key': self.state.active_key},
                )

    def dispose(self) -> None:
        """Release every chart handle and reset state."""
        self._pending = None
        for key, handle in list(self.state.chart_handles.items()):
            self._dispose_handle(key, handle)
        if self.state.visible:
            self.render_target.conceal()
        self.state = OverlayState()

    # -------------------------------------------------------------- rendering

    def _render_pending(self) -> None:
        request, self._pending = self._pending, None
        if request is None:
            return

        state = self.state
        if request.pointer is not None:
            state.pointer = request.pointer

        if state.active_key is not None and state.active_key != request.key:
            previous = state.active_key
            handle = state.chart_handles.pop(previous, None)
            state.last_series.pop(previous, None)
            if handle is not None:
                self._dispose_handle(previous, handle)
        state.active_key = request.key

        try:
            series = request.builder()
        except Exception as e:
            self._fail(request.key, e)
            return

        handle = state.chart_handles.get(request.key)
        if handle is not None and state.last_series.get(request.key) == series:
            self.render_target.reveal(handle)
            if self.logger:
                self.logger.debug(
                    event=LogEvent.OVERLAY_CHART_REUSED,
                    message=f"Chart reused for '{request.key}'",
                    metadata={'key': str(request.key)},
                )
        else:
            try:
                new_handle = self.render_target.create_chart(request.key, series)
            except Exception as e:
                self._fail(request.key, e)
                return
            if handle is not None:
                self._dispose_handle(request.key, handle)
            state.chart_handles[request.key] = new_handle
            state.last_series[request.key] = series
            self.render_target.reveal(new_handle)
            if self.logger:
                self.logger.info(
                    event=LogEvent.OVERLAY_CHART_CREATED,
                    message=f"Chart created for '{request.key}'",
                    metadata={'key': str(request.key), 'points': len(series.points)},
                )

        state.visible = True
        if state.pointer is not None:
            self.reposition(*state.pointer)

    def _fail(self, key: Hashable, error: Exception) -> None:
        self.render_target.show_error(key, str(error))
        self.state.visible = True
        if self.logger:
            self.logger.error(
                event=LogEvent.OVERLAY_BUILD_ERROR,
                message=f"Chart build failed for '{key}'",
                metadata={'key': str(key)},
                exc_info=error,
            )

    def _dispose_handle(self, key: Hashable, handle: Any) -> None:
        self.render_target.dispose_chart(handle)
        if self.logger:
            self.logger.debug(
                event=LogEvent.OVERLAY_CHART_DISPOSED,
                message=f"Chart disposed for '{key}'",
                metadata={'key': str(key)},
            )

    # ------------------------------------------------------------ positioning

    def reposition(self, x: int, y: int) -> Tuple[int, int]:
        """
        Place the overlay next to the pointer.

        Offset by padding to the lower right; flipped to the other side of
        the pointer on overflow, then clamped inside the viewport.

        Returns:
            (left, top) applied to the render target
        """
        viewport_w, viewport_h = self.render_target.viewport_size()
        overlay_w, overlay_h = self.render_target.overlay_size()

        left = x + self.padding
        top = y + self.padding

        if left + overlay_w > viewport_w:
            left = x - self.padding - overlay_w
        if top + overlay_h > viewport_h:
            top = y - self.padding - overlay_h

        left = max(0, min(left, viewport_w - overlay_w))
        top = max(0, min(top, viewport_h - overlay_h))

        self.state.pointer = (x, y)
        self.render_target.move_to(int(left), int(top))
        return (int(left), int(top))

    def on_pointer_move(self, x: int, y: int) -> None:
        """Follow the pointer while a chart is shown."""
        if self.state.tracking_pointer and self.state.visible:
            self.reposition(x, y)
