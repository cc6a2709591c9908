"""
Time Filter Engine
==================

Maintains the active time window over a loaded point set.

Design:
- TimeFilter is immutable; the engine swaps it on every change
- Historical mode works on raw timestamps, seasonal mode on timestamps
  projected onto one reference year
- Requests narrower than the data's minimum gap are rejected with a
  warning and leave the filter untouched
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from spacetime_engine.geometry.shapes import DataPoint
from spacetime_engine.logging import LogEvent, StructuredLogger
from spacetime_engine.timefilter.animation import AnimationStepper
from spacetime_engine.timefilter.presets import DurationPreset, minimum_gap, selectable_presets
from spacetime_engine.timefilter.seasonal import (
    DEFAULT_REFERENCE_YEAR,
    project_to_reference_year,
    validate_reference_year,
)


class ViewMode(str, Enum):
    """How timestamps are interpreted."""

    HISTORICAL = "historical"
    SEASONAL = "seasonal"

    @classmethod
    def parse(cls, value) -> "ViewMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid view_mode: {value}. Must be 'historical' or 'seasonal'"
            )


@dataclass(frozen=True)
class TimeFilter:
    """
    Immutable time window (inclusive on both ends).

    Attributes:
        start: Window start, epoch ms
        end: Window end, epoch ms
        view_mode: Historical or seasonal timestamps
    """

    start: float
    end: float
    view_mode: ViewMode = ViewMode.HISTORICAL

    def __post_init__(self):
        """Validate invariants."""
        if self.start > self.end:
            raise ValueError(f"TimeFilter start must be <= end, got [{self.start}, {self.end}]")

    @property
    def width(self) -> float:
        return self.end - self.start

    @property
    def bounds(self) -> Tuple[float, float]:
        return (self.start, self.end)

    def contains(self, timestamp: Optional[float]) -> bool:
        return timestamp is not None and self.start <= timestamp <= self.end


@dataclass(frozen=True)
class FilterChange:
    """
    Outcome of a window request.

    Attributes:
        applied: False when the request was rejected
        time_filter: Filter in force after the request
        warning: User-facing reason for a rejection
    """

    applied: bool
    time_filter: Optional[TimeFilter]
    warning: Optional[str] = None


class TimeFilterEngine:
    """
    Owns the window, the view mode and the derived time domain.

    Usage:
        engine = TimeFilterEngine()
        engine.load(points)
        engine.select_preset(DurationPreset.WEEK)
        engine.play(); engine.tick()
        engine.active_points  # points in the current view mode
    """

    def __init__(
        self,
        reference_year: int = DEFAULT_REFERENCE_YEAR,
        animation_speed: float = 1.0,
        view_mode: ViewMode = ViewMode.HISTORICAL,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            reference_year: Leap year used by seasonal projection
            animation_speed: Days advanced per animation tick
            view_mode: Initial view mode
            logger: Structured logger (optional)
        """
        self.reference_year = validate_reference_year(reference_year)
        self.stepper = AnimationStepper.from_speed(animation_speed)
        self.logger = logger

        self._view_mode = ViewMode.parse(view_mode)
        self._source: List[DataPoint] = []
        self._active: List[DataPoint] = []
        self._domain: Optional[Tuple[float, float]] = None
        self._min_gap: Optional[float] = None
        self._filter: Optional[TimeFilter] = None
        self._playing = False

    # ------------------------------------------------------------------ state

    @property
    def view_mode(self) -> ViewMode:
        return self._view_mode

    @property
    def time_filter(self) -> Optional[TimeFilter]:
        """Current window (None for data without timestamps)."""
        return self._filter

    @property
    def active_points(self) -> List[DataPoint]:
        """Points in the current view mode (projected when seasonal)."""
        return self._active

    @property
    def domain(self) -> Optional[Tuple[float, float]]:
        """(min, max) timestamp of the active points."""
        return self._domain

    @property
    def min_gap(self) -> Optional[float]:
        """Smallest positive gap between consecutive timestamps."""
        return self._min_gap

    @property
    def has_time(self) -> bool:
        return self._domain is not None

    @property
    def playing(self) -> bool:
        return self._playing

    # ---------------------------------------------------------------- loading

    def load(self, points: Sequence[DataPoint]) -> Optional[TimeFilter]:
        """Replace the point set and reset the window to the full domain."""
        self._source = list(points)
        return self._rebuild()

    def set_view_mode(self, view_mode) -> Optional[TimeFilter]:
        """Switch mode; bounds are recomputed and the window reset."""
        view_mode = ViewMode.parse(view_mode)
        if view_mode is self._view_mode:
            return self._filter

        self._view_mode = view_mode
        time_filter = self._rebuild()

        if self.logger:
            self.logger.info(
                event=LogEvent.FILTER_VIEW_MODE_CHANGED,
                message=f"View mode set to {view_mode.value}",
                metadata={'view_mode': view_mode.value, 'domain': self._domain},
            )
        return time_filter

    def _rebuild(self) -> Optional[TimeFilter]:
        if self._view_mode is ViewMode.SEASONAL:
            self._active = project_to_reference_year(self._source, self.reference_year)
        else:
            self._active = list(self._source)

        timestamps = [p.timestamp for p in self._active if p.timestamp is not None]
        if timestamps:
            self._domain = (min(timestamps), max(timestamps))
            self._filter = TimeFilter(self._domain[0], self._domain[1], self._view_mode)
        else:
            self._domain = None
            self._filter = None
        self._min_gap = minimum_gap(timestamps)
        return self._filter

    # ---------------------------------------------------------------- windows

    def _reject(self, message: str, metadata: dict) -> FilterChange:
        if self.logger:
            self.logger.warning(
                event=LogEvent.FILTER_WINDOW_REJECTED,
                message=message,
                metadata=metadata,
            )
        return FilterChange(applied=False, time_filter=self._filter, warning=message)

    def _apply(self, start: float, end: float) -> FilterChange:
        self._filter = TimeFilter(start, end, self._view_mode)
        if self.logger:
            self.logger.debug(
                event=LogEvent.FILTER_WINDOW_APPLIED,
                message="Time window applied",
                metadata={'start': start, 'end': end, 'view_mode': self._view_mode.value},
            )
        return FilterChange(applied=True, time_filter=self._filter)

    def set_window(self, start: float, end: float) -> FilterChange:
        """
        Apply a custom window.

        Args:
            start: Window start, epoch ms
            end: Window end, epoch ms

        Returns:
            FilterChange; rejected when narrower than the minimum gap

        Raises:
            ValueError: If start > end
        """
        if start > end:
            raise ValueError(f"Window start must be <= end, got [{start}, {end}]")
        if not self.has_time:
            return self._reject("Data has no timestamps; window ignored", {'start': start, 'end': end})

        width = end - start
        if self._min_gap is not None and width < self._min_gap:
            return self._reject(
                f"Window of {width:g} ms is narrower than the data resolution ({self._min_gap:g} ms)",
                {'width_ms': width, 'min_gap_ms': self._min_gap},
            )
        return self._apply(start, end)

    def available_presets(self) -> List[DurationPreset]:
        """Presets not narrower than the minimum gap."""
        return selectable_presets(self._min_gap)

    def select_preset(self, preset) -> FilterChange:
        """
        Apply a duration preset anchored at the current window start.

        ALL resets the window to the full domain.
        """
        preset = DurationPreset.parse(preset)
        if not self.has_time:
            return self._reject("Data has no timestamps; preset ignored", {'preset': preset.label})
        if preset not in self.available_presets():
            return self._reject(
                f"Preset '{preset.label}' is narrower than the data resolution ({self._min_gap:g} ms)",
                {'preset': preset.label, 'min_gap_ms': self._min_gap},
            )

        if preset.width_ms is None:
            change = self._apply(*self._domain)
        else:
            change = self._apply(self._filter.start, self._filter.start + preset.width_ms)

        if self.logger:
            self.logger.info(
                event=LogEvent.FILTER_PRESET_SELECTED,
                message=f"Preset '{preset.label}' selected",
                metadata={'preset': preset.label, 'window': change.time_filter.bounds},
            )
        return change

    # -------------------------------------------------------------- animation

    def play(self) -> None:
        self._playing = self.has_time

    def pause(self) -> None:
        self._playing = False

    def tick(self) -> Optional[TimeFilter]:
        """
        Advance the window by one animation step when playing.

        Returns:
            New filter, or None when not playing
        """
        if not self._playing or not self.has_time:
            return None

        start, end = self.stepper.step(self._filter.bounds, self._domain)
        self._filter = replace(self._filter, start=start, end=end)

        if self.logger:
            self.logger.debug(
                event=LogEvent.FILTER_ANIMATION_STEP,
                message="Animation step",
                metadata={'start': start, 'end': end},
            )
        return self._filter
