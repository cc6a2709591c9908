"""
Viewer Session - spatiotemporal viewer orchestrator.

This module provides the ViewerSession class which wires the engine layers
together: time filtering, region/cell aggregation with domain tracking,
pointer picks with tooltip content, and the shared chart overlay.

Architecture:
- TimeFilterEngine narrows the point set by the current window and view mode
- RegionAggregator / CellAggregator bucket the window's points
- DomainTracker per channel (color, elevation) keeps domains stable
- OverlayManager is created lazily on the first chart and torn down only
  by shutdown()

Threading Model:
- Single-threaded and cooperative; callers drive the session from one UI
  thread. Deferred overlay rendering runs when the host calls frame().
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from spacetime_engine.analytics.aggregation import AggregationKind, RegionSummary, numeric
from spacetime_engine.analytics.counter import (
    AggregationBucket,
    AggregationResult,
    CellAggregator,
    RegionAggregator,
)
from spacetime_engine.analytics.domain import Domain, DomainTracker
from spacetime_engine.analytics.trend import TrendEngine, time_unit, y_axis_range
from spacetime_engine.geometry.cells import GridBinner, HexBinner
from spacetime_engine.geometry.detector import RegionDetector
from spacetime_engine.geometry.shapes import DataPoint, Region
from spacetime_engine.logging import LogEvent, StructuredLogger
from spacetime_engine.rendering.overlay import ChartSeries, OverlayManager, RenderTarget
from spacetime_engine.rendering.scheduler import FrameScheduler
from spacetime_engine.rendering.tooltip import TooltipBuilder, TooltipContent
from spacetime_engine.rendering.visualizer import CanvasRenderTarget, ChartVisualizer
from spacetime_engine.timefilter.filter import FilterChange, TimeFilter, TimeFilterEngine
from spacetime_engine.timefilter.presets import DurationPreset
from spacetime_session.config import ViewerConfig

logger = logging.getLogger(__name__)

Pickable = Union[AggregationBucket, Region, DataPoint, Dict[str, Any]]


@dataclass(frozen=True)
class PickEvent:
    """
    Pointer pick reported by the host scene.

    Attributes:
        object: Picked bucket, region or point (None when nothing is picked)
        layer_id: Host layer identifier
        screen_xy: Pointer position in viewport pixels
        world_xy: Pointer position as (lng, lat)
    """

    object: Optional[Pickable] = None
    layer_id: Optional[str] = None
    screen_xy: Optional[Tuple[int, int]] = None
    world_xy: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class DomainUpdate:
    """Domain pushed to listeners after every aggregation pass."""

    channel: str
    domain: Optional[Domain]
    categorical: bool = False


DomainListener = Callable[[DomainUpdate], None]

_KEEP = object()


def _reference_latitude(points: Sequence[DataPoint]) -> float:
    """Median latitude of the points, kept clear of the poles."""
    if not points:
        return 0.0
    lat = float(np.median([p.lat for p in points]))
    return float(np.clip(lat, -89.0, 89.0))


class ViewerSession:
    """
    Main viewer session.

    Usage:
        session = ViewerSession(ViewerConfig.from_yaml("viewer.yaml"))
        session.add_domain_listener(print)
        session.load(points, regions)
        result = session.aggregate()

        content = session.hover(PickEvent(object=result.get("north"), screen_xy=(200, 120)))
        session.frame()      # runs the deferred overlay render
        session.shutdown()
    """

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        render_target: Optional[RenderTarget] = None,
        scheduler: Optional[FrameScheduler] = None,
        structured_logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            config: Viewer configuration (defaults when None)
            render_target: Overlay surface (CanvasRenderTarget when None)
            scheduler: Frame scheduler for overlay rendering
            structured_logger: Structured logger shared by every layer
        """
        self.config = config if config is not None else ViewerConfig()
        self.logger = structured_logger
        self.scheduler = scheduler if scheduler is not None else FrameScheduler()
        self._render_target = render_target
        self._overlay: Optional[OverlayManager] = None

        self._reference_lat = 0.0
        self._categories: Optional[FrozenSet[str]] = None

        self.time_engine = TimeFilterEngine(
            reference_year=self.config.reference_year,
            animation_speed=self.config.animation.speed,
            view_mode=self.config.view_mode,
            logger=structured_logger,
        )
        self.aggregator = self._build_aggregator()
        self.tooltips = self._build_tooltips()
        self.color_tracker = DomainTracker("color", logger=structured_logger)
        self.elevation_tracker = DomainTracker("elevation", logger=structured_logger)
        self.trend = TrendEngine(bandwidth=self.config.trend_bandwidth)
        self.regions: List[Region] = []
        self.dataset_version = 0
        self._result: Optional[AggregationResult] = None
        self._listeners: List[DomainListener] = []

    def _build_aggregator(self) -> Union[RegionAggregator, CellAggregator]:
        agg = self.config.aggregation
        kinds = dict(
            color_kind=agg.color_kind,
            elevation_kind=agg.elevation_kind,
            repeated_points_kind=agg.repeated_points_kind,
            logger=self.logger,
        )
        if agg.layer == "region":
            return RegionAggregator(default_value=0, **kinds)

        binner_cls = HexBinner if agg.layer == "hexagon" else GridBinner
        return CellAggregator(
            binner_cls(agg.cell_size_m, reference_lat=self._reference_lat),
            default_value=1,
            include_empty_cells=agg.include_empty_cells,
            **kinds,
        )

    def _build_tooltips(self) -> TooltipBuilder:
        agg = self.config.aggregation
        return TooltipBuilder(
            column_name=agg.column_name,
            aggregation_label=agg.color_kind.value,
            factor_levels=self.config.factor_levels,
        )

    # ----------------------------------------------------------------- overlay

    @property
    def overlay(self) -> OverlayManager:
        """Shared chart overlay, created on first use."""
        if self._overlay is None:
            overlay_cfg = self.config.overlay
            target = self._render_target
            if target is None:
                chart_w, chart_h = overlay_cfg.chart_wh
                target = CanvasRenderTarget(
                    ChartVisualizer(width=chart_w, height=chart_h, margin=overlay_cfg.chart_margin),
                    viewport=overlay_cfg.viewport_wh,
                )
                self._render_target = target
            self._overlay = OverlayManager(
                target,
                scheduler=self.scheduler,
                padding=overlay_cfg.padding,
                logger=self.logger,
            )
        return self._overlay

    @property
    def render_target(self) -> Optional[RenderTarget]:
        return self._render_target

    @property
    def has_overlay(self) -> bool:
        return self._overlay is not None

    # -------------------------------------------------------------------- data

    def load(
        self,
        points: Sequence[Union[DataPoint, Dict[str, Any]]],
        regions: Optional[Sequence[Union[Region, Dict[str, Any]]]] = None,
    ) -> Optional[TimeFilter]:
        """
        Replace the dataset.

        Args:
            points: DataPoints or point dicts (lng, lat, timestamp, value)
            regions: Regions or GeoJSON features

        Returns:
            Time filter reset to the full domain (None without timestamps)
        """
        parsed = [p if isinstance(p, DataPoint) else DataPoint.from_dict(p) for p in points]
        self.regions = [
            r if isinstance(r, Region) else Region.from_feature(r, index)
            for index, r in enumerate(regions or [])
        ]
        self.dataset_version += 1
        self._result = None
        self._categories = None

        self._reference_lat = _reference_latitude(parsed)
        if self.config.aggregation.layer != "region":
            self.aggregator = self._build_aggregator()

        time_filter = self.time_engine.load(parsed)

        if self.logger:
            self.logger.info(
                event=LogEvent.SESSION_DATA_LOADED,
                message=f"Loaded {len(parsed)} points and {len(self.regions)} regions",
                metadata={
                    'point_count': len(parsed),
                    'region_count': len(self.regions),
                    'dataset_version': self.dataset_version,
                    'has_time': self.time_engine.has_time,
                },
            )
        return time_filter

    def add_domain_listener(self, listener: DomainListener) -> None:
        self._listeners.append(listener)

    def remove_domain_listener(self, listener: DomainListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------- aggregation

    @property
    def result(self) -> Optional[AggregationResult]:
        """Latest aggregation pass."""
        return self._result

    def aggregate(self) -> AggregationResult:
        """
        Run one aggregation pass over the current window.

        Domains are updated per channel and pushed to every listener.
        """
        time_filter = self.time_engine.time_filter
        points = self._visible_points()

        if isinstance(self.aggregator, RegionAggregator):
            result = self.aggregator.aggregate(self.regions, points, time_filter)
        else:
            result = self.aggregator.aggregate(points, time_filter)
        self._result = result

        agg = self.config.aggregation
        bounds = time_filter.bounds if time_filter else None
        categorical_levels = self.config.categorical_levels

        updates = []
        for tracker, kind, extent in (
            (self.color_tracker, agg.color_kind, result.color_extent),
            (self.elevation_tracker, agg.elevation_kind, result.elevation_extent),
        ):
            tracker.observe_context(
                dataset=self.dataset_version,
                bounds=bounds,
                view_mode=self.time_engine.view_mode,
                aggregation=kind,
                repeated=agg.repeated_points_kind,
                key=agg.column_name,
                categories=self._categories,
            )
            domain = tracker.update(extent, agg.preserve_domains, categorical_levels)
            updates.append(DomainUpdate(tracker.channel, domain, categorical_levels is not None))

        for update in updates:
            for listener in list(self._listeners):
                listener(update)

        return result

    def summaries(self) -> Dict[str, RegionSummary]:
        """Per-bucket summaries of the latest pass (aggregates if needed)."""
        result = self._result if self._result is not None else self.aggregate()
        return {key: bucket.summary for key, bucket in result.buckets.items()}

    # ------------------------------------------------------------------- picks

    def hover(self, event: PickEvent) -> Optional[TooltipContent]:
        """Pointer moved over a pickable object (or off every object)."""
        return self.handle_pick(event)

    def click(self, event: PickEvent) -> Optional[TooltipContent]:
        return self.handle_pick(event)

    def leave(self) -> None:
        """Pointer left the scene."""
        if self._overlay is not None:
            self._overlay.hide()

    def pointer_move(self, x: int, y: int) -> None:
        if self._overlay is not None:
            self._overlay.on_pointer_move(x, y)

    def handle_pick(self, event: PickEvent) -> Optional[TooltipContent]:
        """
        Resolve tooltip content for a pick.

        With charts enabled and a time series available, the shared
        overlay renders the chart and the tooltip is delegated to it.
        Otherwise an inline label is returned and the overlay is hidden.

        Returns:
            TooltipContent, or None when nothing is picked
        """
        target = event.object
        if isinstance(target, dict):
            target = DataPoint.from_dict(target)

        if target is None:
            self.leave()
            return None

        if isinstance(target, DataPoint) and self.regions:
            region = RegionDetector.locate(target, self.regions)
            if region is not None:
                target = region

        if isinstance(target, Region):
            key = target.region_id
            bucket = self._bucket(key)
            label = self.tooltips.region_html(target, bucket.summary if bucket else RegionSummary())
            title = str(target.properties.get("name", key))
            has_series = bucket is not None and bool(self._numeric_series(bucket.points))
        elif isinstance(target, AggregationBucket):
            key = target.key
            label = self.tooltips.aggregate_html(target)
            title = f"{self.tooltips.aggregation_label} of {self.tooltips.column_name}"
            has_series = bool(self._numeric_series(target.points))
        else:
            key = f"point:{target.lng}:{target.lat}"
            label = self.tooltips.point_html(target)
            title = f"{self.tooltips.column_name} at {target.lat:.4f}, {target.lng:.4f}"
            has_series = bool(self._numeric_series(self._points_at(target.position)))

        if self.config.overlay.charts and has_series:
            self.overlay.show(key, lambda: self._chart_series(key, title), pointer=event.screen_xy)
            return TooltipContent.delegate()

        self.leave()
        return TooltipContent.label(label)

    def frame(self) -> bool:
        """Run deferred overlay work; call once per display frame."""
        return self.scheduler.run_pending()

    def _bucket(self, key: str) -> Optional[AggregationBucket]:
        result = self._result if self._result is not None else self.aggregate()
        return result.get(key)

    def _points_at(self, position: Tuple[float, float]) -> List[DataPoint]:
        time_filter = self.time_engine.time_filter
        return [
            p for p in self._visible_points()
            if p.position == position and (time_filter is None or time_filter.contains(p.timestamp))
        ]

    @staticmethod
    def _numeric_series(points: Sequence[DataPoint]) -> List[Tuple[float, float]]:
        series = []
        for point in points:
            value = numeric(point.value)
            if point.timestamp is not None and value is not None:
                series.append((point.timestamp, value))
        series.sort(key=lambda sample: sample[0])
        return series

    def _chart_series(self, key: str, title: str) -> ChartSeries:
        """Chart content for key, read from the current session state."""
        if key.startswith("point:"):
            _, lng, lat = key.split(":")
            points = self._points_at((float(lng), float(lat)))
        else:
            bucket = self._bucket(key)
            if bucket is None:
                raise KeyError(f"No bucket '{key}' in the current aggregation")
            points = bucket.points

        series = self._numeric_series(points)
        return ChartSeries(
            title=title,
            points=tuple(series),
            trend=tuple(self.trend.smooth(series)),
            y_range=y_axis_range(series),
            x_unit=time_unit(series),
        )

    # -------------------------------------------------------- aggregation controls

    @property
    def categories(self) -> Optional[FrozenSet[str]]:
        """Selected categories (None when every point is shown)."""
        return self._categories

    def available_categories(self) -> List[str]:
        """Distinct category labels of the loaded points."""
        return sorted({str(p.category) for p in self.time_engine.active_points if p.category is not None})

    def filter_categories(self, categories: Optional[Iterable[str]]) -> AggregationResult:
        """
        Keep only points whose category is selected, then re-aggregate.

        Args:
            categories: Labels to keep; None or empty shows every point
        """
        selected = frozenset(str(c) for c in categories) if categories else None
        self._categories = selected

        if self.logger:
            self.logger.info(
                event=LogEvent.FILTER_CATEGORIES_CHANGED,
                message="Category selection changed",
                metadata={'categories': sorted(selected) if selected else None},
            )
        return self.aggregate()

    def set_aggregation(
        self,
        color: Optional[Union[AggregationKind, str]] = None,
        elevation: Optional[Union[AggregationKind, str]] = None,
        repeated: Any = _KEEP,
    ) -> AggregationResult:
        """
        Change the aggregation kinds and re-aggregate.

        Args:
            color: Outer kind for the color channel (unchanged when None)
            elevation: Outer kind for the elevation channel (unchanged when None)
            repeated: Repeated-points kind; None disables collapsing

        Raises:
            ValueError: If a kind is unknown or not allowed as outer kind
        """
        changes: Dict[str, Any] = {}
        if color is not None:
            changes['color_aggregation'] = AggregationKind.parse(color).value
        if elevation is not None:
            changes['elevation_aggregation'] = AggregationKind.parse(elevation).value
        if repeated is not _KEEP:
            changes['repeated_points_aggregation'] = (
                AggregationKind.parse(repeated).value if repeated is not None else None
            )
        return self._reconfigure(changes, rebuild_aggregator=True)

    def set_preserve_domains(self, preserve: bool) -> AggregationResult:
        """Toggle domain preservation and re-aggregate."""
        return self._reconfigure({'preserve_domains': bool(preserve)})

    def set_column(self, column_name: str) -> AggregationResult:
        """Change the grouping column (tooltip label and factor levels) and re-aggregate."""
        if not column_name:
            raise ValueError("column_name must be a non-empty string")
        return self._reconfigure({'column_name': str(column_name)})

    def _reconfigure(self, changes: Dict[str, Any], rebuild_aggregator: bool = False) -> AggregationResult:
        # replace() re-runs config validation before anything is swapped
        aggregation = replace(self.config.aggregation, **changes)
        self.config = replace(self.config, aggregation=aggregation)

        if rebuild_aggregator:
            self.aggregator = self._build_aggregator()
        self.tooltips = self._build_tooltips()

        if self.logger:
            self.logger.info(
                event=LogEvent.SESSION_AGGREGATION_CHANGED,
                message="Aggregation settings changed",
                metadata=dict(changes),
            )
        return self.aggregate()

    def _visible_points(self) -> List[DataPoint]:
        points = self.time_engine.active_points
        if self._categories is None:
            return list(points)
        return [p for p in points if p.category is not None and str(p.category) in self._categories]

    # ------------------------------------------------------------- time filter

    def _refresh(self, change: Optional[FilterChange] = None) -> None:
        if change is None or change.applied:
            self.aggregate()

    def set_window(self, start: float, end: float) -> FilterChange:
        change = self.time_engine.set_window(start, end)
        self._refresh(change)
        return change

    def select_preset(self, preset: Union[DurationPreset, str]) -> FilterChange:
        change = self.time_engine.select_preset(preset)
        self._refresh(change)
        return change

    def available_presets(self) -> List[DurationPreset]:
        return self.time_engine.available_presets()

    def set_view_mode(self, view_mode) -> Optional[TimeFilter]:
        time_filter = self.time_engine.set_view_mode(view_mode)
        self._refresh()
        return time_filter

    def play(self) -> None:
        self.time_engine.play()

    def pause(self) -> None:
        self.time_engine.pause()

    def tick(self) -> Optional[TimeFilter]:
        """Advance the animation one step and re-aggregate."""
        time_filter = self.time_engine.tick()
        if time_filter is not None:
            self.aggregate()
        return time_filter

    # ---------------------------------------------------------------- shutdown

    def shutdown(self) -> None:
        """Release the overlay and its chart handles."""
        if self._overlay is not None:
            self._overlay.dispose()
            self._overlay = None
        self.scheduler.cancel()

        if self.logger:
            self.logger.info(
                event=LogEvent.SESSION_SHUTDOWN,
                message="Viewer session shut down",
                metadata={'dataset_version': self.dataset_version},
            )
        logger.debug("Session shutdown complete")
