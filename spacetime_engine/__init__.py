"""
Spacetime Engine
================

Bounded Context: Spatiotemporal aggregation and interactive annotation for
point/region data viewed over time.

Design Philosophy:
- Separation of Concerns: Geometry, Analytics, Time filter, Rendering separated
- Immutable values at the edges (DataPoint, Region, Domain, TimeFilter)
- Stateful pieces own their state explicitly (DomainTracker, TimeFilterEngine,
  OverlayManager); no module-level globals
- Single-threaded and cooperative: no locks

Architecture:

    spacetime_engine/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # DataPoint, Region
    │   ├── detector.py    # RegionDetector (ray casting)
    │   └── cells.py       # GridBinner, HexBinner
    │
    ├── analytics/         # Aggregation (pure reductions + trackers)
    │   ├── aggregation.py # aggregate, summarize, AggregationKind
    │   ├── counter.py     # RegionAggregator, CellAggregator
    │   ├── domain.py      # Domain, DomainTracker
    │   └── trend.py       # TrendEngine
    │
    ├── timefilter/        # Active time window
    │   ├── filter.py      # TimeFilterEngine, TimeFilter
    │   ├── seasonal.py    # Reference-year projection
    │   ├── presets.py     # DurationPreset, minimum gap
    │   └── animation.py   # AnimationStepper
    │
    ├── rendering/         # Overlay + tooltips
    │   ├── overlay.py     # OverlayManager, RenderTarget
    │   ├── scheduler.py   # FrameScheduler
    │   ├── tooltip.py     # TooltipBuilder, TooltipContent
    │   └── visualizer.py  # ChartVisualizer, CanvasRenderTarget
    │
    └── logging/           # Structured JSON logging

Usage:

    # 1. Geometry (immutable)
    from spacetime_engine import DataPoint, Region, RegionDetector

    region = Region.from_feature(feature)
    mask = RegionDetector.detect_points(region, points)

    # 2. Time window
    from spacetime_engine import TimeFilterEngine

    time_engine = TimeFilterEngine()
    time_engine.load(points)
    time_engine.select_preset("week")

    # 3. Aggregate
    from spacetime_engine import RegionAggregator, DomainTracker

    result = RegionAggregator().aggregate(regions, time_engine.active_points, time_engine.time_filter)
    domain = DomainTracker().update(result.color_extent, preserve=True)

    # 4. Overlay
    from spacetime_engine import OverlayManager, CanvasRenderTarget

    overlay = OverlayManager(CanvasRenderTarget())
    overlay.show(region.region_id, build_series, pointer=(120, 80))

    # 5. Or use ViewerSession (spacetime_session) for the whole flow
"""

# Geometry Layer (immutable, stateless)
from spacetime_engine.geometry.shapes import DataPoint, Region
from spacetime_engine.geometry.detector import RegionDetector
from spacetime_engine.geometry.cells import GridBinner, HexBinner

# Analytics Layer
from spacetime_engine.analytics.aggregation import AggregationKind, RegionSummary, aggregate, summarize
from spacetime_engine.analytics.counter import AggregationBucket, CellAggregator, RegionAggregator
from spacetime_engine.analytics.domain import Domain, DomainTracker
from spacetime_engine.analytics.trend import TrendEngine

# Time Filter Layer
from spacetime_engine.timefilter.filter import FilterChange, TimeFilter, TimeFilterEngine, ViewMode
from spacetime_engine.timefilter.presets import DurationPreset

# Rendering Layer
from spacetime_engine.rendering.overlay import ChartSeries, OverlayManager
from spacetime_engine.rendering.scheduler import FrameScheduler, ImmediateScheduler
from spacetime_engine.rendering.tooltip import TooltipBuilder, TooltipContent
from spacetime_engine.rendering.visualizer import CanvasRenderTarget, ChartVisualizer

__all__ = [
    # Geometry
    "DataPoint",
    "Region",
    "RegionDetector",
    "GridBinner",
    "HexBinner",
    # Analytics
    "AggregationKind",
    "RegionSummary",
    "aggregate",
    "summarize",
    "AggregationBucket",
    "CellAggregator",
    "RegionAggregator",
    "Domain",
    "DomainTracker",
    "TrendEngine",
    # Time filter
    "FilterChange",
    "TimeFilter",
    "TimeFilterEngine",
    "ViewMode",
    "DurationPreset",
    # Rendering
    "ChartSeries",
    "OverlayManager",
    "FrameScheduler",
    "ImmediateScheduler",
    "TooltipBuilder",
    "TooltipContent",
    "CanvasRenderTarget",
    "ChartVisualizer",
]

__version__ = "0.3.0"
