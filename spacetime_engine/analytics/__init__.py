"""
Analytics Layer
===============

Bounded Context: Windowed aggregation, domains and trends.

Responsibilities:
- Reduce point values per bucket (pure functions)
- Bucket points per region or cell (stateful, last pass kept)
- Maintain color/elevation domains across filter changes
- Smooth tooltip time series

Design Philosophy:
- Pure reductions (aggregate, summarize)
- Mutable trackers with immutable outputs (DomainTracker -> Domain)
- Call-site defaults preserved, never unified
"""

from spacetime_engine.analytics.aggregation import (
    AggregationKind,
    RegionSummary,
    aggregate,
    mode,
    summarize,
)
from spacetime_engine.analytics.counter import (
    AggregationBucket,
    AggregationResult,
    CellAggregator,
    RegionAggregator,
)
from spacetime_engine.analytics.domain import Domain, DomainTracker
from spacetime_engine.analytics.trend import TrendEngine

__all__ = [
    "AggregationKind",
    "RegionSummary",
    "aggregate",
    "mode",
    "summarize",
    "AggregationBucket",
    "AggregationResult",
    "CellAggregator",
    "RegionAggregator",
    "Domain",
    "DomainTracker",
    "TrendEngine",
]
