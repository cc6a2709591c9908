"""
Aggregation Module
==================

Pure windowed aggregation over point sets.

Design:
- Pure functions (no state)
- Three steps: time window -> repeated-timestamp collapse -> outer reduce
- Empty inputs resolve to the caller's default, never NaN
- Defaults are per call site (0 for summaries, 1 for cell values)

Value handling:
- SUM / MEAN: non-numeric values count as 0, MEAN divides by the full count
- MIN / MAX: non-numeric values are ignored
- COUNT: every value counts
- MODE: values grouped by exact equality (floats by exact value, no
  tolerance); ties go to the first value that reached the top count
"""

import math
from collections import OrderedDict
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from spacetime_engine.geometry.shapes import DataPoint


class AggregationKind(str, Enum):
    """Reduction applied to a list of values."""

    SUM = "SUM"
    MEAN = "MEAN"
    COUNT = "COUNT"
    MIN = "MIN"
    MAX = "MAX"
    MODE = "MODE"
    FIRST = "FIRST"

    @classmethod
    def parse(cls, value) -> "AggregationKind":
        """Parse a kind from a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Invalid aggregation: {value}. "
                f"Must be one of {[k.value for k in cls]}"
            )


# FIRST is only meaningful when collapsing repeated timestamps
OUTER_KINDS = frozenset(k for k in AggregationKind if k is not AggregationKind.FIRST)


def numeric(value: Any) -> Optional[float]:
    """Return value as float if it is a finite number, else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        value = float(value)
        return value if math.isfinite(value) else None
    return None


def reduce_values(values: Sequence[Any], kind: AggregationKind, default_value: Any = 0) -> Any:
    """
    Reduce a list of values with one aggregation kind.

    Args:
        values: Raw values (possibly non-numeric)
        kind: Aggregation kind
        default_value: Returned for empty input (and MIN/MAX with no numbers)

    Returns:
        Aggregated value
    """
    if len(values) == 0:
        return default_value

    if kind is AggregationKind.COUNT:
        return len(values)

    if kind is AggregationKind.FIRST:
        return values[0]

    if kind in (AggregationKind.SUM, AggregationKind.MEAN):
        total = sum(numeric(v) or 0.0 for v in values)
        return total if kind is AggregationKind.SUM else total / len(values)

    if kind in (AggregationKind.MIN, AggregationKind.MAX):
        numbers = [n for n in (numeric(v) for v in values) if n is not None]
        if not numbers:
            return default_value
        return min(numbers) if kind is AggregationKind.MIN else max(numbers)

    if kind is AggregationKind.MODE:
        return mode(values, default_value)

    raise ValueError(f"Unsupported aggregation: {kind}")


def mode(values: Iterable[Any], default_value: Any = None) -> Any:
    """
    Most frequent value; the first value to reach the top count wins ties.

    Example:
        >>> mode([1, 2, 2, 3, 3])
        2
    """
    counts: Dict[Any, int] = {}
    best_count = 0
    best = default_value
    for value in values:
        counts[value] = counts.get(value, 0) + 1
        if counts[value] > best_count:
            best_count = counts[value]
            best = value
    return best


def window_bounds(time_filter) -> Optional[tuple]:
    """Extract (start, end) from a TimeFilter or a 2-sequence; None means no window."""
    if time_filter is None:
        return None
    if hasattr(time_filter, "start") and hasattr(time_filter, "end"):
        return (time_filter.start, time_filter.end)
    start, end = time_filter
    return (start, end)


def filter_by_time(points: Sequence[DataPoint], time_filter) -> List[DataPoint]:
    """
    Keep points whose timestamp falls inside the window (inclusive).

    When no point carries a timestamp the set is returned unfiltered.
    Otherwise points without a timestamp are dropped.
    """
    bounds = window_bounds(time_filter)
    if bounds is None or not any(p.timestamp is not None for p in points):
        return list(points)

    start, end = bounds
    return [
        p for p in points
        if p.timestamp is not None and start <= p.timestamp <= end
    ]


def collapse_repeated(points: Sequence[DataPoint], kind: AggregationKind) -> List[Any]:
    """
    Collapse points sharing an exactly equal timestamp to one value each.

    Groups keep first-seen order.
    """
    groups: "OrderedDict[Any, List[Any]]" = OrderedDict()
    for point in points:
        groups.setdefault(point.timestamp, []).append(point.value)
    return [reduce_values(values, kind, default_value=None) for values in groups.values()]


def aggregate(
    points: Sequence[DataPoint],
    time_filter=None,
    kind: AggregationKind = AggregationKind.SUM,
    repeated_points_kind: Optional[AggregationKind] = None,
    default_value: Any = 0,
) -> Any:
    """
    Windowed aggregate of a point set.

    Args:
        points: Points of one bucket
        time_filter: TimeFilter, (start, end) pair or None for no window
        kind: Outer aggregation (SUM, MEAN, COUNT, MIN, MAX, MODE)
        repeated_points_kind: Collapse kind for exact-duplicate timestamps,
                              None to use raw values
        default_value: Result when nothing remains after filtering

    Returns:
        Aggregated value or default_value

    Example:
        >>> pts = [DataPoint(0, 0, timestamp=100, value=v) for v in (1, 2, 3, 4)]
        >>> aggregate(pts, None, AggregationKind.SUM, AggregationKind.MEAN)
        2.5
    """
    kind = AggregationKind.parse(kind)
    if kind not in OUTER_KINDS:
        raise ValueError(f"{kind.value} cannot be used as the outer aggregation")

    filtered = filter_by_time(points, time_filter)
    if not filtered:
        return default_value

    if repeated_points_kind is not None:
        values = collapse_repeated(filtered, AggregationKind.parse(repeated_points_kind))
    else:
        values = [p.value for p in filtered]

    return reduce_values(values, kind, default_value)


@dataclass(frozen=True)
class RegionSummary:
    """
    Immutable per-bucket summary exposed to collaborators.

    Empty buckets summarize to all zeros.
    """

    count: int = 0
    sum: float = 0.0
    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        """Serialize to JSON-compatible dict."""
        return asdict(self)

    def __str__(self) -> str:
        return f"count={self.count}, sum={self.sum:.2f}, avg={self.avg:.2f}"


def summarize(points: Sequence[DataPoint]) -> RegionSummary:
    """Count/sum/avg/min/max over point values; non-numeric values count as 0."""
    if len(points) == 0:
        return RegionSummary()

    values = [numeric(p.value) or 0.0 for p in points]
    total = sum(values)
    return RegionSummary(
        count=len(values),
        sum=total,
        avg=total / len(values),
        min=min(values),
        max=max(values),
    )
