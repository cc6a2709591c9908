"""
Bucket Aggregators
==================

Stateful aggregation passes that bucket points per region or per cell.

Design:
- Buckets are transient value objects, recomputed on every pass
- Region case delegates membership to RegionDetector
- Cell case delegates binning to GridBinner / HexBinner
- The last pass is kept so pointer picks can look buckets up by key
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from spacetime_engine.analytics.aggregation import (
    AggregationKind,
    RegionSummary,
    aggregate,
    filter_by_time,
    summarize,
)
from spacetime_engine.analytics.domain import Domain
from spacetime_engine.geometry.cells import GridBinner, HexBinner
from spacetime_engine.geometry.detector import RegionDetector
from spacetime_engine.geometry.shapes import DataPoint, Region
from spacetime_engine.logging import LogEvent, StructuredLogger


@dataclass(frozen=True)
class AggregationBucket:
    """
    Points attributed to one region or cell within the active window.

    Attributes:
        key: Region id or cell key
        points: Member points inside the time window
        color_value: Aggregate driving the color encoding
        elevation_value: Aggregate driving the elevation encoding
        position: (lng, lat) anchor (cell centre, None for regions)
        summary: count/sum/avg/min/max of member values
    """

    key: str
    points: Tuple[DataPoint, ...] = ()
    color_value: Any = 0
    elevation_value: Any = 0
    position: Optional[Tuple[float, float]] = None
    summary: RegionSummary = field(default_factory=RegionSummary)

    @property
    def count(self) -> int:
        return len(self.points)

    def series(self) -> List[Tuple[float, float]]:
        """(timestamp, value) pairs of members with a timestamp, ordered by time."""
        pairs = [
            (p.timestamp, p.value) for p in self.points
            if p.timestamp is not None and p.value is not None
        ]
        return sorted(pairs, key=lambda pair: pair[0])


@dataclass(frozen=True)
class AggregationResult:
    """One aggregation pass: buckets plus fresh color/elevation extents."""

    buckets: Dict[str, AggregationBucket]
    color_extent: Optional[Domain]
    elevation_extent: Optional[Domain]

    def get(self, key: str) -> Optional[AggregationBucket]:
        return self.buckets.get(key)


class _BucketAggregator:
    """Shared configuration for region and cell aggregators."""

    component = "aggregation"

    def __init__(
        self,
        color_kind: AggregationKind = AggregationKind.SUM,
        elevation_kind: AggregationKind = AggregationKind.SUM,
        repeated_points_kind: Optional[AggregationKind] = None,
        default_value: Any = 0,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            color_kind: Aggregation driving the color channel
            elevation_kind: Aggregation driving the elevation channel
            repeated_points_kind: Collapse kind for duplicate timestamps
            default_value: Value for buckets with nothing in the window
            logger: Structured logger (optional)
        """
        self.color_kind = AggregationKind.parse(color_kind)
        self.elevation_kind = AggregationKind.parse(elevation_kind)
        self.repeated_points_kind = (
            AggregationKind.parse(repeated_points_kind) if repeated_points_kind is not None else None
        )
        self.default_value = default_value
        self.logger = logger
        self._last_result: Optional[AggregationResult] = None

    @property
    def last_result(self) -> Optional[AggregationResult]:
        """Result of the latest pass (None before the first pass)."""
        return self._last_result

    def _values(self, members: Sequence[DataPoint]) -> Tuple[Any, Any]:
        color = aggregate(
            members, None, self.color_kind, self.repeated_points_kind, self.default_value
        )
        elevation = aggregate(
            members, None, self.elevation_kind, self.repeated_points_kind, self.default_value
        )
        return color, elevation

    def _finish(self, buckets: Dict[str, AggregationBucket], point_count: int) -> AggregationResult:
        result = AggregationResult(
            buckets=buckets,
            color_extent=Domain.from_values(b.color_value for b in buckets.values() if b.count),
            elevation_extent=Domain.from_values(b.elevation_value for b in buckets.values() if b.count),
        )
        self._last_result = result

        if self.logger:
            self.logger.info(
                event=LogEvent.AGGREGATION_COMPLETED,
                message=f"Aggregated {len(buckets)} buckets",
                metadata={
                    'aggregator': type(self).__name__,
                    'bucket_count': len(buckets),
                    'point_count': point_count,
                },
            )
        return result


class RegionAggregator(_BucketAggregator):
    """
    Buckets points per region.

    Every region gets a bucket; malformed regions get an empty one.

    Usage:
        aggregator = RegionAggregator(color_kind=AggregationKind.MEAN)
        result = aggregator.aggregate(regions, points, time_filter)
        result.get("region-1").summary.avg
    """

    def aggregate(
        self,
        regions: Sequence[Region],
        points: Sequence[DataPoint],
        time_filter=None,
    ) -> AggregationResult:
        """
        Run one aggregation pass.

        Args:
            regions: Region definitions
            points: All points (the window is applied here)
            time_filter: TimeFilter, (start, end) pair or None

        Returns:
            AggregationResult keyed by region id
        """
        filtered = filter_by_time(points, time_filter)
        buckets: Dict[str, AggregationBucket] = {}

        for region in regions:
            if region.is_empty:
                if self.logger:
                    self.logger.debug(
                        event=LogEvent.REGION_MALFORMED,
                        message=f"Region '{region.region_id}' has no usable rings",
                        metadata={'region_id': region.region_id},
                    )
                members: List[DataPoint] = []
            else:
                mask = RegionDetector.detect_points(region, filtered)
                members = [p for p, inside in zip(filtered, mask) if inside]

            color, elevation = self._values(members)
            buckets[region.region_id] = AggregationBucket(
                key=region.region_id,
                points=tuple(members),
                color_value=color,
                elevation_value=elevation,
                summary=summarize(members),
            )

        return self._finish(buckets, len(filtered))


class CellAggregator(_BucketAggregator):
    """
    Buckets points per grid or hexagon cell.

    Cells are laid out over the full point set so that cell keys stay
    stable while the window moves.

    Usage:
        aggregator = CellAggregator(HexBinner(1000), default_value=1)
        result = aggregator.aggregate(points, time_filter)
    """

    def __init__(
        self,
        binner: Union[GridBinner, HexBinner],
        color_kind: AggregationKind = AggregationKind.SUM,
        elevation_kind: AggregationKind = AggregationKind.SUM,
        repeated_points_kind: Optional[AggregationKind] = None,
        default_value: Any = 1,
        include_empty_cells: bool = False,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            binner: Cell layout
            include_empty_cells: Keep cells with no point in the window
                                 (their values are default_value)
        """
        super().__init__(color_kind, elevation_kind, repeated_points_kind, default_value, logger)
        self.binner = binner
        self.include_empty_cells = include_empty_cells

    def aggregate(self, points: Sequence[DataPoint], time_filter=None) -> AggregationResult:
        """
        Run one aggregation pass.

        Args:
            points: All points
            time_filter: TimeFilter, (start, end) pair or None

        Returns:
            AggregationResult keyed by cell key
        """
        keys, centers = self.binner.assign(points)

        cells: Dict[str, List[DataPoint]] = {}
        for key, point in zip(keys, points):
            cells.setdefault(key, []).append(point)

        buckets: Dict[str, AggregationBucket] = {}
        point_count = 0
        for key, cell_points in cells.items():
            members = filter_by_time(cell_points, time_filter)
            if not members and not self.include_empty_cells:
                continue
            point_count += len(members)

            color, elevation = self._values(members)
            buckets[key] = AggregationBucket(
                key=key,
                points=tuple(members),
                color_value=color,
                elevation_value=elevation,
                position=centers[key],
                summary=summarize(members),
            )

        return self._finish(buckets, point_count)
