"""
Tooltip content for picked points, cells and regions.

A tooltip is either an inline HTML label or a delegation marker telling
the host that the overlay shows a chart instead.
"""

import html
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Sequence, Union

from spacetime_engine.analytics.aggregation import RegionSummary, numeric
from spacetime_engine.analytics.counter import AggregationBucket
from spacetime_engine.geometry.shapes import DataPoint, Region

FactorLevels = Dict[str, Union[Sequence[str], Dict[Any, str]]]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_STYLE = "font-family: sans-serif; font-size: 13px;"


@dataclass(frozen=True)
class TooltipContent:
    """Inline label markup, or delegation to the chart overlay."""

    html: Optional[str] = None
    delegated: bool = False

    @classmethod
    def label(cls, markup: str) -> "TooltipContent":
        return cls(html=markup)

    @classmethod
    def delegate(cls) -> "TooltipContent":
        return cls(delegated=True)


def format_timestamp(timestamp: float) -> str:
    return (_EPOCH + timedelta(milliseconds=timestamp)).strftime("%Y-%m-%d %H:%M:%S")


def _row(label: str, value: str) -> str:
    return f"<div><strong>{html.escape(label)}:</strong> {value}</div>"


def _panel(rows: Sequence[str], max_width: Optional[int] = None) -> str:
    """Wrap label rows in the tooltip container."""
    style = _STYLE if max_width is None else f"{_STYLE} max-width: {max_width}px;"
    return f'<div style="{style}">{"".join(rows)}</div>'


class TooltipBuilder:
    """
    Builds inline HTML labels.

    Usage:
        builder = TooltipBuilder(column_name="species", factor_levels={"species": ["oak", "ash"]})
        builder.point_html(point)
        builder.aggregate_html(bucket)
        builder.region_html(region, summary)
    """

    def __init__(
        self,
        column_name: str = "value",
        aggregation_label: str = "SUM",
        factor_levels: Optional[FactorLevels] = None,
    ):
        self.column_name = column_name
        self.aggregation_label = aggregation_label
        self.factor_levels = factor_levels or {}

    def factor_label(self, value: Any) -> Optional[str]:
        """Level label for a coded value of the tooltip column, if any."""
        levels = self.factor_levels.get(self.column_name)
        if not levels or value is None:
            return None

        if isinstance(levels, dict):
            label = levels.get(value)
            if label is None:
                label = levels.get(str(value))
            return label or None

        number = numeric(value)
        if number is None or not float(number).is_integer():
            return None
        index = int(number)
        if 0 <= index < len(levels):
            return levels[index] or None
        return None

    def _display_value(self, value: Any, decimals: Optional[int] = None) -> str:
        label = self.factor_label(value)
        if label is not None:
            return html.escape(str(label))
        number = numeric(value)
        if decimals is not None and number is not None:
            return f"{number:.{decimals}f}"
        return html.escape(str(value))

    def point_html(self, point: DataPoint) -> str:
        rows = [_row(self.column_name, self._display_value(point.value))]
        if point.display_timestamp is not None:
            rows.append(_row("Time", format_timestamp(point.display_timestamp)))
        return _panel(rows)

    def aggregate_html(self, bucket: AggregationBucket) -> str:
        rows = []
        if bucket.position is not None:
            lng, lat = bucket.position
            rows.append(_row("Location", f"{lat:.4f}, {lng:.4f}"))
        rows.append(_row("Points in cell", str(bucket.count)))
        rows.append(_row(self.aggregation_label, self._display_value(bucket.color_value, decimals=2)))
        return _panel(rows, max_width=300)

    def region_html(self, region: Region, summary: RegionSummary) -> str:
        name = region.properties.get("name", region.region_id)
        rows = [
            f"<div><strong>{html.escape(str(name))}</strong></div>",
            _row("Points", str(summary.count)),
        ]
        if summary.count > 0:
            rows.extend([
                _row("Sum", f"{summary.sum:.2f}"),
                _row("Average", f"{summary.avg:.2f}"),
                _row("Min", f"{summary.min:.2f}"),
                _row("Max", f"{summary.max:.2f}"),
            ])
        return _panel(rows)
