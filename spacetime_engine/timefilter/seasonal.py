"""
Seasonal projection: remap timestamps onto one reference year.

Month, day and time of day (UTC) are kept; the year is replaced. The
reference year must be a leap year so that February 29 survives. The
original timestamp is kept on each point for display.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from spacetime_engine.geometry.shapes import DataPoint

DEFAULT_REFERENCE_YEAR = 2000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def validate_reference_year(year: int) -> int:
    if not calendar.isleap(year):
        raise ValueError(f"Reference year must be a leap year, got {year}")
    return year


def project_timestamp(timestamp: float, reference_year: int = DEFAULT_REFERENCE_YEAR) -> float:
    """Epoch ms with the year replaced by reference_year."""
    moment = _EPOCH + timedelta(milliseconds=timestamp)
    projected = moment.replace(year=reference_year)
    return (projected - _EPOCH) / _ONE_MS


def project_to_reference_year(
    points: Sequence[DataPoint],
    reference_year: int = DEFAULT_REFERENCE_YEAR,
) -> List[DataPoint]:
    """
    Project every timestamped point onto the reference year.

    Idempotent: projecting projected points changes nothing, and the first
    original timestamp is never overwritten.
    """
    validate_reference_year(reference_year)

    projected = []
    for point in points:
        if point.timestamp is None:
            projected.append(point)
            continue
        original: Optional[float] = point.original_timestamp
        if original is None:
            original = point.timestamp
        projected.append(
            point.with_timestamp(project_timestamp(point.timestamp, reference_year), original)
        )
    return projected


def original_year(point: DataPoint) -> Optional[int]:
    """Calendar year of the point before projection."""
    timestamp = point.display_timestamp
    if timestamp is None:
        return None
    return (_EPOCH + timedelta(milliseconds=timestamp)).year
