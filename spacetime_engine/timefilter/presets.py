"""
Duration presets and the minimum observable window.
"""

from enum import Enum
from typing import Iterable, List, Optional

import numpy as np

MS_PER_SECOND = 1000.0
MS_PER_MINUTE = MS_PER_SECOND * 60
MS_PER_HOUR = MS_PER_MINUTE * 60
MS_PER_DAY = MS_PER_HOUR * 24


class DurationPreset(Enum):
    """
    Named window widths in milliseconds.

    ALL has no fixed width; it always means the full time domain.
    """

    ALL = ("All", None)
    MINUTE = ("Minute", MS_PER_MINUTE)
    HOUR = ("Hour", MS_PER_HOUR)
    DAY = ("Day", MS_PER_DAY)
    WEEK = ("Week", MS_PER_DAY * 7)
    MONTH = ("Month", MS_PER_DAY * 30)
    YEAR = ("Year", MS_PER_DAY * 365)

    def __init__(self, label: str, width_ms: Optional[float]):
        self.label = label
        self.width_ms = width_ms

    @classmethod
    def parse(cls, value) -> "DurationPreset":
        """Parse a preset from its name or label (case-insensitive)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        for preset in cls:
            if preset.name == text or preset.label.upper() == text:
                return preset
        raise ValueError(
            f"Invalid duration preset: {value}. "
            f"Must be one of {[p.label for p in cls]}"
        )


def minimum_gap(timestamps: Iterable[Optional[float]]) -> Optional[float]:
    """
    Smallest strictly positive gap between consecutive sorted timestamps.

    Returns:
        Gap in ms, or None when fewer than two distinct timestamps exist
    """
    values = np.array([t for t in timestamps if t is not None], dtype=float)
    if values.size < 2:
        return None
    gaps = np.diff(np.sort(values))
    gaps = gaps[gaps > 0]
    if gaps.size == 0:
        return None
    return float(gaps.min())


def selectable_presets(min_gap: Optional[float]) -> List[DurationPreset]:
    """Presets at least as wide as the minimum gap (ALL is always selectable)."""
    return [
        preset for preset in DurationPreset
        if preset.width_ms is None or min_gap is None or preset.width_ms >= min_gap
    ]
