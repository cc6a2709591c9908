"""
Trend Module
============

Local-regression smoothing for tooltip time series.

Design:
- Stateless: a trend is recomputed for every tooltip request
- Tri-cube weighted local average at evenly spaced samples
- Samples with zero total weight are skipped, not zero-filled
"""

from typing import List, Sequence, Tuple

import numpy as np

Sample = Tuple[float, float]

MAX_SAMPLES = 100
DEFAULT_BANDWIDTH = 0.3

_MS_PER_MINUTE = 1000 * 60
_MS_PER_HOUR = _MS_PER_MINUTE * 60
_MS_PER_DAY = _MS_PER_HOUR * 24


def _as_arrays(series: Sequence[Sample]) -> Tuple[np.ndarray, np.ndarray]:
    data = np.asarray(series, dtype=float).reshape(-1, 2)
    order = np.argsort(data[:, 0], kind="stable")
    return data[order, 0], data[order, 1]


class TrendEngine:
    """
    Smooths (x, y) series into a trend line of at most 100 samples.

    Usage:
        engine = TrendEngine(bandwidth=0.3)
        trend = engine.smooth([(0, 1.0), (1, 2.0), (2, 1.5), (3, 3.0)])
    """

    def __init__(self, bandwidth: float = DEFAULT_BANDWIDTH, max_samples: int = MAX_SAMPLES):
        """
        Args:
            bandwidth: Fraction of the x range that influences each sample
            max_samples: Upper bound on emitted samples
        """
        if not 0.0 < bandwidth <= 1.0:
            raise ValueError(f"bandwidth must be in (0, 1], got {bandwidth}")
        if max_samples < 2:
            raise ValueError(f"max_samples must be >= 2, got {max_samples}")
        self.bandwidth = float(bandwidth)
        self.max_samples = int(max_samples)

    def smooth(self, series: Sequence[Sample]) -> List[Sample]:
        """
        Tri-cube weighted local average.

        For each sample x, input point j gets weight (1 - (d / bw)^3)^3 with
        d = |x - x_j| / x_range, and weight 0 when d > bw.

        Args:
            series: (x, y) pairs; ordered by x before smoothing

        Returns:
            Trend line samples, empty when fewer than 3 points or zero x range
        """
        if len(series) < 3:
            return []

        xs, ys = _as_arrays(series)
        x_range = xs[-1] - xs[0]
        if not x_range > 0:
            return []

        sample_count = min(self.max_samples, len(xs))
        samples = np.linspace(xs[0], xs[-1], sample_count)

        # (samples, points) distance matrix, normalized by the x range
        distances = np.abs(samples[:, None] - xs[None, :]) / x_range
        weights = np.where(
            distances <= self.bandwidth,
            (1.0 - (distances / self.bandwidth) ** 3) ** 3,
            0.0,
        )
        totals = weights.sum(axis=1)
        keep = totals > 0

        smoothed = (weights[keep] @ ys) / totals[keep]
        return [(float(x), float(y)) for x, y in zip(samples[keep], smoothed)]


def y_axis_range(series: Sequence[Sample]) -> Tuple[float, float]:
    """
    Y axis bounds with 10% padding.

    Flat series get +/- 0.5 around the value; empty series get (0, 1).
    """
    if len(series) == 0:
        return (0.0, 1.0)

    ys = np.asarray(series, dtype=float).reshape(-1, 2)[:, 1]
    low, high = float(ys.min()), float(ys.max())

    if abs(high - low) < 0.001:
        return (low - 0.5, high + 0.5)

    padding = (high - low) * 0.1
    return (low - padding, high + padding)


def time_unit(series: Sequence[Sample]) -> str:
    """Coarsest readable time unit for x values in epoch milliseconds."""
    if len(series) < 2:
        return "day"

    xs = np.asarray(series, dtype=float).reshape(-1, 2)[:, 0]
    span = float(xs.max() - xs.min())

    if span < _MS_PER_MINUTE:
        return "millisecond"
    if span < _MS_PER_HOUR:
        return "minute"
    if span < _MS_PER_DAY:
        return "hour"
    if span < _MS_PER_DAY * 7:
        return "day"
    if span < _MS_PER_DAY * 30:
        return "week"
    if span < _MS_PER_DAY * 365:
        return "month"
    return "year"
