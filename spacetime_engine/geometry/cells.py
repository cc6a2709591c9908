"""
Cell Binning Module
===================

Assigns points to square or hexagonal cells of a fixed size in metres.

Design:
- Local equirectangular projection around a reference latitude
  (no great-circle geodesy, no antimeridian handling)
- Stable string keys: the same location always maps to the same key
- Vectorised with numpy
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple

import numpy as np

from spacetime_engine.geometry.shapes import DataPoint

METERS_PER_DEGREE = 111_320.0

_SQRT3 = math.sqrt(3.0)


class _Binner(ABC):
    """Shared projection for cell binners."""

    prefix = "cell"

    def __init__(self, size_m: float, reference_lat: float = 0.0):
        """
        Args:
            size_m: Cell size in metres (square side or hexagon radius)
            reference_lat: Latitude used to scale longitude degrees
        """
        if size_m <= 0:
            raise ValueError(f"Cell size must be positive, got {size_m}")
        if not -90.0 < reference_lat < 90.0:
            raise ValueError(f"reference_lat must be in (-90, 90), got {reference_lat}")

        self.size_m = float(size_m)
        self.reference_lat = float(reference_lat)
        self._x_scale = METERS_PER_DEGREE * math.cos(math.radians(reference_lat))
        self._y_scale = METERS_PER_DEGREE

    def _project(self, lngs: np.ndarray, lats: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return lngs * self._x_scale, lats * self._y_scale

    def _unproject(self, xs: np.ndarray, ys: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return xs / self._x_scale, ys / self._y_scale

    @abstractmethod
    def _indices(self, xs: np.ndarray, ys: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Integer cell indices for projected coordinates."""

    @abstractmethod
    def _centers(self, a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Projected centre of each indexed cell."""

    def assign(self, points: Sequence[DataPoint]) -> Tuple[List[str], Dict[str, Tuple[float, float]]]:
        """
        Assign each point to a cell.

        Args:
            points: Points to bin

        Returns:
            Tuple of:
            - keys: Cell key per point (same order as points)
            - centers: {cell_key: (lng, lat)} for every occupied cell
        """
        if len(points) == 0:
            return [], {}

        lngs = np.fromiter((p.lng for p in points), dtype=float, count=len(points))
        lats = np.fromiter((p.lat for p in points), dtype=float, count=len(points))

        a, b = self._indices(*self._project(lngs, lats))
        center_lngs, center_lats = self._unproject(*self._centers(a, b))

        keys = [f"{self.prefix}:{int(i)}:{int(j)}" for i, j in zip(a, b)]
        centers = {}
        for key, lng, lat in zip(keys, center_lngs, center_lats):
            if key not in centers:
                centers[key] = (float(lng), float(lat))

        return keys, centers

    def cell_of(self, lng: float, lat: float) -> str:
        """Cell key for a single location."""
        keys, _ = self.assign([DataPoint(lng=lng, lat=lat)])
        return keys[0]


class GridBinner(_Binner):
    """Square cells with side `size_m`."""

    prefix = "grid"

    def _indices(self, xs, ys):
        return (
            np.floor(xs / self.size_m).astype(np.int64),
            np.floor(ys / self.size_m).astype(np.int64),
        )

    def _centers(self, cols, rows):
        return (cols + 0.5) * self.size_m, (rows + 0.5) * self.size_m


class HexBinner(_Binner):
    """
    Pointy-top hexagons with radius `size_m` (centre to vertex).

    Uses axial (q, r) coordinates with cube rounding.
    """

    prefix = "hex"

    def _indices(self, xs, ys):
        q = (_SQRT3 / 3.0 * xs - ys / 3.0) / self.size_m
        r = (2.0 / 3.0 * ys) / self.size_m
        s = -q - r

        rq, rr, rs = np.round(q), np.round(r), np.round(s)
        dq, dr, ds = np.abs(rq - q), np.abs(rr - r), np.abs(rs - s)

        fix_q = (dq > dr) & (dq > ds)
        fix_r = ~fix_q & (dr > ds)
        rq = np.where(fix_q, -rr - rs, rq)
        rr = np.where(fix_r, -rq - rs, rr)

        return rq.astype(np.int64), rr.astype(np.int64)

    def _centers(self, q, r):
        xs = self.size_m * _SQRT3 * (q + r / 2.0)
        ys = self.size_m * 1.5 * r
        return xs, ys
