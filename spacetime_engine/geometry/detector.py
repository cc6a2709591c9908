"""
Region Detector Module
======================

Stateless membership logic - applies region geometry to points.

Design:
- Pure functions (no state)
- Classic ray casting, vectorised with numpy for whole point sets
- Malformed or degenerate rings classify everything as outside
"""

from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from spacetime_engine.geometry.shapes import DataPoint, Region


def _ring_crossings(ring: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """
    Ray casting against a single ring.

    A crossing is counted for edge (i-1, i) when exactly one endpoint lies
    strictly above the point and the edge's x-intercept at the point's y is
    greater than the point's x. Odd crossing count = inside.

    Args:
        ring: Nx2 array of (x, y) vertices
        xs: Point x coordinates, shape (M,)
        ys: Point y coordinates, shape (M,)

    Returns:
        Boolean mask of shape (M,)
    """
    inside = np.zeros(xs.shape, dtype=bool)
    if len(ring) < 3:
        return inside

    xi, yi = ring[:, 0], ring[:, 1]
    # Previous vertex for every i (edge i-1 -> i, wrapping to the last vertex)
    xj, yj = np.roll(xi, 1), np.roll(yi, 1)

    for k in range(len(ring)):
        straddles = (yi[k] > ys) != (yj[k] > ys)
        if not straddles.any():
            continue
        # Horizontal edges never straddle, so the division is safe where used
        with np.errstate(divide="ignore", invalid="ignore"):
            intercept = (xj[k] - xi[k]) * (ys - yi[k]) / (yj[k] - yi[k]) + xi[k]
        inside ^= straddles & (xs < intercept)

    return inside


class RegionDetector:
    """
    Stateless detector for applying region geometry to points.

    Design Philosophy:
    - All methods are static (no instance state)
    - Polygon: outer ring only; MultiPolygon: any ring of any polygon
    - Never raises on malformed geometry

    Usage:
        inside = RegionDetector.is_point_in_region(point, region)
        mask = RegionDetector.detect_points(region, points)
        region = RegionDetector.locate(point, regions)
    """

    @staticmethod
    def is_point_in_ring(point: Tuple[float, float], ring: np.ndarray) -> bool:
        """Ray casting test for one (x, y) point against one ring."""
        mask = _ring_crossings(
            ring,
            np.array([point[0]], dtype=float),
            np.array([point[1]], dtype=float),
        )
        return bool(mask[0])

    @staticmethod
    def is_point_in_region(point, region: Region) -> bool:
        """
        Check if a point falls inside a region.

        Args:
            point: DataPoint or (lng, lat) tuple
            region: Polygon or MultiPolygon region

        Returns:
            True if inside, False otherwise (always False for empty regions)
        """
        position = point.position if isinstance(point, DataPoint) else point
        return any(
            RegionDetector.is_point_in_ring(position, ring)
            for ring in region.rings()
        )

    @staticmethod
    def detect_points(region: Region, points: Sequence[DataPoint]) -> np.ndarray:
        """
        Detect which points are inside a region.

        Args:
            region: Region geometry
            points: Points to classify

        Returns:
            Boolean mask of shape (N,) where True = inside region
        """
        if len(points) == 0:
            return np.array([], dtype=bool)

        xs = np.fromiter((p.lng for p in points), dtype=float, count=len(points))
        ys = np.fromiter((p.lat for p in points), dtype=float, count=len(points))

        mask = np.zeros(len(points), dtype=bool)
        for ring in region.rings():
            mask |= _ring_crossings(ring, xs, ys)

        return mask

    @staticmethod
    def locate(point, regions: Iterable[Region]) -> Optional[Region]:
        """
        Attribute a point to the first region that contains it.

        Args:
            point: DataPoint or (lng, lat) tuple
            regions: Candidate regions, in priority order

        Returns:
            Containing region, or None
        """
        for region in regions:
            if RegionDetector.is_point_in_region(point, region):
                return region
        return None
