"""
Geometric Shapes Module
========================

Pure data representations - NO state, NO side effects.

Design:
- Immutable points and regions (frozen dataclass pattern)
- Rings stored as read-only Nx2 numpy arrays of (lng, lat)
- Lenient ingestion: malformed geometry becomes an empty region,
  never an exception
"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import numpy as np

POLYGON = "Polygon"
MULTI_POLYGON = "MultiPolygon"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_epoch_ms(value: Any) -> Optional[float]:
    """
    Normalize a timestamp to epoch milliseconds.

    Accepts numbers (already epoch ms), ISO-8601 strings and datetimes.
    Naive datetimes are read as UTC.

    Returns:
        Epoch milliseconds, or None when value is None

    Raises:
        ValueError: If a string cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Invalid ISO timestamp: {value}") from e
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - _EPOCH).total_seconds() * 1000.0
    raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")


@dataclass(frozen=True)
class DataPoint:
    """
    Immutable observation at a location and (optionally) a time.

    Attributes:
        lng: Longitude in degrees
        lat: Latitude in degrees
        timestamp: Epoch milliseconds, None for timeless data
        value: Observed value (numeric in most datasets, may be anything)
        category: Optional category label
        original_timestamp: Pre-projection timestamp (seasonal view only)
    """

    lng: float
    lat: float
    timestamp: Optional[float] = None
    value: Any = None
    category: Optional[str] = None
    original_timestamp: Optional[float] = None

    @property
    def position(self) -> Tuple[float, float]:
        """(lng, lat) tuple."""
        return (self.lng, self.lat)

    @property
    def display_timestamp(self) -> Optional[float]:
        """Timestamp to show to users (original year when projected)."""
        if self.original_timestamp is not None:
            return self.original_timestamp
        return self.timestamp

    def with_timestamp(self, timestamp: float, original_timestamp: float) -> "DataPoint":
        """Copy with a remapped timestamp."""
        return replace(self, timestamp=timestamp, original_timestamp=original_timestamp)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataPoint":
        """
        Deserialize from a host record.

        Args:
            data: Dictionary with keys lng, lat and optional timestamp,
                  value, category

        Returns:
            DataPoint instance

        Raises:
            ValueError: If coordinates are missing or invalid
        """
        try:
            lng = float(data["lng"])
            lat = float(data["lat"])
        except KeyError as e:
            raise ValueError(f"Missing required point field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid point coordinates: {e}")

        return cls(
            lng=lng,
            lat=lat,
            timestamp=to_epoch_ms(data.get("timestamp")),
            value=data.get("value"),
            category=data.get("category"),
        )


def _as_ring(coords: Any) -> Optional[np.ndarray]:
    """Convert a coordinate sequence to a read-only Nx2 array, None if unusable."""
    try:
        ring = np.asarray(coords, dtype=float)
    except (TypeError, ValueError):
        return None
    if ring.ndim != 2 or ring.shape[0] == 0 or ring.shape[1] < 2:
        return None
    ring = np.ascontiguousarray(ring[:, :2])
    ring.flags.writeable = False
    return ring


def _slug(name: str) -> str:
    return re.sub(r"\s+", "-", name).lower()


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _polygon_group(coordinates: Any) -> Tuple[Tuple[np.ndarray, ...], ...]:
    """Single-polygon ring group; empty when the outer ring is unusable."""
    if not _is_sequence(coordinates):
        return ()
    rings = [_as_ring(ring) for ring in coordinates]
    if not rings or rings[0] is None:
        return ()
    return (tuple(r for r in rings if r is not None),)


@dataclass(frozen=True, eq=False)
class Region:
    """
    Immutable polygon or multi-polygon boundary.

    Design:
    - polygons is a tuple of ring groups; each ring is an Nx2 array
    - Holes are NOT subtracted: for a Polygon only ring 0 is used,
      for a MultiPolygon every ring is additive
    - A region with no rings is valid and simply contains nothing

    Attributes:
        region_id: Unique identifier
        geometry_type: "Polygon" or "MultiPolygon"
        polygons: Ring groups, one per polygon
        properties: Feature properties (name, labels, etc.)
    """

    region_id: str
    geometry_type: str = POLYGON
    polygons: Tuple[Tuple[np.ndarray, ...], ...] = ()
    properties: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate geometry type."""
        if self.geometry_type not in (POLYGON, MULTI_POLYGON):
            raise ValueError(
                f"Invalid geometry_type: {self.geometry_type}. "
                f"Must be '{POLYGON}' or '{MULTI_POLYGON}'"
            )

    @property
    def is_empty(self) -> bool:
        """True when no ring can contain anything."""
        return not any(len(ring) >= 3 for group in self.polygons for ring in group)

    def rings(self) -> Tuple[np.ndarray, ...]:
        """Rings that take part in membership tests."""
        if self.geometry_type == POLYGON:
            return tuple(group[0] for group in self.polygons[:1] if group)
        return tuple(ring for group in self.polygons for ring in group)

    @classmethod
    def from_rings(cls, region_id: str, rings, properties: Optional[Dict[str, Any]] = None) -> "Region":
        """Build a Polygon region from a list of rings."""
        return cls(
            region_id=region_id,
            geometry_type=POLYGON,
            polygons=_polygon_group(rings),
            properties=properties or {},
        )

    @classmethod
    def from_feature(cls, feature: Dict[str, Any], index: int = 0) -> "Region":
        """
        Build a region from a GeoJSON-like feature.

        Id resolution: properties.id, feature id, slugified properties.name,
        then "region-<index>".

        Missing or malformed coordinates give an empty region.
        """
        properties = feature.get("properties")
        if not isinstance(properties, dict):
            properties = {}
        region_id = properties.get("id")
        if region_id is None:
            region_id = feature.get("id")
        if region_id is None and properties.get("name"):
            region_id = _slug(str(properties["name"]))
        if region_id is None:
            region_id = f"region-{index}"

        geometry = feature.get("geometry")
        if not isinstance(geometry, dict):
            geometry = {}
        geometry_type = geometry.get("type", POLYGON)
        coordinates = geometry.get("coordinates")
        if not _is_sequence(coordinates):
            coordinates = []

        if geometry_type == MULTI_POLYGON:
            groups = []
            for polygon in coordinates:
                if not _is_sequence(polygon):
                    continue
                rings = tuple(r for r in (_as_ring(ring) for ring in polygon) if r is not None)
                if rings:
                    groups.append(rings)
            polygons = tuple(groups)
        elif geometry_type == POLYGON:
            polygons = _polygon_group(coordinates)
        else:
            # Points, lines etc. cannot contain anything
            geometry_type = POLYGON
            polygons = ()

        return cls(
            region_id=str(region_id),
            geometry_type=geometry_type,
            polygons=polygons,
            properties=dict(properties),
        )
