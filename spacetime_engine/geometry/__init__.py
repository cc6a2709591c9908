"""
Geometry Layer
==============

Bounded Context: Pure geometric shapes and spatial queries.

Responsibilities:
- Point and region representation (immutable)
- Point-in-region tests (ray casting)
- Square / hexagonal cell assignment
- NO state, NO aggregation, NO rendering

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Lenient on malformed geometry (empty region, never an exception)
"""

from spacetime_engine.geometry.shapes import DataPoint, Region, to_epoch_ms
from spacetime_engine.geometry.detector import RegionDetector
from spacetime_engine.geometry.cells import GridBinner, HexBinner

__all__ = [
    "DataPoint",
    "Region",
    "to_epoch_ms",
    "RegionDetector",
    "GridBinner",
    "HexBinner",
]
