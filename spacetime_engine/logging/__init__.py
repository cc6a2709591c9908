"""
Structured Logging for the Spacetime Engine
===========================================

Bounded Context: Observability

JSON-structured logging shared by every engine layer.

Design:
- JSON output (one object per line, parseable by log aggregators)
- Typed events (enums prevent typos)
- Contextual metadata (region_id, overlay key, filter bounds, etc.)

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from spacetime_engine.logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="aggregation")
    >>> logger.info(
    ...     event=LogEvent.AGGREGATION_COMPLETED,
    ...     message="Aggregated 3 regions",
    ...     metadata={'bucket_count': 3, 'point_count': 120}
    ... )

Output:
    {
        "timestamp": "2025-10-24T15:30:45.123456+00:00",
        "level": "INFO",
        "component": "aggregation",
        "event": "aggregation.completed",
        "message": "Aggregated 3 regions",
        "metadata": {"bucket_count": 3, "point_count": 120}
    }
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
