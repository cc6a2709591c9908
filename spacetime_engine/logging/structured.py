"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

One JSON object per log record, on a stdlib logger named
spacetime_engine.<component>.

Design:
- Typed events (LogEvent enum)
- Contextual metadata (region_id, overlay key, filter bounds, etc.)
- Records below the logger level are dropped before serialization
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


class StructuredLogger:
    """
    JSON structured logger shared by the engine layers.

    Attributes:
        component: Component name (e.g., "aggregation", "overlay")
        logger: Underlying Python logger instance

    Example:
        >>> logger = StructuredLogger("overlay")
        >>> logger.info(
        ...     event=LogEvent.OVERLAY_CHART_CREATED,
        ...     message="Chart built",
        ...     metadata={'key': 'region-7'}
        ... )
    """

    def __init__(self, component: str, level: int = logging.INFO):
        self.component = component
        self.logger = logging.getLogger(f"spacetime_engine.{component}")
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _log(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[Exception] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        record = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'event': event.value,
            'message': message,
        }
        if metadata:
            record['metadata'] = metadata
        if exc_info is not None:
            record['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info),
            }

        # default=str keeps numpy scalars serializable
        self.logger.log(level, json.dumps(record, default=str), exc_info=exc_info)

    def debug(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Log a recoverable condition.

        Example:
            >>> logger.warning(
            ...     event=LogEvent.FILTER_WINDOW_REJECTED,
            ...     message="Window narrower than data resolution",
            ...     metadata={'width_ms': 500, 'min_gap_ms': 60000}
            ... )
        """
        self._log(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[Exception] = None
    ) -> None:
        """Log a failure; exc_info attaches the exception type and message."""
        self._log(logging.ERROR, event, message, metadata, exc_info)


class JSONFormatter(logging.Formatter):
    """Pass-through formatter: the message is already a JSON document."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(component: str, level: int = logging.INFO) -> StructuredLogger:
    """
    Factory for a StructuredLogger.

    Example:
        >>> logger = create_logger("overlay", level=logging.DEBUG)
    """
    return StructuredLogger(component=component, level=level)
