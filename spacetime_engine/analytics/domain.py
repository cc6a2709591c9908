"""
Domain Module
=============

Value ranges that color and elevation encodings are scaled against.

Design:
- Domain is an immutable value object
- DomainTracker is the only thing that mutates a stored domain
- Preservation works in cycles: the stored domain may grow at most once
  per cycle, and a cycle restarts when the aggregation context changes
  (dataset, filter bounds, aggregation function, grouping key)
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from spacetime_engine.analytics.aggregation import numeric
from spacetime_engine.logging import LogEvent, StructuredLogger


@dataclass(frozen=True)
class Domain:
    """
    Immutable [min, max] range.

    Invariants:
        - min <= max
    """

    min: float
    max: float

    def __post_init__(self):
        """Validate invariants."""
        if self.min > self.max:
            raise ValueError(f"Domain min must be <= max, got [{self.min}, {self.max}]")

    def union(self, other: Optional["Domain"]) -> "Domain":
        """Smallest domain covering both."""
        if other is None:
            return self
        return Domain(min(self.min, other.min), max(self.max, other.max))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.min, self.max)

    @property
    def width(self) -> float:
        return self.max - self.min

    @classmethod
    def categorical(cls, level_count: int) -> "Domain":
        """Domain over factor level indices: [0, level_count - 1]."""
        return cls(0, max(int(level_count) - 1, 0))

    @classmethod
    def from_values(cls, values: Iterable[Any]) -> Optional["Domain"]:
        """
        Extent of the finite numeric values.

        Returns:
            Domain, or None when there is no finite numeric value
        """
        numbers = [n for n in (numeric(v) for v in values) if n is not None]
        if not numbers:
            return None
        return cls(min(numbers), max(numbers))


class DomainTracker:
    """
    Stateful holder for one channel's domain (color or elevation).

    Rules applied by update():
    - categorical levels present -> always [0, levels - 1]
    - preserve=False -> the fresh extent, every call
    - preserve=True, first call of the cycle -> union(stored, fresh)
    - preserve=True, later calls of the cycle -> unchanged

    Usage:
        tracker = DomainTracker("color")
        tracker.observe_context(dataset=1, bounds=(0, 10), aggregation="SUM", key="region")
        domain = tracker.update(Domain(0, 10), preserve=True)
    """

    def __init__(self, channel: str = "color", logger: Optional[StructuredLogger] = None):
        """
        Args:
            channel: Encoding channel name ("color" or "elevation")
            logger: Structured logger (optional)
        """
        self.channel = channel
        self.logger = logger
        self._domain: Optional[Domain] = None
        self._initialized_this_cycle = False
        self._context: Optional[Dict[str, Any]] = None

    @property
    def domain(self) -> Optional[Domain]:
        """Current stored domain (None while unset)."""
        return self._domain

    @property
    def initialized_this_cycle(self) -> bool:
        return self._initialized_this_cycle

    def reset_cycle(self) -> None:
        """Start a new preservation cycle (stored domain is kept)."""
        self._initialized_this_cycle = False
        if self.logger:
            self.logger.debug(
                event=LogEvent.DOMAIN_CYCLE_RESET,
                message=f"{self.channel} domain cycle reset",
                metadata={'channel': self.channel},
            )

    def observe_context(self, **context: Any) -> bool:
        """
        Record the aggregation context; reset the cycle if it changed.

        Returns:
            True when the cycle was reset
        """
        if context == self._context:
            return False
        self._context = dict(context)
        self.reset_cycle()
        return True

    def clear(self) -> None:
        """Forget the stored domain and context entirely."""
        self._domain = None
        self._context = None
        self._initialized_this_cycle = False

    def update(
        self,
        fresh_extent: Optional[Domain],
        preserve: bool,
        categorical_levels: Optional[int] = None,
    ) -> Optional[Domain]:
        """
        Apply the preservation rule to a freshly computed extent.

        Args:
            fresh_extent: Extent of the current aggregation pass (None if empty)
            preserve: Whether domains only grow across filter changes
            categorical_levels: Level count when the grouping column is categorical

        Returns:
            Domain to use for this pass
        """
        previous = self._domain

        if categorical_levels is not None:
            self._domain = Domain.categorical(categorical_levels)
        elif not preserve:
            self._domain = fresh_extent
        elif not self._initialized_this_cycle:
            if fresh_extent is not None:
                self._domain = fresh_extent.union(previous)
                self._initialized_this_cycle = True

        if self.logger and self._domain != previous:
            self.logger.info(
                event=LogEvent.DOMAIN_UPDATED,
                message=f"{self.channel} domain updated",
                metadata={
                    'channel': self.channel,
                    'domain': self._domain.as_tuple() if self._domain else None,
                    'preserve': preserve,
                },
            )

        return self._domain

    def __repr__(self) -> str:
        return f"DomainTracker(channel={self.channel!r}, domain={self._domain})"
