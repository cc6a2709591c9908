"""
Animation Stepper
=================

Advances a time window on every animation tick.

Rules, in order:
1. Window wider than 80% of the domain -> restart at the domain minimum
   with a width of 20% of the domain.
2. Advancing would overrun the domain maximum -> wrap to the domain
   minimum, keeping the current width.
3. Otherwise shift both edges by the increment.
"""

from typing import Tuple

from spacetime_engine.timefilter.presets import MS_PER_DAY

RESTART_THRESHOLD = 0.8
RESTART_FRACTION = 0.2


class AnimationStepper:
    """
    Stateless window stepper.

    Usage:
        stepper = AnimationStepper.from_speed(animation_speed=1)  # one day per tick
        start, end = stepper.step((start, end), (domain_min, domain_max))
    """

    def __init__(self, increment_ms: float):
        if increment_ms <= 0:
            raise ValueError(f"increment_ms must be positive, got {increment_ms}")
        self.increment_ms = float(increment_ms)

    @classmethod
    def from_speed(cls, animation_speed: float) -> "AnimationStepper":
        """Stepper advancing `animation_speed` days per tick."""
        return cls(MS_PER_DAY * animation_speed)

    def step(
        self,
        window: Tuple[float, float],
        domain: Tuple[float, float],
    ) -> Tuple[float, float]:
        """
        Next window.

        Args:
            window: Current (start, end)
            domain: Full (min, max) of the data

        Returns:
            New (start, end)
        """
        start, end = window
        low, high = domain
        total = high - low

        next_start = start + self.increment_ms
        next_end = end + self.increment_ms

        if abs(end - start) > total * RESTART_THRESHOLD:
            next_start = low
            next_end = low + total * RESTART_FRACTION
        elif next_start > high or next_end > high:
            next_start = low
            next_end = low + (end - start)

        return (next_start, next_end)

    def __repr__(self) -> str:
        return f"AnimationStepper(increment_ms={self.increment_ms})"
