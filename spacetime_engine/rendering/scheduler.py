"""
Frame schedulers for deferred overlay rendering.

FrameScheduler holds at most one pending task: scheduling again replaces
the pending task, so a burst of pointer events renders once. The host
drains it with run_pending() on its next frame.
"""

from typing import Callable, Optional


class FrameScheduler:
    """
    Single-slot deferred task queue.

    Usage:
        scheduler = FrameScheduler()
        scheduler.schedule(render)
        scheduler.schedule(render)   # replaces the first request
        scheduler.run_pending()      # render runs once
    """

    def __init__(self):
        self._task: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._task is not None

    def schedule(self, task: Callable[[], None]) -> None:
        self._task = task

    def cancel(self) -> None:
        self._task = None

    def run_pending(self) -> bool:
        """
        Run the pending task, if any.

        Returns:
            True if a task ran
        """
        task, self._task = self._task, None
        if task is None:
            return False
        task()
        return True


class ImmediateScheduler(FrameScheduler):
    """Runs every task synchronously on schedule()."""

    def schedule(self, task: Callable[[], None]) -> None:
        task()
