# core/throttle.py
# This file is part of Sightline - Live Console Views
#
# Trailing-edge throttling of change notifications

from __future__ import annotations
from typing import Any, Callable, Generic, Optional, TypeVar

from .scheduler import Cancellable, Scheduler

T = TypeVar("T")


class Throttle(Generic[T]):
    """Coalesces pushed values into at most one delivery per interval.

    The first push after a quiet period starts a timer; pushes that arrive
    before it fires only replace the pending value. When the timer fires the
    latest value is delivered. The timer is not restarted by later pushes,
    so a steady stream of edits still produces a delivery every interval.

    Args:
        scheduler: Context the delivery runs on
        interval: Seconds between a first push and its delivery
        callback: Receives the latest value
    """

    def __init__(self, scheduler: Scheduler, interval: float, callback: Callable[[T], Any]):
        if interval < 0:
            raise ValueError(f"Throttle interval cannot be negative: {interval}")
        self.scheduler = scheduler
        self.interval = interval
        self._callback = callback
        self._latest: Optional[T] = None
        self._timer: Optional[Cancellable] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def push(self, value: T) -> None:
        self._latest = value
        if self._timer is None:
            self._timer = self.scheduler.call_later(self.interval, self._flush)

    def cancel(self) -> None:
        """Drop the pending value, if any."""
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._latest = None

    def _flush(self) -> None:
        value, self._latest, self._timer = self._latest, None, None
        self._callback(value)
