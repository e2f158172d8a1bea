# core/scheduler.py
# This file is part of Sightline - Live Console Views
#
# Serialized execution contexts for view model state transitions

"""Schedulers that serialize work for one view model.

All state transitions of a view model (throttled criteria emissions, store
notifications, refreshes) run as callbacks on a single scheduler, one at
a time, in due-time order. Two implementations share the same small
interface (``now``, ``call_soon``, ``call_later``):

- ``ManualScheduler`` keeps a virtual clock that only moves when told to.
  Tests and the command line front-end use it to step through time
  deterministically.
- ``AsyncioScheduler`` runs callbacks on an asyncio event loop.
"""

from __future__ import annotations
import asyncio
import heapq
import itertools
from typing import Any, Callable, List, Optional, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Interface of a serialized execution context."""

    def now(self) -> float: ...

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> Cancellable: ...

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> Cancellable: ...


class TimerHandle:
    """A callback scheduled on a ManualScheduler."""

    __slots__ = ("due", "seq", "callback", "args", "cancelled")

    def __init__(self, due: float, seq: int, callback: Callable[..., Any], args: tuple):
        self.due = due
        self.seq = seq
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: TimerHandle) -> bool:
        # Same due time runs in scheduling order
        return (self.due, self.seq) < (other.due, other.seq)

    def __repr__(self) -> str:
        state = " cancelled" if self.cancelled else ""
        return f"<TimerHandle due={self.due:.3f} seq={self.seq}{state}>"


class ManualScheduler:
    """Scheduler driven by an explicit virtual clock.

    Callbacks run only inside ``run_pending()``, ``advance()`` or
    ``run_until_idle()``. While advancing, the clock is set to each
    callback's due time before it runs, so callbacks observe the time they
    were scheduled for.

    Example:
        >>> scheduler = ManualScheduler()
        >>> _ = scheduler.call_later(0.5, print, "flushed")
        >>> scheduler.advance(0.4)
        0
        >>> scheduler.advance(0.1)
        flushed
        1
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[TimerHandle] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        return self.call_later(0.0, callback, *args)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        handle = TimerHandle(self._now + max(delay, 0.0), next(self._seq), callback, args)
        heapq.heappush(self._queue, handle)
        return handle

    def run_pending(self) -> int:
        """Run every callback that is due now, including ones they schedule."""
        return self._run_until(self._now)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running callbacks as they fall due.

        Returns:
            Number of callbacks run
        """
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards ({seconds})")
        target = self._now + seconds
        ran = self._run_until(target)
        self._now = target
        return ran

    def run_until_idle(self, max_callbacks: int = 100_000) -> int:
        """Advance through every scheduled callback until none remain."""
        ran = 0
        while True:
            due = self.next_due()
            if due is None:
                return ran
            ran += self._run_until(due)
            if ran > max_callbacks:
                raise RuntimeError(f"Scheduler did not settle after {ran} callbacks")

    def next_due(self) -> Optional[float]:
        self._drop_cancelled()
        return self._queue[0].due if self._queue else None

    def _run_until(self, target: float) -> int:
        ran = 0
        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0].due > target:
                return ran
            handle = heapq.heappop(self._queue)
            self._now = max(self._now, handle.due)
            handle.callback(*handle.args)
            ran += 1

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)

    def __len__(self) -> int:
        return sum(1 for handle in self._queue if not handle.cancelled)


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    ``call_soon`` is thread-safe so that store notifications produced on
    other threads are handed over to the loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time()

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> asyncio.Handle:
        return self.loop.call_soon_threadsafe(callback, *args)

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback, *args)
