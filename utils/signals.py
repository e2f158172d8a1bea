# utils/signals.py
# This file is part of Sightline - Live Console Views
#
# Explicit observer subscriptions with cancel handles

"""Minimal observable primitives.

Observers register a callback and receive a ``Subscription`` that they
must keep to stay registered and cancel to unregister. There is no
ambient dispatch: a ``Signal`` delivers synchronously, in registration
order, on whatever context calls ``send``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional


class Subscription:
    """Handle returned by ``subscribe``; ``cancel()`` stops delivery."""

    __slots__ = ("_on_cancel",)

    def __init__(self, on_cancel: Optional[Callable[[], None]] = None):
        self._on_cancel = on_cancel

    @property
    def active(self) -> bool:
        return self._on_cancel is not None

    def cancel(self) -> None:
        """Unregister the callback. Safe to call more than once."""
        on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel()


class Signal:
    """A synchronous event stream with explicit subscriptions.

    Example:
        >>> did_refresh = Signal()
        >>> sub = did_refresh.subscribe(lambda: print("refreshed"))
        >>> did_refresh.send()
        refreshed
        >>> sub.cancel()
    """

    def __init__(self) -> None:
        self._callbacks: Dict[int, Callable[..., Any]] = {}
        self._next_token = 0

    def subscribe(self, callback: Callable[..., Any]) -> Subscription:
        token = self._next_token
        self._next_token += 1
        self._callbacks[token] = callback
        return Subscription(lambda: self._callbacks.pop(token, None))

    def send(self, *args: Any) -> None:
        # Snapshot so callbacks may unsubscribe while being notified
        for callback in list(self._callbacks.values()):
            callback(*args)

    def __len__(self) -> int:
        return len(self._callbacks)
