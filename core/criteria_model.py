# core/criteria_model.py
# This file is part of Sightline - Live Console Views
#
# Holder of the current console criteria with throttled change events

from __future__ import annotations
from typing import Any, Callable, Optional, Set

from model.criteria import Criteria, SearchCriteria
from utils.config import ConsoleConfig
from utils.logger import get_logger
from utils.signals import Signal, Subscription
from .scheduler import Cancellable, Scheduler
from .throttle import Throttle


class CriteriaModel:
    """Current console criteria and the events announcing their changes.

    Each edit replaces the criteria snapshot immediately; subscribers are
    told about it later, on the scheduler, with the snapshot current at
    delivery time. How much later depends on what was edited:

    - structured criteria (``update``): throttled, by default 0.5 s;
    - the "only errors" switch: on the next scheduler tick, once per edit;
    - the filter term: throttled, by default 0.25 s.

    Args:
        scheduler: Context change events are delivered on
        criteria: Initial criteria
        config: Source of the throttle intervals
    """

    def __init__(
        self,
        scheduler: Scheduler,
        criteria: Optional[Criteria] = None,
        config: Optional[ConsoleConfig] = None,
    ):
        config = config or ConsoleConfig()
        self.scheduler = scheduler
        self._criteria = criteria or Criteria()
        self._changed = Signal()
        self._search = Throttle(scheduler, config.criteria_throttle, self._emit)
        self._filter_term = Throttle(scheduler, config.filter_term_throttle, self._emit)
        self._toggles: Set[Cancellable] = set()
        self._closed = False
        self.logger = get_logger()

    @property
    def criteria(self) -> Criteria:
        return self._criteria

    def update(self, search: SearchCriteria) -> None:
        """Replace the structured criteria."""
        self._criteria = self._criteria.with_search(search)
        self._search.push("criteria")

    def set_only_errors(self, only_errors: bool) -> None:
        self._criteria = self._criteria.with_only_errors(only_errors)
        handle = None

        def deliver():
            self._toggles.discard(handle)
            self._emit("only_errors")

        handle = self.scheduler.call_soon(deliver)
        self._toggles.add(handle)

    def set_filter_term(self, filter_term: str) -> None:
        self._criteria = self._criteria.with_filter_term(filter_term)
        self._filter_term.push("filter_term")

    def subscribe(self, callback: Callable[[Criteria], Any]) -> Subscription:
        """Receive the criteria snapshot after each (throttled) change."""
        return self._changed.subscribe(callback)

    @property
    def has_pending_changes(self) -> bool:
        return self._search.pending or self._filter_term.pending or bool(self._toggles)

    def close(self) -> None:
        """Cancel undelivered change events."""
        self._closed = True
        self._search.cancel()
        self._filter_term.cancel()
        for handle in self._toggles:
            handle.cancel()
        self._toggles.clear()

    def _emit(self, field_class: str) -> None:
        if self._closed:
            return
        self.logger.criteria_emitted(field_class)
        self._changed.send(self._criteria)
