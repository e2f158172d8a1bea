# core/engine.py
# This file is part of Sightline - Live Console Views
#
# Query engine owning the live query behind a console list

"""Query engine for the console list.

The engine turns a mode and criteria into a predicate and sort order,
owns the live query that holds the matching records, and computes the
message and task counts shown next to the mode switch. It does not
schedule anything itself; the view model decides when to rebuild the
live query (``refresh_controller``) and when to re-apply the predicate
(``refresh``).

Generations:
    ``refresh_controller`` bumps the controller generation, and every
    change notification of the live query is delivered together with the
    generation of the controller that produced it. A consumer can compare
    it with ``is_current()`` to drop notifications from superseded live
    queries. Each successful ``refresh`` produces a ``ResultSet`` with a
    new, higher refresh generation; a failed one produces nothing and
    leaves ``last_result`` as it was.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Tuple

from model.criteria import Criteria, GroupBy, Mode, SortOrder
from model.record import Record
from predicate import Expr, ParseError, build_predicate
from store.memory import (
    ChangeSet,
    LiveResultHandle,
    MemoryRecordStore,
    Section,
    SortDescriptor,
    StoreError,
)
from utils.config import DEFAULT_BATCH_SIZE
from utils.logger import get_logger
from utils.signals import Subscription


class InvariantViolation(AssertionError):
    """The engine was used in a way correct callers never do."""


@dataclass(frozen=True, slots=True)
class ResultSet:
    """Ordered records matching a refresh, with sections when grouping."""

    records: Tuple[Record, ...] = ()
    sections: Optional[Tuple[Section, ...]] = None
    generation: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)


@dataclass(frozen=True, slots=True)
class RefreshResult:
    """Outcome of a refresh: the result set and both badge counts."""

    result_set: ResultSet
    log_count: int = 0
    task_count: int = 0

    @property
    def generation(self) -> int:
        return self.result_set.generation


ChangeCallback = Callable[[ChangeSet, int], Any]


class QueryEngine:
    """Builds predicates and drives the live query against a record store.

    Args:
        store: Store queried for results and counts
        batch_size: Fetch batch hint passed to the store
    """

    def __init__(self, store: MemoryRecordStore, batch_size: int = DEFAULT_BATCH_SIZE):
        self.store = store
        self.batch_size = batch_size
        self.logger = get_logger()

        self._handle: Optional[LiveResultHandle] = None
        self._subscription: Optional[Subscription] = None
        self._controller_generation = 0
        self._refresh_generation = 0
        self._last = RefreshResult(ResultSet())

    @staticmethod
    def build_predicate(mode: Mode, criteria: Criteria) -> Optional[Expr]:
        """Predicate selecting the records listed in `mode`, or None.

        Raises:
            ParseError: The criteria carry a malformed query expression
        """
        return build_predicate(mode, criteria)

    def refresh_controller(
        self,
        mode: Mode,
        grouping: GroupBy,
        sort_key: str,
        order: SortOrder,
        on_change: Optional[ChangeCallback] = None,
    ) -> int:
        """Replace the live query.

        The new query sorts by the group key first (in the grouping's own
        direction) when grouping is active, then by `sort_key` in `order`.
        It holds no results until the next ``refresh``.

        Args:
            mode: Mode the query lists records for
            grouping: Section grouping, GroupBy.NONE for a flat list
            sort_key: Record field to sort by
            order: Direction of the record sort
            on_change: Receives ``(changes, controller_generation)`` for
                every change to the live query's results

        Returns:
            The new controller generation

        Raises:
            StoreError: The store refused to create the query
        """
        self._close_handle()

        sort: List[SortDescriptor] = []
        if grouping.key is not None:
            sort.append(SortDescriptor(grouping.key, grouping.is_ascending))
        sort.append(SortDescriptor(sort_key, order.is_ascending))

        self._handle = self.store.query(
            None, sort, group_key=grouping.key, batch_size=self.batch_size
        )
        self._controller_generation += 1
        generation = self._controller_generation

        if on_change is not None:
            self._subscription = self._handle.subscribe(
                lambda changes: on_change(changes, generation)
            )

        self.logger.controller_rebuilt(
            str(mode), ", ".join(str(d) for d in sort), grouping.key, generation
        )
        return generation

    def refresh(self, mode: Mode, criteria: Criteria) -> Optional[RefreshResult]:
        """Re-apply the predicate for `mode` and `criteria` and fetch.

        The log and task counts are computed with the LOGS and TASKS
        predicates whatever `mode` is.

        If the fetch fails, or the criteria hold a malformed query, the
        error is logged and None is returned; ``last_result`` keeps the
        previous result and counts.

        Returns:
            The refresh result, or None if the fetch failed or no live
            query exists and assertions are disabled

        Raises:
            InvariantViolation: No live query exists (assertions enabled)
        """
        if self._handle is None:
            message = "refresh() called before refresh_controller()"
            if __debug__:
                raise InvariantViolation(message)
            self.logger.error(message)
            return None

        try:
            self._handle.set_predicate(self.build_predicate(mode, criteria))
            records, sections = self._handle.snapshot()
            log_count = self.store.count_matching(build_predicate(Mode.LOGS, criteria))
            task_count = self.store.count_matching(build_predicate(Mode.TASKS, criteria))
        except (StoreError, ParseError) as e:
            self.logger.fetch_failed(str(e))
            return None

        self._refresh_generation += 1
        self._last = RefreshResult(
            ResultSet(
                records=tuple(records),
                sections=tuple(sections) if sections is not None else None,
                generation=self._refresh_generation,
            ),
            log_count=log_count,
            task_count=task_count,
        )
        self.logger.refresh_completed(
            self._refresh_generation, len(records), log_count, task_count
        )
        return self._last

    def current(self) -> ResultSet:
        """Results of the live query as they are now, after store changes.

        Returns the last result set when there is no live query.
        """
        if self._handle is None or self._handle.closed:
            return self._last.result_set

        records, sections = self._handle.snapshot()
        return ResultSet(
            records=tuple(records),
            sections=tuple(sections) if sections is not None else None,
            generation=self._last.generation,
        )

    def recount(self, criteria: Criteria) -> Tuple[int, int]:
        """Log and task counts for `criteria`, the previous ones on failure."""
        try:
            return (
                self.store.count_matching(build_predicate(Mode.LOGS, criteria)),
                self.store.count_matching(build_predicate(Mode.TASKS, criteria)),
            )
        except (StoreError, ParseError) as e:
            self.logger.fetch_failed(str(e))
            return self._last.log_count, self._last.task_count

    @property
    def controller_generation(self) -> int:
        return self._controller_generation

    @property
    def last_result(self) -> RefreshResult:
        return self._last

    def is_current(self, generation: int) -> bool:
        return generation == self._controller_generation

    def close(self) -> None:
        """Cancel the change subscription and close the live query."""
        self._close_handle()
        self._handle = None

    def _close_handle(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._handle is not None:
            self._handle.close()
