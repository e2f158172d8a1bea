# store/memory.py
# This file is part of Sightline - Live Console Views
#
# In-memory record store with live, incrementally maintained queries

"""In-memory RecordStore.

The store keeps records by id in append order and hands out
``LiveResultHandle`` objects: live queries that hold an ordered, filtered
view of the store and keep it current as records are appended, updated
or removed. Each store change is reported to a handle's subscribers as a
``ChangeSet`` of the ids that entered, changed inside, or left that
handle's result set.

Ordering is defined by a list of ``SortDescriptor``; records that compare
equal on every descriptor keep their append order. Incremental updates
use the same comparator as full fetches, so a handle that has absorbed
any sequence of changes holds exactly what a fresh fetch would return.

The store and its handles share one reentrant lock. Mutations, fetches
and reads of a handle's results all hold it, so records can be appended
on a writer thread while a view reads its live query on another. Change
sets are sent with the lock held; subscribers hand them over to their own
context instead of doing the work inline.
"""

from __future__ import annotations
import bisect
import threading
from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from model.record import Record
from predicate import Expr, holds
from utils.config import DEFAULT_BATCH_SIZE
from utils.logger import get_logger
from utils.signals import Signal, Subscription


class StoreError(RuntimeError):
    """Raised when the store rejects an operation or cannot fetch."""


@dataclass(frozen=True, slots=True)
class SortDescriptor:
    """Sort by the record field `key` in the given direction."""

    key: str
    ascending: bool = True

    def __str__(self) -> str:
        return f"{self.key} {'asc' if self.ascending else 'desc'}"


@dataclass(frozen=True, slots=True)
class Section:
    """A contiguous run of results sharing one group key value.

    Attributes:
        name: Rendered group key value
        offset: Index of the first record of the section in the results
        count: Number of records in the section
        records: The records of the section, in result order
    """

    name: str
    offset: int
    count: int
    records: Tuple[Record, ...]


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Ids that entered, changed within, or left a result set."""

    inserted: Tuple[str, ...] = ()
    updated: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.inserted or self.updated or self.removed)

    def __len__(self) -> int:
        return len(self.inserted) + len(self.updated) + len(self.removed)


def _compare_values(a: Any, b: Any) -> int:
    # Missing values sort before present ones
    if a is None or b is None:
        return (a is not None) - (b is not None)
    if isinstance(a, Enum) and not isinstance(a, IntEnum):
        a, b = str(a), str(b)
    return (a > b) - (a < b)


def _section_name(value: Any) -> str:
    return "(none)" if value is None else str(value)


class MemoryRecordStore:
    """Append-ordered record collection with live queries.

    Example:
        >>> store = MemoryRecordStore()
        >>> handle = store.query(None, [SortDescriptor("created_at", False)])
        >>> handle.perform_fetch()
        >>> store.append(record)
        >>> handle.current_results()[0] is record
        True
    """

    def __init__(self, records: Iterable[Record] = ()):
        self._records: Dict[str, Record] = {}
        self._sequence: Dict[str, int] = {}
        self._next_sequence = 0
        self._handles: List[LiveResultHandle] = []
        self._closed = False
        self._lock = threading.RLock()
        self.logger = get_logger()

        for record in records:
            self._insert(record)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append(self, record: Record) -> None:
        """Append one record.

        Raises:
            StoreError: The id is already taken or the store is closed
        """
        self.extend([record])

    def extend(self, records: Iterable[Record]) -> None:
        """Append records, notifying live queries once for the batch."""
        batch = list(records)
        with self._lock:
            self._check_open()
            seen = set()
            for record in batch:
                if record.rid in self._records or record.rid in seen:
                    raise StoreError(f"Duplicate record id: {record.rid}")
                seen.add(record.rid)

            for record in batch:
                self._insert(record)
            self.logger.debug(f"Store appended {len(batch)} records (total {len(self)})")
            self._notify(inserted=batch)

    def update(self, record: Record) -> None:
        """Replace the record with the same id, keeping its append order.

        Raises:
            StoreError: No record has that id, or the store is closed
        """
        with self._lock:
            self._check_open()
            if record.rid not in self._records:
                raise StoreError(f"Unknown record id: {record.rid}")
            self._records[record.rid] = record
            self._notify(updated=[record])

    def remove(self, rids: Iterable[str]) -> None:
        """Remove records by id.

        Raises:
            StoreError: An id is unknown, or the store is closed
        """
        removed = list(rids)
        with self._lock:
            self._check_open()
            for rid in removed:
                if rid not in self._records:
                    raise StoreError(f"Unknown record id: {rid}")
            for rid in removed:
                del self._records[rid]
            self._notify(removed=removed)
            # Handles locate removed rows by their sort key, append order included
            for rid in removed:
                del self._sequence[rid]

    def _insert(self, record: Record) -> None:
        self._records[record.rid] = record
        self._sequence[record.rid] = self._next_sequence
        self._next_sequence += 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, rid: str) -> Optional[Record]:
        with self._lock:
            return self._records.get(rid)

    def records(self) -> List[Record]:
        """All records in append order."""
        with self._lock:
            return list(self._records.values())

    def query(
        self,
        predicate: Optional[Expr],
        sort: Sequence[SortDescriptor],
        group_key: Optional[str] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> LiveResultHandle:
        """Create a live query. Results are available after a fetch.

        Args:
            predicate: Records to include, or None for all
            sort: Sort descriptors, most significant first
            group_key: Field the results are sectioned by, if any
            batch_size: Fetch batch hint; does not affect results

        Raises:
            StoreError: The store is closed
        """
        with self._lock:
            self._check_open()
            handle = LiveResultHandle(self, predicate, tuple(sort), group_key, batch_size)
            self._handles.append(handle)
            return handle

    def count_matching(self, predicate: Optional[Expr]) -> int:
        """Number of records satisfying `predicate`.

        Raises:
            StoreError: The store is closed
        """
        with self._lock:
            self._check_open()
            return sum(1 for record in self._records.values() if holds(predicate, record))

    def fetch(
        self, predicate: Optional[Expr], comparator: Callable[[Record, Record], int]
    ) -> List[Record]:
        """Matching records ordered by `comparator`.

        Raises:
            StoreError: The store is closed
        """
        with self._lock:
            self._check_open()
            matching = [r for r in self._records.values() if holds(predicate, r)]
            matching.sort(key=cmp_to_key(comparator))
            return matching

    def comparator(self, sort: Sequence[SortDescriptor]) -> Callable[[Record, Record], int]:
        """Record comparator for `sort`, falling back to append order."""
        sequence = self._sequence

        def compare(a: Record, b: Record) -> int:
            for descriptor in sort:
                result = _compare_values(a.value(descriptor.key), b.value(descriptor.key))
                if result:
                    return result if descriptor.ascending else -result
            return sequence.get(a.rid, -1) - sequence.get(b.rid, -1)

        return compare

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the store; later mutations and fetches raise StoreError."""
        with self._lock:
            for handle in list(self._handles):
                handle.close()
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("Record store is closed")

    def _detach(self, handle: LiveResultHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    def _notify(
        self,
        inserted: Sequence[Record] = (),
        updated: Sequence[Record] = (),
        removed: Sequence[str] = (),
    ) -> None:
        for handle in list(self._handles):
            handle._apply(inserted, updated, removed)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, rid: str) -> bool:
        return rid in self._records


class LiveResultHandle:
    """A live query over a MemoryRecordStore.

    The handle holds no results until ``perform_fetch()`` (or
    ``set_predicate()``) runs. From then on, store changes are merged into
    the results and reported to subscribers as a ``ChangeSet``. Changes
    that do not touch the result set are not reported.
    """

    def __init__(
        self,
        store: MemoryRecordStore,
        predicate: Optional[Expr],
        sort: Tuple[SortDescriptor, ...],
        group_key: Optional[str],
        batch_size: int,
    ):
        self._store = store
        self.predicate = predicate
        self.sort = sort
        self.group_key = group_key
        self.batch_size = batch_size
        self._compare = store.comparator(sort)
        self._results: List[Record] = []
        self._keys: List[Any] = []
        self._members: Dict[str, Record] = {}
        self._fetched = False
        self._closed = False
        self._changed = Signal()

    def set_predicate(self, predicate: Optional[Expr]) -> None:
        """Swap the predicate and refetch.

        Raises:
            StoreError: The handle or the store is closed
        """
        with self._store._lock:
            self.predicate = predicate
            self.perform_fetch()

    def perform_fetch(self) -> None:
        """Recompute the results from scratch.

        Raises:
            StoreError: The handle or the store is closed
        """
        with self._store._lock:
            if self._closed:
                raise StoreError("Live query is closed")
            results = self._store.fetch(self.predicate, self._compare)
            key = cmp_to_key(self._compare)
            self._results = results
            self._keys = [key(r) for r in results]
            self._members = {r.rid: r for r in results}
            self._fetched = True

    def current_results(self) -> List[Record]:
        with self._store._lock:
            return list(self._results)

    def current_sections(self) -> Optional[List[Section]]:
        """Sections of the current results, or None when not grouping."""
        return self._sections_of(self.current_results())

    def snapshot(self) -> Tuple[List[Record], Optional[List[Section]]]:
        """Results and their sections, taken from the same state."""
        results = self.current_results()
        return results, self._sections_of(results)

    def _sections_of(self, results: List[Record]) -> Optional[List[Section]]:
        if self.group_key is None:
            return None

        sections: List[Section] = []
        start = 0
        for index in range(1, len(results) + 1):
            if index < len(results) and results[index].value(
                self.group_key
            ) == results[start].value(self.group_key):
                continue
            chunk = tuple(results[start:index])
            sections.append(
                Section(
                    name=_section_name(chunk[0].value(self.group_key)),
                    offset=start,
                    count=len(chunk),
                    records=chunk,
                )
            )
            start = index
        return sections

    def subscribe(self, callback: Callable[[ChangeSet], Any]) -> Subscription:
        """Register for change sets. Keep the subscription to stay registered."""
        return self._changed.subscribe(callback)

    def close(self) -> None:
        with self._store._lock:
            self._closed = True
            self._store._detach(self)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._results)

    def _apply(
        self,
        inserted: Sequence[Record],
        updated: Sequence[Record],
        removed: Sequence[str],
    ) -> None:
        if not self._fetched or self._closed:
            return

        entered: List[str] = []
        changed: List[str] = []
        left: List[str] = []

        for rid in removed:
            if rid in self._members:
                self._discard(self._members.pop(rid))
                left.append(rid)

        for record in inserted:
            if holds(self.predicate, record):
                self._place(record)
                entered.append(record.rid)

        for record in updated:
            previous = self._members.get(record.rid)
            matches = holds(self.predicate, record)
            if previous is not None:
                self._discard(previous)
                del self._members[record.rid]
            if matches:
                self._place(record)
            if previous is not None and matches:
                changed.append(record.rid)
            elif previous is not None:
                left.append(record.rid)
            elif matches:
                entered.append(record.rid)

        changes = ChangeSet(tuple(entered), tuple(changed), tuple(left))
        if changes:
            self._changed.send(changes)

    def _place(self, record: Record) -> None:
        key = cmp_to_key(self._compare)(record)
        index = bisect.bisect_left(self._keys, key)
        self._keys.insert(index, key)
        self._results.insert(index, record)
        self._members[record.rid] = record

    def _discard(self, record: Record) -> None:
        key = cmp_to_key(self._compare)(record)
        index = bisect.bisect_left(self._keys, key)
        # Ties are broken by append order, so the key locates exactly one row
        if index < len(self._results) and self._results[index].rid == record.rid:
            del self._keys[index]
            del self._results[index]
        else:
            index = next(i for i, r in enumerate(self._results) if r.rid == record.rid)
            del self._keys[index]
            del self._results[index]
