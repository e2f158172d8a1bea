# model/criteria.py

"""
Criteria and list options
=========================

Immutable snapshots of what the console shows: the structured search
criteria, the "only errors" switch and the free-text filter term, plus the
sort and grouping options that shape the live query. Every user edit
produces a new snapshot; nothing here is mutated in place.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .record import Level, coerce_value


class Mode(Enum):
    """Which subset of records the console lists."""

    ALL = "all"
    LOGS = "logs"
    TASKS = "tasks"

    def __str__(self) -> str:
        return self.value


class Operator(Enum):
    """Comparison operators for structured constraints, keyed by symbol."""

    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    CONTAINS = "~"
    NOT_CONTAINS = "!~"
    MATCHES = "=~"
    BEGINS_WITH = "^="

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Constraint:
    """A single field/operator/value restriction."""

    field: str
    op: Operator
    value: object

    def __post_init__(self):
        # Rejects unknown fields and values the field cannot hold
        coerce_value(self.field, self.value)


@dataclass(frozen=True, slots=True)
class SearchCriteria:
    """
    Structured criteria edited through the search UI.

    Attributes:
      constraints: Field/operator/value restrictions, all of which must hold.
      query: Optional filter expression (see the `predicate` package).
      levels: Message levels to include; empty means any level.
      labels: Message labels to include; empty means any label.
      hosts: Task hosts to include; empty means any host.
      start: Earliest creation time, inclusive.
      end: Latest creation time, inclusive.
    """

    constraints: Tuple[Constraint, ...] = ()
    query: Optional[str] = None
    levels: FrozenSet[Level] = frozenset()
    labels: FrozenSet[str] = frozenset()
    hosts: FrozenSet[str] = frozenset()
    start: Optional[float] = None
    end: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self == SearchCriteria()


@dataclass(frozen=True, slots=True)
class Criteria:
    """Complete filter snapshot consumed by the query engine."""

    search: SearchCriteria = field(default_factory=SearchCriteria)
    only_errors: bool = False
    filter_term: str = ""

    def with_search(self, search: SearchCriteria) -> Criteria:
        return replace(self, search=search)

    def with_only_errors(self, only_errors: bool) -> Criteria:
        return replace(self, only_errors=only_errors)

    def with_filter_term(self, filter_term: str) -> Criteria:
        return replace(self, filter_term=filter_term)


class SortOrder(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    @property
    def is_ascending(self) -> bool:
        return self is SortOrder.ASCENDING


class MessageSortBy(Enum):
    DATE = "created_at"
    LEVEL = "level"

    @property
    def key(self) -> str:
        return self.value


class TaskSortBy(Enum):
    DATE = "created_at"
    DURATION = "duration"
    REQUEST_SIZE = "request_size"
    RESPONSE_SIZE = "response_size"

    @property
    def key(self) -> str:
        return self.value


class GroupBy(Enum):
    """Grouping of the list into sections; NONE disables sections."""

    NONE = "none"
    LEVEL = "level"
    LABEL = "label"
    SESSION = "session"
    URL = "url"
    HOST = "host"
    METHOD = "method"
    STATUS_CODE = "status_code"
    STATE = "state"

    @property
    def key(self) -> Optional[str]:
        return None if self is GroupBy.NONE else self.value

    @property
    def is_ascending(self) -> bool:
        # Most severe level and most recent session come first
        return self not in (GroupBy.LEVEL, GroupBy.SESSION)


@dataclass(frozen=True, slots=True)
class ListOptions:
    """Sort and grouping options; editing them rebuilds the live query."""

    message_sort_by: MessageSortBy = MessageSortBy.DATE
    task_sort_by: TaskSortBy = TaskSortBy.DATE
    order: SortOrder = SortOrder.DESCENDING
    message_group_by: GroupBy = GroupBy.NONE
    task_group_by: GroupBy = GroupBy.NONE

    def sort_key(self, mode: Mode) -> str:
        return self.task_sort_by.key if mode is Mode.TASKS else self.message_sort_by.key

    def grouping(self, mode: Mode) -> GroupBy:
        return self.task_group_by if mode is Mode.TASKS else self.message_group_by
