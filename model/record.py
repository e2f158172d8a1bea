# model/record.py

"""
Record
======

Immutable entry of the console log. A record is either a log message or
a network task; both share an externally stable id, a creation time and
a session. Fields are addressed by name through `Record.value` so that
predicates, sort descriptors and grouping can treat both kinds uniformly.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, FrozenSet, Optional


class RecordKind(Enum):
    LOG = "log"
    TASK = "task"

    def __str__(self) -> str:
        return self.value


class Level(IntEnum):
    """Message severity, ordered from least to most severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    NOTICE = 3
    WARNING = 4
    ERROR = 5
    CRITICAL = 6

    @classmethod
    def from_name(cls, name: str) -> Level:
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown level: {name!r}")

    def __str__(self) -> str:
        return self.name.lower()


class TaskState(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"

    def __str__(self) -> str:
        return self.value


COMMON_FIELDS: FrozenSet[str] = frozenset({"id", "kind", "created_at", "session"})
LOG_FIELDS: FrozenSet[str] = COMMON_FIELDS | {"level", "label", "message", "task"}
TASK_FIELDS: FrozenSet[str] = COMMON_FIELDS | {
    "url",
    "host",
    "method",
    "status_code",
    "error_code",
    "duration",
    "request_size",
    "response_size",
    "state",
}
RECORD_FIELDS: FrozenSet[str] = LOG_FIELDS | TASK_FIELDS

# What counts as an error; the only-errors predicates are built from these
ERROR_LEVEL = Level.ERROR
FAILED_STATE = TaskState.FAILURE

_NUMERIC_FIELDS = frozenset(
    {"created_at", "status_code", "error_code", "duration", "request_size", "response_size"}
)

# Attribute names that differ from the public field names
_ATTRIBUTES = {"id": "rid", "task": "task_id"}


@dataclass(frozen=True, slots=True)
class Record:
    rid: str
    kind: RecordKind
    created_at: float
    session: str = ""
    # log message fields
    level: Level = Level.INFO
    label: str = "default"
    message: str = ""
    task_id: Optional[str] = None
    # network task fields
    url: Optional[str] = None
    host: Optional[str] = None
    method: Optional[str] = None
    status_code: Optional[int] = None
    error_code: int = 0
    duration: Optional[float] = None
    request_size: int = 0
    response_size: int = 0
    state: Optional[TaskState] = None

    @property
    def is_log(self) -> bool:
        return self.kind is RecordKind.LOG

    @property
    def is_task(self) -> bool:
        return self.kind is RecordKind.TASK

    @property
    def is_error(self) -> bool:
        """Errors are messages at ERROR or above, and failed tasks."""
        if self.is_task:
            return self.state is FAILED_STATE
        return self.level >= ERROR_LEVEL

    def value(self, field_name: str) -> Any:
        """Return the value of a named field, or None if it does not apply."""
        if field_name not in RECORD_FIELDS:
            raise KeyError(f"Unknown record field: {field_name!r}")
        applicable = LOG_FIELDS if self.is_log else TASK_FIELDS
        if field_name not in applicable:
            return None
        return getattr(self, _ATTRIBUTES.get(field_name, field_name))

    def __str__(self) -> str:
        if self.is_task:
            status = self.status_code if self.status_code is not None else "-"
            return f"{self.rid} {self.method or 'GET'} {self.url} {status} [{self.state}]"
        return f"{self.rid} {self.level} [{self.label}] {self.message}"


def applies_to(field_name: str, kind: RecordKind) -> bool:
    """True if records of `kind` carry the field `field_name`."""
    return field_name in (LOG_FIELDS if kind is RecordKind.LOG else TASK_FIELDS)


def coerce_value(field_name: str, raw: Any) -> Any:
    """Convert a raw filter value to the type stored in `field_name`.

    Strings are accepted for every field ("error" for a level, "404" for
    a status code); None is passed through so that `field == null` can be
    expressed.

    Raises:
        ValueError: Unknown field, or a value the field cannot hold
    """
    if field_name not in RECORD_FIELDS:
        raise ValueError(f"Unknown field: {field_name!r}")
    if raw is None:
        return None

    if field_name == "level":
        if isinstance(raw, Level):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            return Level(raw)
        return Level.from_name(str(raw))

    if field_name == "kind":
        return raw if isinstance(raw, RecordKind) else RecordKind(str(raw).lower())

    if field_name == "state":
        return raw if isinstance(raw, TaskState) else TaskState(str(raw).lower())

    if field_name in _NUMERIC_FIELDS:
        if isinstance(raw, bool):
            raise ValueError(f"Field {field_name!r} expects a number, got {raw!r}")
        if isinstance(raw, (int, float)):
            return raw
        text = str(raw).strip()
        try:
            return int(text)
        except ValueError:
            try:
                return float(text)
            except ValueError:
                raise ValueError(f"Field {field_name!r} expects a number, got {raw!r}")

    return raw if isinstance(raw, str) else str(raw)
