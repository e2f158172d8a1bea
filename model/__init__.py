# model/__init__.py

"""
Domain objects for the console view engine: records of the log, the
criteria and list options that select and order them, and the bounded
view window over a result set. These types carry no query or store logic.
"""

from .record import (
    Record,
    RecordKind,
    Level,
    TaskState,
    RECORD_FIELDS,
    LOG_FIELDS,
    TASK_FIELDS,
    applies_to,
    coerce_value,
)
from .criteria import (
    Mode,
    Operator,
    Constraint,
    SearchCriteria,
    Criteria,
    SortOrder,
    MessageSortBy,
    TaskSortBy,
    GroupBy,
    ListOptions,
)
from .window import ViewWindowManager, ScrollPosition

__all__ = [
    "Record",
    "RecordKind",
    "Level",
    "TaskState",
    "RECORD_FIELDS",
    "LOG_FIELDS",
    "TASK_FIELDS",
    "applies_to",
    "coerce_value",
    "Mode",
    "Operator",
    "Constraint",
    "SearchCriteria",
    "Criteria",
    "SortOrder",
    "MessageSortBy",
    "TaskSortBy",
    "GroupBy",
    "ListOptions",
    "ViewWindowManager",
    "ScrollPosition",
]
