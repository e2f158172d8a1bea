# predicate/builder.py
# This file is part of Sightline - Live Console Views
#
# Translation of console criteria into record predicates

"""Predicate builders for the console modes.

Messages and network tasks are filtered by different parts of the same
criteria: levels and labels only restrict messages, hosts only restrict
tasks, "only errors" means ``level >= error`` for a message and a failed
state for a task, and the filter term searches message text or task URLs.
Structured constraints are applied to the kinds whose records carry the
constrained field.
"""

from __future__ import annotations
from typing import List, Optional

from model.criteria import Criteria, Mode, Operator
from model.record import ERROR_LEVEL, FAILED_STATE, RecordKind, applies_to
from .ast_nodes import Expr, Compare, Or, compare, conjoin, disjoin
from . import compile_query


IS_LOG = Compare("kind", Operator.EQ, RecordKind.LOG)
IS_TASK = Compare("kind", Operator.EQ, RecordKind.TASK)
HAS_NO_TASK = Compare("task", Operator.EQ, None)


def make_message_predicate(criteria: Criteria) -> Optional[Expr]:
    """Restrictions the criteria place on log messages, or None."""
    search = criteria.search
    parts: List[Optional[Expr]] = _time_range(criteria)

    if search.levels:
        parts.append(
            disjoin(compare("level", Operator.EQ, lvl) for lvl in sorted(search.levels))
        )
    if search.labels:
        parts.append(
            disjoin(compare("label", Operator.EQ, lbl) for lbl in sorted(search.labels))
        )
    if criteria.only_errors:
        parts.append(compare("level", Operator.GE, ERROR_LEVEL))
    if criteria.filter_term:
        parts.append(compare("message", Operator.CONTAINS, criteria.filter_term))

    parts.extend(_constraints(criteria, RecordKind.LOG))
    parts.append(_query(criteria))
    return conjoin(parts)


def make_network_predicate(criteria: Criteria) -> Optional[Expr]:
    """Restrictions the criteria place on network tasks, or None."""
    search = criteria.search
    parts: List[Optional[Expr]] = _time_range(criteria)

    if search.hosts:
        parts.append(
            disjoin(compare("host", Operator.EQ, host) for host in sorted(search.hosts))
        )
    if criteria.only_errors:
        parts.append(compare("state", Operator.EQ, FAILED_STATE))
    if criteria.filter_term:
        parts.append(compare("url", Operator.CONTAINS, criteria.filter_term))

    parts.extend(_constraints(criteria, RecordKind.TASK))
    parts.append(_query(criteria))
    return conjoin(parts)


def build_predicate(mode: Mode, criteria: Criteria) -> Optional[Expr]:
    """Build the predicate selecting the records listed in `mode`.

    LOGS lists messages that are not attached to a network task, TASKS
    lists network tasks, and ALL lists both kinds (attached messages
    included). Only ALL can place no restriction at all, in which case
    None is returned.
    """
    messages = make_message_predicate(criteria)
    tasks = make_network_predicate(criteria)

    if mode is Mode.LOGS:
        return conjoin([IS_LOG, HAS_NO_TASK, messages])

    if mode is Mode.TASKS:
        return conjoin([IS_TASK, tasks])

    if messages is None and tasks is None:
        return None
    return Or(
        conjoin([IS_LOG, messages]),
        conjoin([IS_TASK, tasks]),
    )


def _time_range(criteria: Criteria) -> List[Optional[Expr]]:
    search = criteria.search
    parts: List[Optional[Expr]] = []
    if search.start is not None:
        parts.append(compare("created_at", Operator.GE, search.start))
    if search.end is not None:
        parts.append(compare("created_at", Operator.LE, search.end))
    return parts


def _constraints(criteria: Criteria, kind: RecordKind) -> List[Expr]:
    return [
        compare(c.field, c.op, c.value)
        for c in criteria.search.constraints
        if applies_to(c.field, kind)
    ]


def _query(criteria: Criteria) -> Optional[Expr]:
    if criteria.search.query is None:
        return None
    return compile_query(criteria.search.query)
