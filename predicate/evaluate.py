# predicate/evaluate.py
# This file is part of Sightline - Live Console Views
#
# Evaluation of predicate trees against records

from __future__ import annotations
import re
from enum import Enum
from functools import lru_cache
from typing import Any, Optional

from model.criteria import Operator
from model.record import Record
from .ast_nodes import Expr, Const, Compare, Not, And, Or


def holds(expr: Optional[Expr], record: Record) -> bool:
    """Evaluate a predicate against a record.

    A missing predicate places no restriction and matches every record.

    Args:
        expr: Predicate to evaluate, or None
        record: Record to evaluate against

    Returns:
        True if the record satisfies the predicate
    """
    if expr is None:
        return True

    if isinstance(expr, Compare):
        return _compare(expr, record.value(expr.field))

    elif isinstance(expr, And):
        return holds(expr.left, record) and holds(expr.right, record)

    elif isinstance(expr, Or):
        return holds(expr.left, record) or holds(expr.right, record)

    elif isinstance(expr, Not):
        return not holds(expr.operand, record)

    elif isinstance(expr, Const):
        return expr.value

    else:
        raise ValueError(f"Unknown expression type: {type(expr)}")


def _compare(node: Compare, actual: Any) -> bool:
    expected, op = node.value, node.op

    # null only equals null; a missing field only satisfies "!="
    if expected is None:
        return (actual is None) == (op is Operator.EQ)
    if actual is None:
        return op is Operator.NE

    if op in (Operator.CONTAINS, Operator.NOT_CONTAINS, Operator.BEGINS_WITH):
        haystack, needle = _text(actual).casefold(), _text(expected).casefold()
        if op is Operator.CONTAINS:
            return needle in haystack
        if op is Operator.NOT_CONTAINS:
            return needle not in haystack
        return haystack.startswith(needle)

    if op is Operator.MATCHES:
        return _regex(_text(expected)).search(_text(actual)) is not None

    if isinstance(actual, str) and isinstance(expected, str):
        actual, expected = actual.casefold(), expected.casefold()

    try:
        if op is Operator.EQ:
            return actual == expected
        if op is Operator.NE:
            return actual != expected
        if op is Operator.GT:
            return actual > expected
        if op is Operator.GE:
            return actual >= expected
        if op is Operator.LT:
            return actual < expected
        if op is Operator.LE:
            return actual <= expected
    except TypeError:
        # Unordered values (task states, kinds) never satisfy a range
        return False

    raise ValueError(f"Unknown operator: {op}")


def _text(value: Any) -> str:
    return str(value) if isinstance(value, Enum) else f"{value}"


@lru_cache(maxsize=128)
def _regex(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        # An invalid pattern is matched literally
        return re.compile(re.escape(pattern), re.IGNORECASE)
