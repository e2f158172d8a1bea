# predicate/ast_nodes.py
# This file is part of Sightline - Live Console Views
#
# Abstract Syntax Tree node classes for record filter predicates

"""AST node classes for representing record filter predicates.

This module defines immutable and hashable node classes used to build
predicates over console records. Predicates come from two places: the
query engine composes them from structured criteria, and the filter
expression parser produces them from text. Both yield the same tree.

Node Types:
    Const: Boolean constants
    Compare: field/operator/value comparison against a record
    Not, And, Or: Standard Boolean connectives

All nodes support the visitor design pattern for traversal, and render
back to parseable filter expression text through ``str()``.
"""

from __future__ import annotations
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Protocol

from model.criteria import Operator
from model.record import coerce_value


class Visitor(Protocol):
    """Interface for AST visitors implementing the visitor design pattern."""

    def visit_const(self, n: Const): ...

    def visit_compare(self, n: Compare): ...

    def visit_not(self, n: Not): ...

    def visit_and(self, n: And): ...

    def visit_or(self, n: Or): ...


@dataclass(frozen=True, slots=True)
class Expr:
    """Base class for all predicate nodes."""

    def accept(self, v: Visitor):
        """Dispatch to the appropriate visitor method.

        Args:
            v: Visitor instance to process this node

        Raises:
            NotImplementedError: Must be implemented by subclasses
        """
        raise NotImplementedError

    def __str__(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Boolean constant: matches every record or none.

    Attributes:
        value: The constant truth value
    """

    value: bool

    def accept(self, v: Visitor):
        return v.visit_const(self)

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True, slots=True)
class Compare(Expr):
    """Comparison of a record field against a constant value.

    The value is stored already coerced to the field's type (a ``Level``
    for ``level``, a number for ``status_code`` ...). Use ``compare()`` to
    build nodes from raw input.

    Attributes:
        field: Record field name
        op: Comparison operator
        value: Coerced comparison value, or None for ``null``
    """

    field: str
    op: Operator
    value: Any

    def accept(self, v: Visitor):
        return v.visit_compare(self)

    def __str__(self) -> str:
        return f"{self.field} {self.op.value} {_render_value(self.value)}"


@dataclass(frozen=True, slots=True)
class Not(Expr):
    """Logical negation of its operand.

    Attributes:
        operand: The expression being negated
    """

    operand: Expr

    def accept(self, v: Visitor):
        return v.visit_not(self)

    def __str__(self) -> str:
        return f"!{_wrap(self.operand)}"


@dataclass(frozen=True, slots=True)
class And(Expr):
    """Logical conjunction: true when both operands are true.

    Attributes:
        left: Left operand of the conjunction
        right: Right operand of the conjunction
    """

    left: Expr
    right: Expr

    def accept(self, v: Visitor):
        return v.visit_and(self)

    def __str__(self) -> str:
        return f"({self.left} & {self.right})"


@dataclass(frozen=True, slots=True)
class Or(Expr):
    """Logical disjunction: true when at least one operand is true.

    Attributes:
        left: Left operand of the disjunction
        right: Right operand of the disjunction
    """

    left: Expr
    right: Expr

    def accept(self, v: Visitor):
        return v.visit_or(self)

    def __str__(self) -> str:
        return f"({self.left} | {self.right})"


def compare(field: str, op: Operator, raw: Any) -> Compare:
    """Build a Compare node, coercing `raw` to the field's type.

    Raises:
        ValueError: Unknown field or a value the field cannot hold
    """
    if raw is None and op not in (Operator.EQ, Operator.NE):
        raise ValueError(f"Operator {op.value} cannot compare {field} against null")
    return Compare(field, op, coerce_value(field, raw))


def conjoin(parts: Iterable[Optional[Expr]]) -> Optional[Expr]:
    """Left-nested And of the non-None parts, or None if there are none."""
    result: Optional[Expr] = None
    for part in parts:
        if part is None:
            continue
        result = part if result is None else And(result, part)
    return result


def disjoin(parts: Iterable[Optional[Expr]]) -> Optional[Expr]:
    """Left-nested Or of the non-None parts, or None if there are none."""
    result: Optional[Expr] = None
    for part in parts:
        if part is None:
            continue
        result = part if result is None else Or(result, part)
    return result


def _wrap(expr: Expr) -> str:
    return str(expr) if isinstance(expr, (And, Or, Const, Not)) else f"({expr})"


def _render_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value)
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(str(value), ensure_ascii=False)
