# predicate/__init__.py
# This file is part of Sightline - Live Console Views
#
# Record predicates: filter expression parsing, building and evaluation

"""Record predicates for the console view engine.

This package turns console criteria into predicate trees and evaluates
them against records. Predicates can be composed programmatically by the
query engine or parsed from filter expression text, for example::

    level >= warning & (label == network | message ~ "timeout")
    host ~ api & !(status_code < 400)

Core Functions:
    parse: Converts filter expression strings into predicate trees
    compile_query: Cached parse that maps blank input to "no restriction"
    holds: Evaluates a predicate against a record
    build_predicate: Builds the predicate for a console mode and criteria

Grammar Features:
    - Comparisons ``field OP value`` with ==, !=, >, >=, <, <=, ~, !~, =~, ^=
    - Boolean connectives with keyword synonyms (and, or, not)
    - Parenthetical grouping support
    - Quoted strings, numbers, bare words, true, false and null as values
"""

from functools import lru_cache
from typing import Optional

from .exceptions import ParseError
from .ast_nodes import Expr, Const, Compare, Not, And, Or, compare, conjoin, disjoin
from .grammar import _FilterParser
from utils.logger import get_logger


def parse(source: str) -> Expr:
    """Parse a filter expression into a predicate tree.

    Uses a fresh parser instance for each invocation to keep parsing
    stateless.

    Args:
        source: Filter expression string to parse

    Returns:
        Root node of the parsed predicate

    Raises:
        ParseError: Expression is malformed, names an unknown field or
            uses a value the field cannot hold

    Example:
        >>> str(parse("level >= error & host ~ api"))
        '(level >= error & host ~ "api")'
    """
    logger = get_logger()
    logger.debug(f"Parsing filter expression: {source}")

    parser = _FilterParser()

    try:
        result = parser.parse(source)
        logger.debug(f"Filter parsed into {type(result).__name__}")
        return result

    except ParseError:
        logger.debug("ParseError encountered during filter parsing")
        raise

    except Exception as exc:
        logger.debug(f"Unexpected parsing error: {type(exc).__name__}: {exc}")
        raise ParseError(str(exc)) from exc


@lru_cache(maxsize=64)
def compile_query(source: str) -> Optional[Expr]:
    """Parse a filter expression, treating blank input as no restriction.

    Results are cached since the same expression is re-applied on every
    refresh.

    Raises:
        ParseError: Expression is malformed
    """
    if not source.strip():
        return None
    return parse(source)


from .evaluate import holds  # noqa: E402
from .builder import (  # noqa: E402
    build_predicate,
    make_message_predicate,
    make_network_predicate,
)

__all__ = [
    "parse",
    "compile_query",
    "holds",
    "build_predicate",
    "make_message_predicate",
    "make_network_predicate",
    "ParseError",
    "Expr",
    "Const",
    "Compare",
    "Not",
    "And",
    "Or",
    "compare",
    "conjoin",
    "disjoin",
]
