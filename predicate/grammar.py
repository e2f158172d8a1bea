# predicate/grammar.py
# This file is part of Sightline - Live Console Views
#
# LALR(1) grammar and parser for filter expressions using SLY

"""Filter expression grammar implementation using SLY parser generator.

This module defines the grammar rules and parsing logic for record filter
expressions. The parser constructs predicate trees from token streams
provided by the lexer, handling operator precedence and associativity.

Grammar Features:
- Comparisons of the form ``field OP value``
- Boolean operators (AND, OR, NOT) with standard precedence
- Parenthetical grouping for precedence override
- Comprehensive error handling with meaningful messages

Operator Precedence (lowest to highest):
- OR ('|', 'or'): left-associative
- AND ('&', 'and'): left-associative
- NOT ('!', 'not'): right-associative
"""

from sly import Parser

from model.criteria import Operator
from .lexer import FilterLexer
from .ast_nodes import Expr, Const, Not, And, Or, compare
from .exceptions import ParseError
from utils.logger import get_logger


class _FilterParser(Parser):
    """SLY-based LALR(1) parser for filter expressions.

    Attributes:
        tokens: Token types from FilterLexer
        precedence: Operator precedence and associativity rules
    """

    tokens = FilterLexer.tokens

    precedence = (
        ("left", "OR"),
        ("left", "AND"),
        ("right", "NOT"),
    )

    @_("expr")
    def start(self, p) -> Expr:
        """Start rule: complete filter is a single expression."""
        return p.expr

    @_("NOT expr")
    def expr(self, p) -> Expr:
        """Negation operator."""
        return Not(p.expr)

    @_("expr AND expr")
    def expr(self, p) -> Expr:
        """Conjunction operator."""
        return And(p.expr0, p.expr1)

    @_("expr OR expr")
    def expr(self, p) -> Expr:
        """Disjunction operator."""
        return Or(p.expr0, p.expr1)

    @_("LPAREN expr RPAREN")
    def expr(self, p) -> Expr:
        """Parenthesized expression for grouping."""
        return p.expr

    @_("TRUE")
    def expr(self, p) -> Expr:
        """Constant that matches every record."""
        return Const(True)

    @_("FALSE")
    def expr(self, p) -> Expr:
        """Constant that matches no record."""
        return Const(False)

    @_("ID operator value")
    def expr(self, p) -> Expr:
        """Comparison of a record field with a value."""
        try:
            return compare(p.ID, p.operator, p.value)
        except ValueError as e:
            raise ParseError(str(e)) from e

    @_(
        "EQ",
        "NE",
        "GT",
        "GE",
        "LT",
        "LE",
        "CONTAINS",
        "NCONTAINS",
        "MATCHES",
        "BEGINS",
    )
    def operator(self, p) -> Operator:
        """Comparison operator, keyed by its symbol."""
        return Operator(p[0])

    @_("STRING", "NUMBER", "ID")
    def value(self, p):
        """Literal value; bare words are taken as strings."""
        return p[0]

    @_("TRUE")
    def value(self, p):
        return True

    @_("FALSE")
    def value(self, p):
        return False

    @_("NULL")
    def value(self, p):
        return None

    def parse(self, text: str) -> Expr:
        """Parse filter expression text into a predicate tree.

        Args:
            text: Filter expression string to parse

        Returns:
            Root AST node representing the parsed expression

        Raises:
            ParseError: If the expression is empty or contains syntax errors
        """
        logger = get_logger()
        logger.debug(f"Parsing filter: {text}")

        try:
            ast_result = super().parse(FilterLexer().tokenize(text))

            if ast_result is None and text.strip() == "":
                raise ParseError("Input filter is empty.")

            if ast_result is None:
                raise ParseError("Failed to parse filter (syntax error).")

            logger.debug(
                f"Successfully parsed filter into {type(ast_result).__name__}"
            )
            return ast_result

        except ParseError:
            logger.debug("Parse error encountered")
            raise
        except Exception as e:
            logger.debug(f"Unexpected parsing error: {e}")
            raise ParseError(f"Parse failed: {e}")

    def error(self, token):
        """Handle syntax errors during parsing.

        Args:
            token: Problematic token or None for end-of-input errors

        Raises:
            ParseError: Always raises with detailed error information
        """
        if token:
            error_msg = (
                f"Syntax error near '{token.value}' "
                f"(type: {token.type}) at position {token.index}"
            )
        else:
            error_msg = "Syntax error: Unexpected end of filter"

        raise ParseError(error_msg)
