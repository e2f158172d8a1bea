# predicate/lexer.py
# This file is part of Sightline - Live Console Views
#
# Lexical analyzer for filter expressions using SLY

"""Lexical analyzer for filter expression strings.

This module implements tokenization of record filter expressions such as
``level >= error & (host ~ "api" | !(status_code < 400))``, breaking input
strings into tokens for parser consumption.

Supported Tokens:
- Comparison operators: ==, =, !=, >, >=, <, <=, ~, !~, =~, ^=
- Boolean operators: !, &, |, and their keywords not, and, or
- Literals: quoted strings, numbers, true, false, null
- Identifiers: field names and bare-word values
- Whitespace: ignored during tokenization
"""

import json

from sly import Lexer
from utils.logger import get_logger


class FilterLexer(Lexer):
    """SLY-based lexer for filter expression tokenization.

    Patterns are tried in definition order, so multi-character operators
    are declared before their single-character prefixes.
    """

    tokens = {
        "ID",
        "STRING",
        "NUMBER",
        "TRUE",
        "FALSE",
        "NULL",
        "NOT",
        "AND",
        "OR",
        "LPAREN",
        "RPAREN",
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
    }

    # Whitespace characters to ignore
    ignore = " \t\r\n"

    NE = r"!="
    NCONTAINS = r"!~"
    NOT = r"!"
    MATCHES = r"=~"

    @_(r"==?")
    def EQ(self, t):
        t.value = "=="
        return t

    BEGINS = r"\^="
    GE = r">="
    GT = r">"
    LE = r"<="
    LT = r"<"
    CONTAINS = r"~"
    AND = r"&&?"
    OR = r"\|\|?"
    LPAREN = r"\("
    RPAREN = r"\)"

    @_(r'"(?:[^"\\]|\\.)*"', r"'(?:[^'\\]|\\.)*'")
    def STRING(self, t):
        t.value = _unquote(t.value)
        return t

    @_(r"-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?")
    def NUMBER(self, t):
        text = t.value
        t.value = float(text) if any(c in text for c in ".eE") else int(text)
        return t

    # Field names and bare-word values (hosts, paths, labels)
    ID = r"[a-zA-Z_][a-zA-Z0-9_.\-/:]*"

    # Keyword mapping: reassign token types for reserved words
    ID["and"] = "AND"
    ID["AND"] = "AND"
    ID["or"] = "OR"
    ID["OR"] = "OR"
    ID["not"] = "NOT"
    ID["NOT"] = "NOT"
    ID["true"] = "TRUE"
    ID["false"] = "FALSE"
    ID["null"] = "NULL"

    def error(self, t):
        """Handle illegal characters during tokenization.

        Raises:
            ValueError: Always raised with character and position information
        """
        logger = get_logger()

        illegal_char = t.value[0]
        error_pos = self.index

        logger.debug(f"Illegal character '{illegal_char}' at position {error_pos}")

        self.index += 1

        raise ValueError(
            f"Illegal character '{illegal_char}' encountered at position {error_pos}"
        )


def _unquote(text: str) -> str:
    """Strip quotes from a string literal and resolve its escapes.

    Double-quoted literals use JSON escapes; backslashes that do not form
    a valid escape (as in regular expressions like "\\d+") are kept as is.
    """
    quote, body = text[0], text[1:-1]
    if quote == '"':
        try:
            return json.loads(text)
        except ValueError:
            return body.replace('\\"', '"')
    return body.replace("\\'", "'")
