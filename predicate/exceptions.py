# predicate/exceptions.py
# This file is part of Sightline - Live Console Views
#
# Custom exceptions for filter expression parsing

"""Domain-specific exceptions for filter expression processing.

Raised while tokenizing or parsing filter expressions, and when an
expression names a field records do not have or a value that field
cannot hold.
"""


class ParseError(RuntimeError):
    """Exception raised when a filter expression cannot be parsed.

    Indicates that the input does not conform to the filter grammar, or
    that a comparison uses an unknown field or an invalid value. Used
    throughout the parsing pipeline to provide consistent error handling.
    """

    pass
