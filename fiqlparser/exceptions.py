"""
Exception hierarchy for fiqlparser.

Parse failures carry the 1-based line and the column at which the parser
stopped. The column counts characters consumed on the current line, so it
points at the last character read before the failure was detected.
"""

from __future__ import annotations


class FiqlError(Exception):
    """Base class for all fiqlparser errors."""


class FiqlParseError(FiqlError):
    """A filter string could not be parsed."""

    def __init__(self, message: str, *, line: int, column: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return f"ln:{self.line}:{self.column} {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


# =============================================================================
# Lexical errors
# =============================================================================


class UnexpectedInputError(FiqlParseError):
    """An unexpected character was read while tokenizing."""


class UnexpectedEOFError(FiqlParseError):
    """The input ended in the middle of a token."""

    def __init__(self, *, line: int, column: int) -> None:
        super().__init__("unexpected end of file", line=line, column=column)


# =============================================================================
# Grammar errors
# =============================================================================


class FiqlSyntaxError(FiqlParseError):
    """A token appeared where the grammar does not allow it."""


class DanglingOperatorError(FiqlParseError):
    """A logic operator is missing an operand."""

    def __init__(self, *, line: int, column: int) -> None:
        super().__init__("dangling operator", line=line, column=column)


class DanglingComparatorError(FiqlParseError):
    """A comparator is missing its selector or argument."""

    def __init__(self, *, line: int, column: int) -> None:
        super().__init__("dangling comparator", line=line, column=column)


class ValueValidationError(FiqlSyntaxError):
    """An argument does not have the shape its comparator requires."""

    def __init__(self, literal: str, hint: str, *, line: int, column: int) -> None:
        super().__init__(
            f"syntax error (got `{literal}` but expected {hint})", line=line, column=column
        )
        self.literal = literal
        self.hint = hint


# =============================================================================
# Value errors
# =============================================================================


class DurationParseError(FiqlError, ValueError):
    """A duration literal is not a valid ISO 8601 duration."""


class ValueConversionError(FiqlError, ValueError):
    """An argument could not be converted to the requested type."""
