"""
Tokenizer for FIQL filter strings.

The lexer reads one token at a time on demand. The grammar needs a single
token of lookahead, which `peek_token` provides by snapshotting the cursor,
reading a token and restoring the snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .exceptions import UnexpectedEOFError, UnexpectedInputError


class TokenType(Enum):
    """Token types; the value is the name used in diagnostics."""

    VALUE = "Value"
    WILDCARD = "*"
    BRACE_OPEN = "("
    BRACE_CLOSE = ")"
    AND = "AND"  # ;
    OR = "OR"  # ,

    # standard FIQL comparisons
    EQUAL = "=="  # ==
    NOT_EQUAL = "<>"  # !=
    GREATER = ">"  # =gt=
    LESS = "<"  # =lt=
    GREATER_EQUAL = ">="  # =ge=
    LESS_EQUAL = "<="  # =le=
    # extensions
    IN = "in"  # =in=
    QUERY = "query"  # =q=

    EOF = "eof"

    @property
    def is_comparator(self) -> bool:
        return self in _COMPARATOR_TYPES

    @property
    def is_logic(self) -> bool:
        return self is TokenType.AND or self is TokenType.OR


_COMPARATOR_TYPES = frozenset(
    [
        TokenType.EQUAL,
        TokenType.NOT_EQUAL,
        TokenType.GREATER,
        TokenType.LESS,
        TokenType.GREATER_EQUAL,
        TokenType.LESS_EQUAL,
        TokenType.IN,
        TokenType.QUERY,
    ]
)

_COMPARATORS = {
    "==": TokenType.EQUAL,
    "!=": TokenType.NOT_EQUAL,
    "=gt=": TokenType.GREATER,
    "=ge=": TokenType.GREATER_EQUAL,
    "=lt=": TokenType.LESS,
    "=le=": TokenType.LESS_EQUAL,
    "=in=": TokenType.IN,
    "=q=": TokenType.QUERY,
}

_VALID_COMPARATORS = ",".join(_COMPARATORS)

# Characters allowed between the opening and closing `=` of a comparator
_COMPARATOR_CHARS = frozenset("=gltqein")

# Characters that end an unescaped value
_VALUE_DELIMITERS = frozenset(";,!=)*")

_SINGLE_CHAR_TOKENS = {
    "(": TokenType.BRACE_OPEN,
    ")": TokenType.BRACE_CLOSE,
    ";": TokenType.AND,
    ",": TokenType.OR,
    "*": TokenType.WILDCARD,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A token read from the filter string."""

    type: TokenType
    value: str = ""


@dataclass(frozen=True, slots=True)
class _Cursor:
    pos: int
    line: int
    column: int
    last_literal: str


class Lexer:
    """Reads tokens from a filter string, tracking line and column."""

    def __init__(self, text: str):
        self.text = text
        self.length = len(text)
        self.pos = 0
        self.line = 1
        self.column = 0
        self._last_literal = ""

    @property
    def last_literal(self) -> str:
        """Text of the most recently read value token."""
        return self._last_literal

    def _snapshot(self) -> _Cursor:
        return _Cursor(self.pos, self.line, self.column, self._last_literal)

    def _restore(self, cursor: _Cursor) -> None:
        self.pos = cursor.pos
        self.line = cursor.line
        self.column = cursor.column
        self._last_literal = cursor.last_literal

    def _peek_char(self) -> str | None:
        if self.pos < self.length:
            return self.text[self.pos]
        return None

    def _consume_char(self) -> str:
        ch = self.text[self.pos]
        if ch == "\n":
            self.line += 1
            self.column = 0
        else:
            self.column += 1
        self.pos += 1
        return ch

    def _unexpected_input(self, got: str) -> UnexpectedInputError:
        return UnexpectedInputError(
            f"unexpected input (got `{got}` but expected one of {_VALID_COMPARATORS})",
            line=self.line,
            column=self.column,
        )

    def _read_comparator(self) -> Token:
        chars = [self._consume_char()]
        while True:
            ch = self._peek_char()
            if ch is None:
                raise UnexpectedEOFError(line=self.line, column=self.column)
            if ch not in _COMPARATOR_CHARS:
                chars.append(ch)
                raise self._unexpected_input("".join(chars))
            chars.append(self._consume_char())
            if ch == "=":
                break
        text = "".join(chars)
        token_type = _COMPARATORS.get(text.lower())
        if token_type is None:
            raise self._unexpected_input(text)
        return Token(token_type)

    def _read_value(self) -> Token:
        result: list[str] = []
        escaped = False
        while self.pos < self.length:
            ch = self.text[self.pos]
            if escaped:
                result.append(self._consume_char())
                escaped = False
            elif ch.isspace() or ch in _VALUE_DELIMITERS:
                break
            elif ch == "\\":
                self._consume_char()
                escaped = True
            else:
                result.append(self._consume_char())
        if escaped:
            raise UnexpectedEOFError(line=self.line, column=self.column)
        value = "".join(result)
        self._last_literal = value
        return Token(TokenType.VALUE, value)

    def next_token(self) -> Token:
        """Read and return the next token, advancing the cursor."""
        while True:
            ch = self._peek_char()
            if ch is None:
                return Token(TokenType.EOF)
            if ch.isspace():
                self._consume_char()
                continue
            if ch == "!" or ch == "=":
                return self._read_comparator()
            single = _SINGLE_CHAR_TOKENS.get(ch)
            if single is not None:
                self._consume_char()
                return Token(single)
            return self._read_value()

    def peek_token(self) -> Token:
        """Return the next token without advancing the cursor."""
        cursor = self._snapshot()
        try:
            return self.next_token()
        finally:
            self._restore(cursor)
