"""
Recursive descent parser for FIQL filter strings.

Grammar (informal)::

    document   := [ sequence ]
    sequence   := unit { ( ";" | "," ) unit }
    unit       := "(" sequence ")" | comparison | selector
    comparison := selector comparator [ "*" ] argument [ "*" ]

`;` (AND) and `,` (OR) share one precedence level and nest to the right, so
``a==b;c==d,f==g`` parses as ``AND(a==b, OR(c==d, f==g))``. Use parentheses
to group differently.

Differences from draft-nottingham-atompub-fiql-00: there is no negation,
and two extra comparators exist, ``=in=`` (tuple membership, ``[a+b+c]``) and
``=q=`` (free-form query).
"""

from __future__ import annotations

import logging

from .ast import Binary, Constant, Expression, Node
from .classifiers import classify
from .exceptions import (
    DanglingComparatorError,
    DanglingOperatorError,
    FiqlParseError,
    FiqlSyntaxError,
    ValueValidationError,
)
from .lexer import Lexer, Token, TokenType
from .policies import Policies, UnaryPolicy
from .types import Comparison, Operator

logger = logging.getLogger(__name__)

# Tokens after which a value is a bare selector rather than a comparison's left side
_UNARY_FOLLOWERS = frozenset([TokenType.AND, TokenType.OR, TokenType.BRACE_CLOSE, TokenType.EOF])


class _Grammar:
    """Builds one tree from one lexer; not reusable."""

    def __init__(self, lexer: Lexer, policies: Policies):
        self.lexer = lexer
        self.policies = policies

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def _position(self) -> dict[str, int]:
        return {"line": self.lexer.line, "column": self.lexer.column}

    def _syntax_error(self, detail: str) -> FiqlSyntaxError:
        return FiqlSyntaxError(f"syntax error ({detail})", **self._position())

    def _expected(self, token: Token, expected: str) -> FiqlSyntaxError:
        return self._syntax_error(f"got `{token.type.value}` but expected {expected}")

    def _invalid_closing_brace(self) -> FiqlSyntaxError:
        return self._syntax_error("invalid closing brace `)` ")

    def _unclosed_brace(self) -> FiqlSyntaxError:
        return self._syntax_error("unclosed brace `)` ")

    # -------------------------------------------------------------------------
    # Productions
    # -------------------------------------------------------------------------

    def parse_document(self) -> Expression:
        return Expression(self._parse_sequence(is_root=True), is_root=True)

    def _parse_sequence(self, *, is_root: bool) -> Node | None:
        """Parse units joined by logic operators and fold them to the right."""
        units: list[Node] = []
        operators: list[Operator] = []
        while True:
            unit = self._parse_unit(after_operator=bool(operators), is_root=is_root)
            if unit is None:
                return None
            units.append(unit)
            following = self.lexer.peek_token()
            if following.type.is_logic:
                self.lexer.next_token()
                operators.append(Operator(following.type.value))
                continue
            self._check_unit_end(following, is_root=is_root)
            break

        node = units.pop()
        while units:
            node = Binary(operators.pop(), units.pop(), node)
        return node

    def _parse_unit(self, *, after_operator: bool, is_root: bool) -> Node | None:
        token = self.lexer.next_token()
        token_type = token.type

        if token_type is TokenType.EOF:
            if after_operator:
                raise DanglingOperatorError(**self._position())
            if is_root:
                return None
            raise self._unclosed_brace()
        if token_type is TokenType.BRACE_CLOSE:
            raise self._invalid_closing_brace()
        if token_type.is_logic:
            raise DanglingOperatorError(**self._position())
        if token_type.is_comparator:
            raise DanglingComparatorError(**self._position())
        if token_type is TokenType.BRACE_OPEN:
            return self._parse_group()
        if token_type is TokenType.WILDCARD:
            raise self._expected(token, "a value")
        return self._parse_selector(token.value)

    def _parse_group(self) -> Expression:
        body = self._parse_sequence(is_root=False)
        if self.lexer.next_token().type is not TokenType.BRACE_CLOSE:
            raise self._unclosed_brace()
        return Expression(body, is_root=False)

    def _parse_selector(self, selector: str) -> Node:
        if self.lexer.peek_token().type in _UNARY_FOLLOWERS:
            if self.policies.unary is UnaryPolicy.DENY:
                raise DanglingComparatorError(**self._position())
            return Constant.selector(selector, unary=True)
        return self._parse_comparison(selector)

    def _parse_comparison(self, selector: str) -> Binary:
        token = self.lexer.next_token()
        if not token.type.is_comparator:
            raise self._expected(token, "a value")
        comparison = Comparison(token.type.value)

        prefix_wildcard = False
        token = self.lexer.next_token()
        if token.type is TokenType.WILDCARD:
            prefix_wildcard = True
            token = self.lexer.next_token()
        if token.type is not TokenType.VALUE:
            raise self._expected(token, "a value")

        literal = self.lexer.last_literal
        result = classify(comparison, literal)
        if not result.accepted:
            raise ValueValidationError(literal, result.hint, **self._position())

        suffix_wildcard = False
        if self.lexer.peek_token().type is TokenType.WILDCARD:
            self.lexer.next_token()
            suffix_wildcard = True

        argument = Constant.argument(
            literal,
            recommended=result.recommended,
            prefix_wildcard=prefix_wildcard,
            suffix_wildcard=suffix_wildcard,
        )
        return Binary(comparison, Constant.selector(selector), argument)

    def _check_unit_end(self, following: Token, *, is_root: bool) -> None:
        """Reject anything but a logic operator, EOF or a closing brace after a unit."""
        token_type = following.type
        if token_type is TokenType.EOF:
            return
        if token_type is TokenType.BRACE_CLOSE:
            if is_root:
                raise self._invalid_closing_brace()
            return
        if token_type.is_comparator:
            raise DanglingComparatorError(**self._position())
        raise self._expected(following, "an operator")


class Parser:
    """
    FIQL parser.

    A parser holds only its policies; every `parse` call gets its own lexer,
    so one instance can be shared between threads.
    """

    def __init__(self, policies: Policies | None = None):
        self.policies = policies or Policies()

    def parse(self, text: str) -> Expression:
        """
        Parse `text` into a tree whose root is an `Expression`.

        Raises:
            FiqlParseError: On the first lexical, syntax or validation error
        """
        grammar = _Grammar(Lexer(text), self.policies)
        try:
            tree = grammar.parse_document()
        except FiqlParseError as e:
            logger.debug(f"Failed to parse filter {text!r}: {e}")
            raise
        logger.debug(f"Parsed filter {text!r}")
        return tree


def parse(text: str, *, policies: Policies | None = None) -> Expression:
    """
    Parse a FIQL filter string.

    Examples:
        >>> str(parse("title==foo*;(updated=lt=-P1D,title==*bar)"))
        '(title == foo* AND (updated < -P1D OR title == *bar))'

        >>> parse("a==b;c==d,f==g").child.operator
        <Operator.AND: 'AND'>
    """
    return Parser(policies).parse(text)
