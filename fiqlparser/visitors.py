"""
Visitor protocol for walking a parsed filter.

`Node.accept` calls the visitor in infix order: for ``a==b;c==d`` a visitor
sees expression-entered, selector ``a``, comparison ``==``, argument ``b``,
operator ``AND``, selector ``c``, comparison ``==``, argument ``d`` and
expression-left.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .types import Comparison, Operator

if TYPE_CHECKING:
    from .ast import ArgumentContext, SelectorContext


class NodeVisitor(ABC):
    """Receives ordered callbacks while a tree is traversed."""

    @abstractmethod
    def visit_expression_entered(self) -> None:
        """Called when the document or a parenthesized group is entered."""
        ...

    @abstractmethod
    def visit_expression_left(self) -> None:
        """Called when the document or a parenthesized group is left."""
        ...

    @abstractmethod
    def visit_operator(self, operator: Operator) -> None:
        """Called between the two operands of a logic operator."""
        ...

    @abstractmethod
    def visit_selector(self, selector: SelectorContext) -> None:
        ...

    @abstractmethod
    def visit_comparison(self, comparison: Comparison) -> None:
        """Called between the selector and the argument of a comparison."""
        ...

    @abstractmethod
    def visit_argument(self, argument: ArgumentContext) -> None:
        ...


class TextVisitor(NodeVisitor):
    """
    Render a tree as text.

    By default comparisons are written without surrounding spaces, e.g.
    ``((title==foo*) AND (fml==x OR (xfs==a AND f==fx)))``. With
    ``spaced=True`` the output matches `Node.to_string`.
    """

    def __init__(self, *, spaced: bool = False) -> None:
        self._parts: list[str] = []
        self._comparison_sep = " " if spaced else ""

    def visit_expression_entered(self) -> None:
        self._parts.append("(")

    def visit_expression_left(self) -> None:
        self._parts.append(")")

    def visit_operator(self, operator: Operator) -> None:
        self._parts.append(f" {operator.value} ")

    def visit_selector(self, selector: SelectorContext) -> None:
        self._parts.append(selector.selector)

    def visit_comparison(self, comparison: Comparison) -> None:
        sep = self._comparison_sep
        self._parts.append(f"{sep}{comparison.value}{sep}")

    def visit_argument(self, argument: ArgumentContext) -> None:
        self._parts.append(argument.render())

    def getvalue(self) -> str:
        return "".join(self._parts)

    def __str__(self) -> str:
        return self.getvalue()
