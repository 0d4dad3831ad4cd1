"""
AST nodes for parsed filters.

A tree is built from three frozen node types:

- `Expression`: the document root or a parenthesized group, holding at most
  one child.
- `Binary`: a logic operator or a comparison with exactly two children.
- `Constant`: a selector or an argument leaf.

Logic chains nest to the right: ``a==b;c==d,f==g`` is
``AND(a==b, OR(c==d, f==g))``. Traversal (`accept`, `walk`, `fold`) uses an
explicit stack, so long chains do not consume interpreter stack depth.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import TypeVar, Union

from .classifiers import is_number, is_tuple, parse_datetime
from .duration import ISO8601Duration, parse_duration
from .exceptions import ValueConversionError
from .types import Comparison, ConstantRole, NodeType, Operator, ValueType
from .visitors import NodeVisitor, TextVisitor

Node = Union["Expression", "Binary", "Constant"]
T = TypeVar("T")


# =============================================================================
# Nodes
# =============================================================================


class _NodeMixin:
    """Traversal and rendering shared by every node type."""

    __slots__ = ()

    def accept(self, visitor: NodeVisitor) -> None:
        """Walk the tree rooted at this node, notifying `visitor` in infix order."""
        pending: list[Node | Callable[[], None]] = [self]  # type: ignore[list-item]
        while pending:
            item = pending.pop()
            match item:
                case Expression(child=child):
                    visitor.visit_expression_entered()
                    pending.append(visitor.visit_expression_left)
                    if child is not None:
                        pending.append(child)
                case Binary(operator=operator, left=left, right=right):
                    pending.append(right)
                    if isinstance(operator, Operator):
                        pending.append(lambda op=operator: visitor.visit_operator(op))
                    else:
                        pending.append(lambda cmp=operator: visitor.visit_comparison(cmp))
                    pending.append(left)
                case Constant(role=ConstantRole.SELECTOR):
                    visitor.visit_selector(SelectorContext(item))
                case Constant():
                    visitor.visit_argument(ArgumentContext(item))
                case _:
                    item()

    def to_string(self) -> str:
        """Render the node with normalized whitespace, e.g. ``(a == b OR c > 1)``."""
        renderer = TextVisitor(spaced=True)
        self.accept(renderer)
        return renderer.getvalue()

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True, slots=True)
class Constant(_NodeMixin):
    """A selector or an argument."""

    value: str
    role: ConstantRole
    prefix_wildcard: bool = False
    suffix_wildcard: bool = False
    recommended: ValueType = ValueType.STRING
    unary: bool = False

    def __post_init__(self) -> None:
        if self.role is ConstantRole.SELECTOR:
            if self.prefix_wildcard or self.suffix_wildcard:
                raise ValueError("a selector cannot carry wildcards")
        elif self.unary:
            raise ValueError("only a selector can be unary")

    @classmethod
    def selector(cls, value: str, *, unary: bool = False) -> Constant:
        return cls(value, ConstantRole.SELECTOR, unary=unary)

    @classmethod
    def argument(
        cls,
        value: str,
        *,
        recommended: ValueType = ValueType.STRING,
        prefix_wildcard: bool = False,
        suffix_wildcard: bool = False,
    ) -> Constant:
        return cls(
            value,
            ConstantRole.ARGUMENT,
            prefix_wildcard=prefix_wildcard,
            suffix_wildcard=suffix_wildcard,
            recommended=recommended,
        )

    @property
    def node_type(self) -> NodeType:
        return NodeType.CONSTANT

    @property
    def children(self) -> tuple[Node, ...]:
        return ()

    @property
    def is_selector(self) -> bool:
        return self.role is ConstantRole.SELECTOR

    def render(self) -> str:
        """The value with its wildcard markers, e.g. ``*foo*``."""
        prefix = "*" if self.prefix_wildcard else ""
        suffix = "*" if self.suffix_wildcard else ""
        return f"{prefix}{self.value}{suffix}"


@dataclass(frozen=True, slots=True)
class Binary(_NodeMixin):
    """A logic operator or a comparison joining exactly two nodes."""

    operator: Operator | Comparison
    left: Node
    right: Node

    def __post_init__(self) -> None:
        if self.left is None or self.right is None:
            raise ValueError("a binary node needs both a left and a right child")
        if isinstance(self.operator, Comparison):
            if not (isinstance(self.left, Constant) and self.left.is_selector):
                raise ValueError("the left side of a comparison must be a selector")
            if not (isinstance(self.right, Constant) and not self.right.is_selector):
                raise ValueError("the right side of a comparison must be an argument")

    @property
    def node_type(self) -> NodeType:
        return NodeType.BINARY

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.left, self.right)

    @property
    def is_logic(self) -> bool:
        return isinstance(self.operator, Operator)


@dataclass(frozen=True, slots=True)
class Expression(_NodeMixin):
    """The document root (`is_root`) or a parenthesized group."""

    child: Node | None = None
    is_root: bool = True

    @property
    def node_type(self) -> NodeType:
        return NodeType.EXPRESSION

    @property
    def children(self) -> tuple[Node, ...]:
        return () if self.child is None else (self.child,)


def walk(node: Node) -> Iterator[Node]:
    """Yield `node` and all of its descendants, depth-first, pre-order."""
    pending: list[Node] = [node]
    while pending:
        current = pending.pop()
        yield current
        pending.extend(reversed(current.children))


def fold(node: Node, combine: Callable[[Node, list[T]], T]) -> T:
    """
    Reduce a tree bottom-up.

    `combine(node, results)` is called once per node, after all of its
    children, with the children's results in order. Uses an explicit stack,
    so arbitrarily long chains can be folded.

    Example:
        >>> fold(parse("a==b;c"), lambda node, results: 1 + sum(results))
        6
    """
    results: list[T] = []
    pending: list[tuple[Node, bool]] = [(node, False)]
    while pending:
        current, expanded = pending.pop()
        children = current.children
        if expanded or not children:
            split = len(results) - len(children)
            combined = combine(current, results[split:])
            del results[split:]
            results.append(combined)
        else:
            pending.append((current, True))
            pending.extend((child, False) for child in reversed(children))
    return results[0]


# =============================================================================
# Visitor contexts
# =============================================================================


@dataclass(frozen=True, slots=True)
class SelectorContext:
    """What a visitor learns about a selector."""

    constant: Constant

    @property
    def selector(self) -> str:
        return self.constant.value

    @property
    def unary(self) -> bool:
        """True for a bare selector used as an existence check."""
        return self.constant.unary


@dataclass(frozen=True, slots=True)
class ArgumentContext:
    """
    What a visitor learns about an argument.

    The raw text is kept as written; the `as_*` helpers reinterpret it on
    demand and raise `ValueConversionError` (or `DurationParseError`) when it
    does not have the requested shape.
    """

    constant: Constant

    @property
    def value_recommendation(self) -> ValueType:
        return self.constant.recommended

    @property
    def starts_with_wildcard(self) -> bool:
        return self.constant.prefix_wildcard

    @property
    def ends_with_wildcard(self) -> bool:
        return self.constant.suffix_wildcard

    def render(self) -> str:
        return self.constant.render()

    def as_string(self) -> str:
        return self.constant.value

    def as_number(self) -> float:
        text = self.constant.value
        if not is_number(text):
            raise ValueConversionError(f"`{text}` is not a number")
        return float(text)

    def as_integer(self) -> int:
        number = self.as_number()
        if not number.is_integer():
            raise ValueConversionError(f"`{self.constant.value}` is not an integer")
        return int(number)

    def as_datetime(self) -> datetime:
        try:
            return parse_datetime(self.constant.value)
        except ValueError as e:
            raise ValueConversionError(f"`{self.constant.value}` is not a date-time") from e

    def as_duration(self) -> ISO8601Duration:
        return parse_duration(self.constant.value)

    def as_tuple(self) -> list[str]:
        """Split ``[a+b+c]`` into ``["a", "b", "c"]``."""
        text = self.constant.value
        if not is_tuple(text):
            raise ValueConversionError(f"`{text}` is not a tuple")
        inner = text[1:-1]
        return inner.split("+") if inner else []
