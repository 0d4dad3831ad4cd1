"""
Client-side evaluation of parsed filters against plain mappings.

    >>> from fiqlparser import parse
    >>> tree = parse("status==active;score=gt=10")
    >>> matches(tree, {"status": "active", "score": 12})
    True

Selector semantics:
- Dotted selectors (``owner.name``) walk nested mappings.
- A bare selector matches when the value is present and not an empty string.
- List values match `==`, `query` and `in` when any element matches; `<>` is
  the negation of `==`.

Argument semantics follow the recommended value type: numbers compare
numerically, date-times chronologically, and durations are resolved against
`now` (``updated=gt=-P1D`` means "updated within the last day").
"""

from __future__ import annotations

import operator as _operator
from collections import deque
from collections.abc import Callable, Iterator, Mapping
from datetime import date, datetime, timezone
from functools import cached_property
from typing import Any, cast

from .ast import ArgumentContext, Binary, Constant, Expression, Node, fold
from .classifiers import parse_datetime
from .types import Comparison, Operator, ValueType

Entity = Mapping[str, Any]
Predicate = Callable[[Entity], bool]

_MISSING = object()

_ORDERING: dict[Comparison, Callable[[Any, Any], bool]] = {
    Comparison.GT: _operator.gt,
    Comparison.LT: _operator.lt,
    Comparison.GTE: _operator.ge,
    Comparison.LTE: _operator.le,
}


def _get_entity_value(entity: Entity, selector: str) -> Any:
    """
    Look up a selector in an entity.

    Tries the exact key first, then the lowercase key, then walks dotted
    segments through nested mappings.
    """
    if selector in entity:
        return entity[selector]
    lowered = selector.lower()
    if lowered in entity:
        return entity[lowered]
    current: Any = entity
    for segment in selector.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return _MISSING
        current = current[segment]
    return current


def _is_present(value: Any) -> bool:
    return value is not _MISSING and value is not None and value != ""


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value))
    except ValueError:
        return None


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            result = parse_datetime(value)
        except ValueError:
            raw = value[:-1] + "+00:00" if value.endswith("Z") else value
            try:
                result = datetime.fromisoformat(raw)
            except ValueError:
                return None
    else:
        return None
    # Naive values are taken as UTC
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def _as_text(value: Any) -> str:
    # Dropdown-style values carry their label under "text"
    if isinstance(value, Mapping) and "text" in value:
        return str(value["text"])
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class _ComparisonMatcher:
    """Evaluates one comparison against single (non-list) values."""

    def __init__(self, comparison: Comparison, argument: Constant, now: datetime):
        self.comparison = comparison
        self.argument = argument
        self.context = ArgumentContext(argument)
        self.now = now

    @cached_property
    def target(self) -> Any:
        """The argument as a comparable value, or its text for strings."""
        recommended = self.argument.recommended
        if recommended is ValueType.NUMBER:
            return self.context.as_number()
        if recommended is ValueType.DATETIME:
            return self.context.as_datetime()
        if recommended is ValueType.DURATION:
            return self.now + self.context.as_duration().as_timedelta()
        return self.argument.value

    def _coerce(self, value: Any) -> Any:
        recommended = self.argument.recommended
        if recommended is ValueType.NUMBER:
            return _as_float(value)
        if recommended in (ValueType.DATETIME, ValueType.DURATION):
            return _as_datetime(value)
        return _as_text(value)

    def _glob(self, text: str) -> bool:
        pattern = self.argument.value
        if self.argument.prefix_wildcard and self.argument.suffix_wildcard:
            return pattern in text
        if self.argument.prefix_wildcard:
            return text.endswith(pattern)
        return text.startswith(pattern)

    def equals(self, value: Any) -> bool:
        if self.argument.prefix_wildcard or self.argument.suffix_wildcard:
            return self._glob(_as_text(value))
        coerced = self._coerce(value)
        if coerced is None:
            return False
        return coerced == self.target

    def orders(self, value: Any) -> bool:
        coerced = self._coerce(value)
        target = self.target
        if coerced is None or isinstance(target, str):
            return False
        return _ORDERING[self.comparison](coerced, target)

    def contains(self, value: Any) -> bool:
        return self.argument.value.lower() in _as_text(value).lower()

    def member(self, value: Any) -> bool:
        return _as_text(value) in self.context.as_tuple()


def _compile_comparison(node: Binary, now: datetime) -> Predicate:
    comparison = cast(Comparison, node.operator)
    selector = cast(Constant, node.left).value
    matcher = _ComparisonMatcher(comparison, cast(Constant, node.right), now)

    if comparison is Comparison.EQ or comparison is Comparison.NEQ:
        test = matcher.equals
    elif comparison is Comparison.IN:
        test = matcher.member
    elif comparison is Comparison.QUERY:
        test = matcher.contains
    else:
        test = matcher.orders

    def evaluate(entity: Entity) -> bool:
        value = _get_entity_value(entity, selector)
        if not _is_present(value):
            found = False
        elif isinstance(value, list):
            found = any(test(element) for element in value)
        else:
            found = test(value)
        return not found if comparison is Comparison.NEQ else found

    return evaluate


class _Junction:
    """
    AND/OR over two or more operands, evaluated left to right with
    short-circuiting.

    A chain ``a;b;c`` becomes one junction with three operands. Nested
    junctions (``a;b,c``) are evaluated with an explicit stack.
    """

    __slots__ = ("operator", "operands")

    def __init__(self, operator: Operator, operands: deque[Predicate]):
        self.operator = operator
        self.operands = operands

    def _settles(self, value: bool) -> bool:
        # False settles an AND, True settles an OR
        return bool(value) is (self.operator is Operator.OR)

    def __call__(self, entity: Entity) -> bool:
        result = False
        frames: list[tuple[_Junction, Iterator[Predicate]]] = [(self, iter(self.operands))]
        while frames:
            junction, remaining = frames[-1]
            operand = next(remaining, None)
            if operand is None:
                # No operand settled it; the last result is its value
                frames.pop()
            elif isinstance(operand, _Junction):
                frames.append((operand, iter(operand.operands)))
                continue
            else:
                result = bool(operand(entity))
                if not junction._settles(result):
                    continue
                frames.pop()
            # A finished junction hands its value to its parent, which may settle too
            while frames and frames[-1][0]._settles(result):
                frames.pop()
        return result


def _join(operator: Operator, left: Predicate, right: Predicate) -> _Junction:
    # Chains nest to the right, so the right operand is usually a junction to extend
    if isinstance(right, _Junction) and right.operator is operator:
        right.operands.appendleft(left)
        return right
    return _Junction(operator, deque([left, right]))


def _always(entity: Entity) -> bool:
    return True


def _compile_node(
    node: Node, operands: list[Predicate | None], now: datetime
) -> Predicate | None:
    match node:
        case Expression():
            return operands[0] if operands else _always
        case Binary(operator=Operator() as operator):
            left, right = operands
            if left is None or right is None:
                raise ValueError(f"Cannot evaluate node: {node!r}")
            return _join(operator, left, right)
        case Binary():
            return _compile_comparison(node, now)
        case Constant(unary=True, value=selector):
            return lambda entity: _is_present(_get_entity_value(entity, selector))
        case Constant():
            # Comparison operands; the comparison reads them itself
            return None
    raise ValueError(f"Cannot evaluate node: {node!r}")


def compile_predicate(tree: Node, *, now: datetime | None = None) -> Predicate:
    """
    Compile a parsed filter into a callable ``predicate(entity) -> bool``.

    Compiling and evaluating use explicit stacks, so chains of any length
    that `parse` accepts can be evaluated.

    Args:
        tree: A parsed filter (usually the result of `parse`)
        now: Reference time for duration arguments; defaults to the current UTC time

    Raises:
        ValueError: If `tree` is a bare argument or selector that is not unary
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    predicate = fold(tree, lambda node, operands: _compile_node(node, operands, now))
    if predicate is None:
        raise ValueError(f"Cannot evaluate node: {tree!r}")
    return predicate


def matches(tree: Node, entity: Entity, *, now: datetime | None = None) -> bool:
    """Evaluate a parsed filter against a single entity."""
    return compile_predicate(tree, now=now)(entity)
