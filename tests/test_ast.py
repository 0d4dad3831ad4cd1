"""Tests for AST nodes, traversal and visitors."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from fiqlparser import (
    ArgumentContext,
    Binary,
    Comparison,
    Constant,
    ConstantRole,
    DurationParseError,
    Expression,
    NodeType,
    NodeVisitor,
    Operator,
    SelectorContext,
    TextVisitor,
    ValueConversionError,
    ValueType,
    fold,
    parse,
    walk,
)


class RecordingVisitor(NodeVisitor):
    def __init__(self) -> None:
        self.events: list[str] = []

    def visit_expression_entered(self) -> None:
        self.events.append("enter")

    def visit_expression_left(self) -> None:
        self.events.append("leave")

    def visit_operator(self, operator: Operator) -> None:
        self.events.append(f"op:{operator.value}")

    def visit_selector(self, selector: SelectorContext) -> None:
        suffix = "?" if selector.unary else ""
        self.events.append(f"sel:{selector.selector}{suffix}")

    def visit_comparison(self, comparison: Comparison) -> None:
        self.events.append(f"cmp:{comparison.value}")

    def visit_argument(self, argument: ArgumentContext) -> None:
        self.events.append(f"arg:{argument.render()}:{argument.value_recommendation.value}")


# =============================================================================
# Visitor traversal
# =============================================================================


def test_visitor_sees_nodes_in_infix_order() -> None:
    visitor = RecordingVisitor()
    parse("a==b;(c=gt=1,d)").accept(visitor)
    assert visitor.events == [
        "enter",
        "sel:a",
        "cmp:==",
        "arg:b:string",
        "op:AND",
        "enter",
        "sel:c",
        "cmp:>",
        "arg:1:number",
        "op:OR",
        "sel:d?",
        "leave",
        "leave",
    ]


def test_text_visitor_renders_compact_comparisons() -> None:
    visitor = TextVisitor()
    parse("(title==foo*);(fml==x,(xfs==a;f==fx))").accept(visitor)
    assert str(visitor) == "((title==foo*) AND (fml==x OR (xfs==a AND f==fx)))"


def test_text_visitor_spaced_matches_to_string() -> None:
    tree = parse("a=le=-P1D,b=q=x")
    visitor = TextVisitor(spaced=True)
    tree.accept(visitor)
    assert visitor.getvalue() == tree.to_string() == "(a <= -P1D OR b query x)"


def test_subtree_accept() -> None:
    comparison = parse("a==b;c==d").child.right
    visitor = TextVisitor()
    comparison.accept(visitor)
    assert visitor.getvalue() == "c==d"
    assert comparison.to_string() == "c == d"


def test_visitor_must_implement_all_callbacks() -> None:
    class Partial(NodeVisitor):
        def visit_selector(self, selector: SelectorContext) -> None:
            pass

    with pytest.raises(TypeError):
        Partial()  # type: ignore[abstract]


# =============================================================================
# Node structure
# =============================================================================


def test_node_types_and_children() -> None:
    tree = parse("a==b")
    comparison = tree.child
    assert tree.node_type is NodeType.EXPRESSION
    assert comparison.node_type is NodeType.BINARY
    assert comparison.left.node_type is NodeType.CONSTANT
    assert tree.children == (comparison,)
    assert comparison.children == (comparison.left, comparison.right)
    assert comparison.left.children == ()
    assert not comparison.is_logic
    assert parse("a==b;c==d").child.is_logic


def test_walk_is_preorder() -> None:
    values = [
        node.value if isinstance(node, Constant) else node.node_type.value
        for node in walk(parse("a==b,c"))
    ]
    assert values == ["Expr", "Binary", "Binary", "a", "b", "c"]


def test_nodes_are_immutable() -> None:
    constant = Constant.selector("a")
    with pytest.raises(AttributeError):
        constant.value = "b"  # type: ignore[misc]


def test_binary_requires_both_children() -> None:
    with pytest.raises(ValueError):
        Binary(Operator.AND, Constant.selector("a", unary=True), None)  # type: ignore[arg-type]


def test_comparison_requires_selector_and_argument() -> None:
    selector = Constant.selector("a")
    argument = Constant.argument("b")
    Binary(Comparison.EQ, selector, argument)
    with pytest.raises(ValueError):
        Binary(Comparison.EQ, argument, selector)
    with pytest.raises(ValueError):
        Binary(Comparison.EQ, selector, Expression(argument, is_root=False))


def test_selector_cannot_have_wildcards() -> None:
    with pytest.raises(ValueError):
        Constant("a", ConstantRole.SELECTOR, prefix_wildcard=True)


def test_argument_cannot_be_unary() -> None:
    with pytest.raises(ValueError):
        Constant("a", ConstantRole.ARGUMENT, unary=True)


def test_comparison_spellings() -> None:
    assert Comparison.NEQ.value == "<>"
    assert Comparison.NEQ.fiql == "!="
    assert Comparison.GTE.fiql == "=ge="
    assert Comparison.QUERY.fiql == "=q="


# =============================================================================
# Argument helpers
# =============================================================================


def _argument(fiql: str) -> ArgumentContext:
    return ArgumentContext(parse(fiql).child.right)


def test_argument_as_number() -> None:
    assert _argument("a=gt=1.5").as_number() == 1.5
    assert _argument("a=gt=-3").as_integer() == -3
    with pytest.raises(ValueConversionError):
        _argument("a=gt=1.5").as_integer()
    with pytest.raises(ValueConversionError, match="not a number"):
        _argument("a==abc").as_number()


def test_argument_as_datetime() -> None:
    value = _argument("a=gt=2003-12-13T18:30:02.25+02:00").as_datetime()
    assert value == datetime(2003, 12, 13, 16, 30, 2, 250000, tzinfo=timezone.utc)
    assert value.utcoffset() == timedelta(hours=2)
    with pytest.raises(ValueConversionError):
        _argument("a==yesterday").as_datetime()


def test_argument_as_duration() -> None:
    duration = _argument("a=lt=-P1D").as_duration()
    assert duration.negative
    assert duration.as_timedelta() == timedelta(days=-1)
    with pytest.raises(DurationParseError):
        _argument("a==x").as_duration()


def test_argument_as_tuple() -> None:
    assert _argument("a=in=[x+y+z]").as_tuple() == ["x", "y", "z"]
    assert _argument("a=in=[]").as_tuple() == []
    with pytest.raises(ValueConversionError):
        _argument("a==x").as_tuple()


def test_argument_wildcard_flags() -> None:
    argument = _argument("a==*x")
    assert argument.starts_with_wildcard
    assert not argument.ends_with_wildcard
    assert argument.as_string() == "x"
    assert argument.render() == "*x"
    assert argument.value_recommendation is ValueType.STRING


def test_fold_combines_children_in_order() -> None:
    def render(node, results: list[str]) -> str:
        if isinstance(node, Constant):
            return node.render()
        if isinstance(node, Binary):
            return f"{node.operator.name}({results[0]}, {results[1]})"
        return f"[{''.join(results)}]"

    assert fold(parse("a==b*;(c,d=gt=1)"), render) == "[AND(EQ(a, b*), [OR(c, GT(d, 1))])]"


def test_fold_long_chain() -> None:
    count = 5000
    tree = parse(";".join(f"f{i}==v{i}" for i in range(count)))
    leaves = fold(tree, lambda node, results: sum(results) if results else 1)
    assert leaves == count * 2
