"""
Enumerations shared across the AST, classifiers and serializers.

Naming follows https://datatracker.ietf.org/doc/html/draft-nottingham-atompub-fiql-00#section-3.2
"""

from __future__ import annotations

from enum import Enum


class NodeType(str, Enum):
    """Node kind discriminator; the value is the serialized `Type`."""

    EXPRESSION = "Expr"
    BINARY = "Binary"
    CONSTANT = "Const"


class Operator(str, Enum):
    """Logic operators joining two units."""

    AND = "AND"
    OR = "OR"


class Comparison(str, Enum):
    """FIQL comparisons plus the `=in=` and `=q=` extensions."""

    EQ = "=="
    NEQ = "<>"
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    IN = "in"
    QUERY = "query"

    @property
    def fiql(self) -> str:
        """The comparator as written in a filter string."""
        return _FIQL_SPELLING[self]


_FIQL_SPELLING = {
    Comparison.EQ: "==",
    Comparison.NEQ: "!=",
    Comparison.GT: "=gt=",
    Comparison.LT: "=lt=",
    Comparison.GTE: "=ge=",
    Comparison.LTE: "=le=",
    Comparison.IN: "=in=",
    Comparison.QUERY: "=q=",
}


class ValueType(str, Enum):
    """Recommended semantic type of an argument."""

    STRING = "string"
    NUMBER = "number"
    DATETIME = "datetime"
    DURATION = "duration"
    TUPLE = "tuple"


class ConstantRole(Enum):
    SELECTOR = "selector"
    ARGUMENT = "argument"
