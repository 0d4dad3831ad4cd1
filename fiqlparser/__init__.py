"""
fiqlparser: a FIQL filter parser.

Turns filter strings such as ``(title==foo*);(fml==x,(xfs==a;f==fx))`` into
an immutable AST that can be walked with a `NodeVisitor`, serialized to JSON
or evaluated against plain mappings.

Example:
    from fiqlparser import parse, TextVisitor

    tree = parse("title==foo*;(updated=lt=-P1D,title==*bar)")
    visitor = TextVisitor()
    tree.accept(visitor)
    print(visitor)  # (title==foo* AND (updated<-P1D OR title==*bar))

The parser follows draft-nottingham-atompub-fiql-00 with two extensions,
``=in=`` and ``=q=``, and without negation.
"""

from __future__ import annotations

from .ast import (
    ArgumentContext,
    Binary,
    Constant,
    Expression,
    Node,
    SelectorContext,
    fold,
    walk,
)
from .classifiers import Classification, classify, validator_for
from .duration import ISO8601Duration, parse_duration
from .exceptions import (
    DanglingComparatorError,
    DanglingOperatorError,
    DurationParseError,
    FiqlError,
    FiqlParseError,
    FiqlSyntaxError,
    UnexpectedEOFError,
    UnexpectedInputError,
    ValueConversionError,
    ValueValidationError,
)
from .parser import Parser, parse
from .policies import Policies, UnaryPolicy
from .predicate import compile_predicate, matches
from .serialization import to_dict, to_json
from .types import Comparison, ConstantRole, NodeType, Operator, ValueType
from .visitors import NodeVisitor, TextVisitor

__version__ = "0.1.0"

__all__ = [
    "ArgumentContext",
    "Binary",
    "Classification",
    "Comparison",
    "Constant",
    "ConstantRole",
    "DanglingComparatorError",
    "DanglingOperatorError",
    "DurationParseError",
    "Expression",
    "FiqlError",
    "FiqlParseError",
    "FiqlSyntaxError",
    "ISO8601Duration",
    "Node",
    "NodeType",
    "NodeVisitor",
    "Operator",
    "Parser",
    "Policies",
    "SelectorContext",
    "TextVisitor",
    "UnaryPolicy",
    "UnexpectedEOFError",
    "UnexpectedInputError",
    "ValueConversionError",
    "ValueType",
    "ValueValidationError",
    "__version__",
    "classify",
    "compile_predicate",
    "fold",
    "matches",
    "parse",
    "parse_duration",
    "to_dict",
    "to_json",
    "validator_for",
    "walk",
]
