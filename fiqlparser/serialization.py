"""
JSON projection of a parsed filter.

Each node becomes an object with a `Type` discriminator (`Expr`, `Binary`,
`Const`). Expressions and binaries carry `Operator` and `Nodes`; constants
carry `Value`, with argument wildcards included (``foo*``)::

    {"Type":"Expr","Operator":"","Nodes":[
        {"Type":"Binary","Operator":"==","Nodes":[
            {"Type":"Const","Value":"column"},
            {"Type":"Const","Value":"value"}]}]}

A logic chain of N links nests N objects deep. `to_dict` and `to_json` build
and write the projection with explicit stacks, so any tree `parse` returns
can be serialized. The pydantic models describe the same shape for callers
that want typed objects; dumping or validating them recurses per level.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .ast import Binary, Constant, Expression, Node, fold


class _NodeModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
    )


class ConstModel(_NodeModel):
    type: Literal["Const"] = Field("Const", alias="Type")
    value: str = Field(alias="Value")


class BinaryModel(_NodeModel):
    type: Literal["Binary"] = Field("Binary", alias="Type")
    operator: str = Field(alias="Operator")
    nodes: list[NodeModel] = Field(alias="Nodes")


class ExprModel(_NodeModel):
    type: Literal["Expr"] = Field("Expr", alias="Type")
    operator: str = Field("", alias="Operator")
    nodes: list[NodeModel] = Field(default_factory=list, alias="Nodes")


NodeModel = Annotated[Union[ExprModel, BinaryModel, ConstModel], Field(discriminator="type")]

BinaryModel.model_rebuild()
ExprModel.model_rebuild()


# =============================================================================
# Projection
# =============================================================================


def _model_for(node: Node, nodes: list[Any]) -> ExprModel | BinaryModel | ConstModel:
    match node:
        case Expression():
            return ExprModel(nodes=nodes)
        case Binary():
            return BinaryModel(operator=node.operator.value, nodes=nodes)
        case Constant():
            return ConstModel(value=node.render())
    raise TypeError(f"Not an AST node: {node!r}")


def _dict_for(node: Node, nodes: list[Any]) -> dict[str, Any]:
    match node:
        case Expression():
            return {"Type": "Expr", "Operator": "", "Nodes": nodes}
        case Binary():
            return {"Type": "Binary", "Operator": node.operator.value, "Nodes": nodes}
        case Constant():
            return {"Type": "Const", "Value": node.render()}
    raise TypeError(f"Not an AST node: {node!r}")


def to_model(node: Node) -> ExprModel | BinaryModel | ConstModel:
    """Project `node` and its descendants onto the serialization models."""
    if not isinstance(node, (Expression, Binary, Constant)):
        raise TypeError(f"Not an AST node: {node!r}")
    return fold(node, _model_for)


def to_dict(node: Node) -> dict[str, Any]:
    if not isinstance(node, (Expression, Binary, Constant)):
        raise TypeError(f"Not an AST node: {node!r}")
    return fold(node, _dict_for)


# =============================================================================
# Encoding
# =============================================================================


def _encode(payload: Any, indent: int | None) -> str:
    """Write nested dicts, lists and scalars as JSON without recursing."""
    key_separator = ":" if indent is None else ": "

    def newline(depth: int) -> str:
        return "" if indent is None else "\n" + " " * (indent * depth)

    parts: list[str] = []
    # Items are either literal text or (value, depth) pairs still to encode
    pending: list[str | tuple[Any, int]] = [(payload, 0)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        value, depth = item
        if isinstance(value, dict):
            entries = [
                (json.dumps(key, ensure_ascii=False) + key_separator, child)
                for key, child in value.items()
            ]
            opening, closing = "{", "}"
        elif isinstance(value, list):
            entries = [("", child) for child in value]
            opening, closing = "[", "]"
        else:
            parts.append(json.dumps(value, ensure_ascii=False))
            continue
        if not entries:
            parts.append(opening + closing)
            continue
        parts.append(opening)
        pending.append(newline(depth) + closing)
        for index in reversed(range(len(entries))):
            prefix, child = entries[index]
            pending.append((child, depth + 1))
            pending.append(("," if index else "") + newline(depth + 1) + prefix)
    return "".join(parts)


def to_json(node: Node, *, indent: int | None = None) -> str:
    """Serialize `node` as JSON; compact unless `indent` is given."""
    return _encode(to_dict(node), indent)
