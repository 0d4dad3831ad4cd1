from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from ..ast import Binary, Constant, Expression, Node
from .errors import CLIError


def _error_title(error_type: str) -> str:
    mapping = {
        "usage_error": "Usage error",
        "parse_error": "Parse error",
        "io_error": "I/O error",
        "invalid_json": "Invalid JSON",
    }
    return mapping.get((error_type or "").strip(), "Error")


def _caret_lines(details: dict[str, Any]) -> list[str]:
    """The offending input line with a caret under the failing column."""
    text = details.get("input")
    line = details.get("line")
    column = details.get("column")
    if not isinstance(text, str) or not isinstance(line, int) or not isinstance(column, int):
        return []
    lines = text.split("\n")
    if not 1 <= line <= len(lines):
        return []
    return [lines[line - 1], " " * max(column - 1, 0) + "^"]


def render_error(error: CLIError, *, quiet: bool = False) -> None:
    stderr = Console(file=sys.stderr, force_terminal=False, highlight=False, soft_wrap=True)
    title = _error_title(error.error_type)
    details = error.details or {}
    location = ""
    if "line" in details and "column" in details:
        location = f" at line {details['line']}, column {details['column']}"
    stderr.print(Text(f"{title}{location}: {error.message}"))
    if quiet:
        return
    for line in _caret_lines(details):
        stderr.print(Text(f"  {line}"))
    if error.hint:
        stderr.print(Text(f"Hint: {error.hint}"))


def _label(node: Node) -> Text:
    match node:
        case Expression(is_root=True):
            return Text("Expr", style="bold")
        case Expression():
            return Text("Group", style="bold")
        case Binary():
            return Text.assemble(("Binary ", "bold"), (node.operator.value, "cyan"))
        case Constant(unary=True):
            return Text.assemble(("Selector ", "bold"), (node.value, "green"), " (exists)")
        case Constant() if node.is_selector:
            return Text.assemble(("Selector ", "bold"), (node.value, "green"))
        case Constant():
            return Text.assemble(
                ("Argument ", "bold"), (node.render(), "yellow"), f" ({node.recommended.value})"
            )
    raise TypeError(f"Not an AST node: {node!r}")


def build_tree(node: Node) -> Tree:
    """Build a rich tree mirroring the AST."""
    root = Tree(_label(node))
    pending: list[tuple[Tree, Node]] = [(root, child) for child in reversed(node.children)]
    while pending:
        parent, current = pending.pop()
        branch = parent.add(_label(current))
        pending.extend((branch, child) for child in reversed(current.children))
    return root


def render_tree(node: Node) -> None:
    Console(force_terminal=False).print(build_tree(node))


def emit_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
