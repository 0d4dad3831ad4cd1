from __future__ import annotations

from typing import Any

from ..exceptions import FiqlParseError


class CLIError(Exception):
    def __init__(
        self,
        message: str,
        *,
        exit_code: int = 1,
        error_type: str = "error",
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.error_type = error_type
        self.hint = hint
        self.details = details

    def __str__(self) -> str:  # pragma: no cover
        return self.message


def parse_error_to_cli(error: FiqlParseError, *, text: str) -> CLIError:
    """Wrap a parser failure, keeping the position for caret rendering."""
    return CLIError(
        error.message,
        exit_code=2,
        error_type="parse_error",
        details={"input": text, "line": error.line, "column": error.column},
    )
