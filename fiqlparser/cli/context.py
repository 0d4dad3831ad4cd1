from __future__ import annotations

from dataclasses import dataclass, field

from ..ast import Expression
from ..exceptions import FiqlParseError
from ..parser import Parser
from ..policies import Policies, UnaryPolicy
from .errors import parse_error_to_cli


@dataclass
class CLIContext:
    quiet: bool = False
    verbosity: int = 0
    unary: bool = True
    _parser: Parser | None = field(default=None, repr=False)

    @property
    def policies(self) -> Policies:
        return Policies(unary=UnaryPolicy.ALLOW if self.unary else UnaryPolicy.DENY)

    def get_parser(self) -> Parser:
        if self._parser is None:
            self._parser = Parser(self.policies)
        return self._parser

    def parse(self, text: str) -> Expression:
        """Parse `text`, converting parser failures into CLI errors."""
        try:
            return self.get_parser().parse(text)
        except FiqlParseError as e:
            raise parse_error_to_cli(e, text=text) from e
