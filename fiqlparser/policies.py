"""
Parser policies (behavioral switches).

Policies are passed to `Parser` and stay fixed for every parse it runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UnaryPolicy(Enum):
    """Whether a bare selector (no comparator) is accepted as an existence check."""

    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True, slots=True)
class Policies:
    """Policy bundle applied to every parse run by a parser."""

    unary: UnaryPolicy = UnaryPolicy.ALLOW
