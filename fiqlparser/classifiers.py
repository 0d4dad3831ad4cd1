"""
Argument classification.

Every comparator has a validator that inspects the raw argument literal and
recommends the semantic type a consumer should treat it as. Validators are
pure functions of the literal.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from .types import Comparison, ValueType


@dataclass(frozen=True, slots=True)
class Classification:
    """Outcome of validating an argument literal."""

    accepted: bool
    recommended: ValueType
    hint: str = ""


Validator = Callable[[str], Classification]

_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)
_DURATION_RE = re.compile(
    r"[+-]?P(?=\d|T\d)"
    r"(?:\d+(?:\.\d+)?Y)?(?:\d+(?:\.\d+)?M)?(?:\d+(?:\.\d+)?W)?(?:\d+(?:\.\d+)?D)?"
    r"(?:T(?=\d)(?:\d+(?:\.\d+)?H)?(?:\d+(?:\.\d+)?M)?(?:\d+(?:\.\d+)?S)?)?",
    re.ASCII,
)
_RFC3339_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)

RELATIONAL_HINT = "number or date or duration"
IN_HINT = "in clause [a+b+c]"


def parse_datetime(text: str) -> datetime:
    """
    Parse an RFC 3339 date-time into an aware datetime.

    Fractions beyond microseconds are truncated.

    Raises:
        ValueError: If the text is not an RFC 3339 date-time
    """
    match = _RFC3339_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"not an RFC 3339 date-time: {text!r}")
    date_part, time_part, fraction, offset = match.groups()
    if offset in ("Z", "z"):
        offset = "+00:00"
    if fraction:
        time_part = f"{time_part}.{fraction[:6].ljust(6, '0')}"
    return datetime.fromisoformat(f"{date_part}T{time_part}{offset}")


def is_number(text: str) -> bool:
    return _NUMBER_RE.fullmatch(text) is not None


def is_datetime(text: str) -> bool:
    try:
        parse_datetime(text)
    except ValueError:
        return False
    return True


def is_duration(text: str) -> bool:
    return _DURATION_RE.fullmatch(text) is not None


def is_tuple(text: str) -> bool:
    return len(text) >= 2 and text[0] == "[" and text[-1] == "]"


def classify_relational(text: str) -> Classification:
    """Numbers, date-times and durations only."""
    if is_number(text):
        return Classification(True, ValueType.NUMBER)
    # time or duration e.g. 2003-12-13T18:30:02Z or -P1D
    if is_datetime(text):
        return Classification(True, ValueType.DATETIME)
    if is_duration(text):
        return Classification(True, ValueType.DURATION)
    return Classification(False, ValueType.STRING, RELATIONAL_HINT)


def classify_in(text: str) -> Classification:
    """A bracketed tuple such as ``[a+b+c]``."""
    if is_tuple(text):
        return Classification(True, ValueType.TUPLE)
    return Classification(False, ValueType.TUPLE, IN_HINT)


def classify_any(text: str) -> Classification:
    """Never rejects; falls back to string."""
    if is_datetime(text):
        return Classification(True, ValueType.DATETIME)
    if is_duration(text):
        return Classification(True, ValueType.DURATION)
    if is_number(text):
        return Classification(True, ValueType.NUMBER)
    return Classification(True, ValueType.STRING)


_VALIDATORS: dict[Comparison, Validator] = {
    Comparison.GT: classify_relational,
    Comparison.LT: classify_relational,
    Comparison.GTE: classify_relational,
    Comparison.LTE: classify_relational,
    Comparison.IN: classify_in,
}


def validator_for(comparison: Comparison) -> Validator:
    """Return the validator applied to arguments of `comparison`."""
    return _VALIDATORS.get(comparison, classify_any)


def classify(comparison: Comparison, text: str) -> Classification:
    return validator_for(comparison)(text)
