"""
ISO 8601-2 duration values.

The extended format allows a leading sign, e.g. ``-P1D`` or ``+PT2H30M``.
Conversions to a fixed length are approximations: a month is 1/12 of an
average Gregorian year (30.4375 days).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Final

from .exceptions import DurationParseError

MILLISECONDS_PER_SECOND: Final = 1000
MILLISECONDS_PER_MINUTE: Final = 60 * MILLISECONDS_PER_SECOND
MILLISECONDS_PER_HOUR: Final = 60 * MILLISECONDS_PER_MINUTE
MILLISECONDS_PER_DAY: Final = 24 * MILLISECONDS_PER_HOUR
MILLISECONDS_PER_WEEK: Final = 7 * MILLISECONDS_PER_DAY
MILLISECONDS_PER_MONTH: Final = 2_629_800_000
MILLISECONDS_PER_YEAR: Final = 12 * MILLISECONDS_PER_MONTH

_PERIOD = "P"
_TIME = "T"

# marker -> component, per section
_DATE_MARKERS = {"Y": "years", "M": "months", "W": "weeks", "D": "days"}
_TIME_MARKERS = {"H": "hours", "M": "minutes", "S": "seconds"}


@dataclass(frozen=True, slots=True)
class ISO8601Duration:
    """A parsed duration; components are unsigned, `negative` carries the sign."""

    negative: bool = False
    years: float = 0
    months: float = 0
    weeks: float = 0
    days: float = 0
    hours: float = 0
    minutes: float = 0
    seconds: float = 0
    text: str = ""

    def __str__(self) -> str:
        return self.text

    def as_milliseconds(self) -> int:
        """Approximate length in milliseconds, rounded to the nearest millisecond."""
        total = (
            self.seconds * MILLISECONDS_PER_SECOND
            + self.minutes * MILLISECONDS_PER_MINUTE
            + self.hours * MILLISECONDS_PER_HOUR
            + self.days * MILLISECONDS_PER_DAY
            + self.weeks * MILLISECONDS_PER_WEEK
            + self.months * MILLISECONDS_PER_MONTH
            + self.years * MILLISECONDS_PER_YEAR
        )
        rounded = int(math.floor(total + 0.5))
        return -rounded if self.negative else rounded

    def as_seconds(self) -> int:
        """Approximate length in whole seconds, truncated toward zero."""
        ms = self.as_milliseconds()
        seconds = abs(ms) // MILLISECONDS_PER_SECOND
        return -seconds if ms < 0 else seconds

    def as_timedelta(self) -> timedelta:
        return timedelta(milliseconds=self.as_milliseconds())


def _read_number(text: str, pos: int) -> tuple[int, float]:
    start = pos
    while pos < len(text) and (text[pos].isdigit() or text[pos] == "."):
        pos += 1
    digits = text[start:pos]
    try:
        return pos, float(digits)
    except ValueError:
        got = text[start] if start < len(text) else "end of input"
        raise DurationParseError(f"expected a number but got `{got}`") from None


def parse_duration(text: str) -> ISO8601Duration:
    """
    Parse an ISO 8601-2 duration such as ``P3DT4H59M`` or ``-P1.5Y``.

    An empty string yields a zero duration; a bare ``P`` is rejected.

    Raises:
        DurationParseError: If the text is not a valid duration
    """
    if not text:
        return ISO8601Duration()

    pos = 0
    negative = False
    if text[0] == "-":
        negative = True
        pos += 1
    elif text[0] == "+":
        pos += 1

    if pos >= len(text) or text[pos] != _PERIOD:
        got = text[pos] if pos < len(text) else "end of input"
        raise DurationParseError(f"expected P but got `{got}`")
    pos += 1
    if pos >= len(text):
        raise DurationParseError("expected a number but got `end of input`")

    components: dict[str, float] = {}
    markers = _DATE_MARKERS
    while pos < len(text):
        if text[pos] == _TIME and markers is _DATE_MARKERS:
            markers = _TIME_MARKERS
            pos += 1
        pos, number = _read_number(text, pos)
        if pos >= len(text):
            raise DurationParseError(f"missing unit after `{text}`")
        mark = text[pos]
        pos += 1
        component = markers.get(mark)
        if component is None:
            raise DurationParseError(f"unexpected token `{mark}`")
        components[component] = number

    return ISO8601Duration(negative=negative, text=text, **components)
