from __future__ import annotations

from datetime import datetime, timezone

import pytest

from fiqlparser import Classification, Comparison, ValueType, classify, validator_for
from fiqlparser.classifiers import (
    classify_any,
    classify_in,
    classify_relational,
    is_datetime,
    is_duration,
    is_number,
    parse_datetime,
)


@pytest.mark.parametrize("text", ["1", "+1", "-1", "1.5", "-.5", "10.", "0042"])
def test_is_number(text: str) -> None:
    assert is_number(text)


@pytest.mark.parametrize("text", ["", "+", ".", "1e5", "1.2.3", "0x10", "١٢"])
def test_is_not_number(text: str) -> None:
    assert not is_number(text)


@pytest.mark.parametrize(
    "text",
    [
        "2003-12-13T18:30:02Z",
        "2003-12-13t18:30:02z",
        "2003-12-13T18:30:02.25Z",
        "2003-12-13T18:30:02.123456789+01:00",
        "2003-12-13T18:30:02-05:30",
    ],
)
def test_is_datetime(text: str) -> None:
    assert is_datetime(text)


@pytest.mark.parametrize(
    "text",
    ["2003-12-13", "2003-12-13T18:30:02", "2003-13-13T18:30:02Z", "2003-12-13 18:30:02Z"],
)
def test_is_not_datetime(text: str) -> None:
    assert not is_datetime(text)


def test_parse_datetime_truncates_extra_fraction_digits() -> None:
    value = parse_datetime("2003-12-13T18:30:02.123456789Z")
    assert value == datetime(2003, 12, 13, 18, 30, 2, 123456, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "text", ["P1D", "-P1D", "+P5W", "P1.4Y2M", "P3DT4H59M", "PT1M", "PT0.5S", "P1Y2M3W4DT5H6M7S"]
)
def test_is_duration(text: str) -> None:
    assert is_duration(text)


@pytest.mark.parametrize("text", ["P", "PT", "P1", "1D", "P1H", "PT1D", "P1DT", "p1d"])
def test_is_not_duration(text: str) -> None:
    assert not is_duration(text)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("42", ValueType.NUMBER),
        ("2003-12-13T18:30:02Z", ValueType.DATETIME),
        ("-P1D", ValueType.DURATION),
    ],
)
def test_relational_accepts(text: str, expected: ValueType) -> None:
    assert classify_relational(text) == Classification(True, expected)


def test_relational_rejects_strings() -> None:
    result = classify_relational("soon")
    assert not result.accepted
    assert result.hint == "number or date or duration"


def test_in_requires_brackets() -> None:
    assert classify_in("[a+b]") == Classification(True, ValueType.TUPLE)
    assert classify_in("[]").accepted
    result = classify_in("a+b")
    assert not result.accepted
    assert result.hint == "in clause [a+b+c]"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2003-12-13T18:30:02Z", ValueType.DATETIME),
        ("P1D", ValueType.DURATION),
        ("7", ValueType.NUMBER),
        ("hello", ValueType.STRING),
        ("[a+b]", ValueType.STRING),
    ],
)
def test_any_never_rejects(text: str, expected: ValueType) -> None:
    result = classify_any(text)
    assert result.accepted
    assert result.recommended is expected


@pytest.mark.parametrize(
    ("comparison", "validator"),
    [
        (Comparison.GT, classify_relational),
        (Comparison.GTE, classify_relational),
        (Comparison.LT, classify_relational),
        (Comparison.LTE, classify_relational),
        (Comparison.IN, classify_in),
        (Comparison.EQ, classify_any),
        (Comparison.NEQ, classify_any),
        (Comparison.QUERY, classify_any),
    ],
)
def test_validator_for(comparison: Comparison, validator: object) -> None:
    assert validator_for(comparison) is validator


def test_classify_dispatches_on_comparison() -> None:
    assert classify(Comparison.EQ, "x").recommended is ValueType.STRING
    assert not classify(Comparison.GT, "x").accepted


@pytest.mark.parametrize("comparison", list(Comparison))
@pytest.mark.parametrize(
    "text", ["42", "-1.5", "2003-12-13T18:30:02Z", "-P1D", "PT4H", "[a+b]", "[]", "hello", ""]
)
def test_classification_is_idempotent(comparison: Comparison, text: str) -> None:
    first = classify(comparison, text)
    second = classify(comparison, text)
    assert first == second
    assert first.recommended is second.recommended
