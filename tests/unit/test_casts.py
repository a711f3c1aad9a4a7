from __future__ import annotations

from datetime import datetime

import pytest

from liteorm.domain.casts import DEFAULT_DATETIME_FORMAT, CastDirective, CastKind, parse_datetime


def cast(spec: str, value):
    return CastDirective.parse(spec).apply(value)


def test_parse_directives():
    assert CastDirective.parse("int") == CastDirective(CastKind.INT)
    assert CastDirective.parse(" JSON ") == CastDirective(CastKind.JSON)
    assert CastDirective.parse("datetime") == CastDirective(CastKind.DATETIME, DEFAULT_DATETIME_FORMAT)
    assert CastDirective.parse("datetime:%d.%m.%Y %H:%M").format == "%d.%m.%Y %H:%M"


def test_parse_rejects_unknown_directive():
    with pytest.raises(ValueError):
        CastDirective.parse("money")


def test_directive_string_form():
    assert str(CastDirective.parse("bool")) == "bool"
    assert str(CastDirective.parse("datetime:%Y")) == "datetime:%Y"


@pytest.mark.parametrize(
    "spec, raw, expected",
    [
        ("int", "12", 12),
        ("int", "12.7", 12),
        ("int", "abc", "abc"),
        ("float", "2.5", 2.5),
        ("float", "n/a", "n/a"),
        ("bool", 1, True),
        ("bool", 0, False),
        ("bool", "0", False),
        ("bool", "false", False),
        ("bool", "yes", True),
        ("string", 42, "42"),
        ("string", b"bytes", "bytes"),
        ("json", '{"a": [1, 2]}', {"a": [1, 2]}),
        ("array", "[1, 2, 3]", [1, 2, 3]),
        ("json", "{broken", "{broken"),
        ("json", [1], [1]),
        ("null", "anything", None),
    ],
)
def test_casts(spec: str, raw, expected):
    assert cast(spec, raw) == expected


@pytest.mark.parametrize("spec", ["int", "float", "bool", "string", "json", "datetime"])
def test_null_values_are_not_coerced(spec: str):
    assert cast(spec, None) is None


def test_datetime_reformats_stored_timestamp():
    assert cast("datetime:%d.%m.%Y %H:%M", "2024-01-15 10:30:00") == "15.01.2024 10:30"
    assert cast("datetime", "2024-01-15T10:30:00") == "2024-01-15 10:30:00"
    assert cast("datetime:%Y", datetime(2020, 5, 1)) == "2020"


def test_datetime_passes_malformed_values_through():
    assert cast("datetime", "not-a-date") == "not-a-date"
    assert cast("datetime:%d.%m.%Y", "2024-13-45") == "2024-13-45"


def test_datetime_leaves_plain_numbers_alone():
    assert cast("datetime", "1") == "1"
    assert cast("datetime", "12345") == "12345"
    assert cast("datetime", 1700000000) == 1700000000
    assert cast("datetime", b"42") == b"42"


def test_parse_datetime():
    assert parse_datetime("2024-01-15") == datetime(2024, 1, 15)
    assert parse_datetime("garbage") is None
    assert parse_datetime(["2024-01-15"]) is None
    assert parse_datetime("12345") is None
    assert parse_datetime(" -1.5e3 ") is None
    assert parse_datetime(12345) is None
