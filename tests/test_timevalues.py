from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core.timevalues import (
    Hours,
    coerce_hours,
    decimal_hours_to_clock,
    decimal_hours_to_display,
    duration_between,
    normalize_billable,
    parse_clock_duration,
    parse_display_hours,
)
from backend.core.validation import ValidationError


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("04:30:00", 4.5),
        ("04:30", 4.5),
        ("00:00:36", 0.01),
        ("10:15:00", 10.25),
    ],
)
def test_parse_clock_duration(text, expected):
    assert parse_clock_duration(text) == pytest.approx(expected)


@pytest.mark.parametrize("value", ["04:60:00", "04:30:75", "4h", "", None, 12, ["04:00:00"]])
def test_parse_clock_duration_is_lenient(value, caplog):
    with caplog.at_level(logging.WARNING):
        assert parse_clock_duration(value) == 0
    assert any("Invalid clock duration" in record.message for record in caplog.records)


def test_decimal_hours_to_clock_rounds_to_the_second():
    assert decimal_hours_to_clock(4.5) == "04:30:00"
    assert decimal_hours_to_clock(0) == "00:00:00"
    assert decimal_hours_to_clock(1 / 3600) == "00:00:01"
    assert decimal_hours_to_clock(26.25) == "26:15:00"


@pytest.mark.parametrize(
    ("hours", "expected"),
    [
        (0, "0h"),
        (None, "0h"),
        (4, "4h"),
        (0.5, "30m"),
        (4.5, "4h 30m"),
        (6.5, "6h 30m"),
        (2.9999, "3h"),
    ],
)
def test_decimal_hours_to_display(hours, expected):
    assert decimal_hours_to_display(hours) == expected


def test_duration_between():
    assert duration_between("08:00", "12:30") == "04:30:00"
    assert duration_between("08:00:00", "16:45:30") == "08:45:30"


@pytest.mark.parametrize(
    ("start", "end"),
    [("12:00", "08:00"), (None, "08:00"), ("08:00", ""), ("bad", "08:00"), ("08:00", "08:00")],
)
def test_duration_between_never_negative(start, end):
    assert duration_between(start, end) == "00:00:00"


def test_clock_round_trip_at_minute_granularity():
    for minute in range(24 * 60):
        hours = minute / 60
        assert parse_clock_duration(decimal_hours_to_clock(hours)) == pytest.approx(hours, abs=1 / 3600)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("8h", 8.0),
        ("8.5h", 8.5),
        ("8h30m", 8.5),
        ("8h 30m", 8.5),
        ("45m", 0.75),
        ("8:30", 8.5),
        ("6", 6.0),
        ("0h", 0.0),
    ],
)
def test_parse_display_hours(text, expected):
    assert parse_display_hours(text) == pytest.approx(expected)


def test_parse_display_hours_is_lenient(caplog):
    with caplog.at_level(logging.WARNING):
        assert parse_display_hours("eight hours") == 0
    assert caplog.records


def test_coerce_hours_dispatches_by_shape():
    assert coerce_hours(3) == 3.0
    assert coerce_hours("03:15:00") == pytest.approx(3.25)
    assert coerce_hours("3h15m") == pytest.approx(3.25)
    assert coerce_hours(None) == 0
    assert coerce_hours(-2) == 0
    assert coerce_hours(True) == 0


def test_normalize_billable_accepts_supported_shapes():
    assert normalize_billable(None) is None
    assert normalize_billable(7) == 7.0
    assert normalize_billable("7.25") == 7.25
    assert normalize_billable("7:30") == 7.5
    assert normalize_billable("6h") == 6.0


@pytest.mark.parametrize("value", ["abc", "7:75", "", -1, True, {"hours": 2}])
def test_normalize_billable_rejects_garbage(value):
    with pytest.raises(ValidationError):
        normalize_billable(value)


def test_hours_value_type():
    worked = Hours.from_clock("02:30:00") + Hours.coerce("1h 15m")
    assert worked == Hours(3.75)
    assert worked.to_display() == "3h 45m"
    assert Hours.coerce(2).to_display() == "2h"
    assert Hours().to_display() == "0h"
