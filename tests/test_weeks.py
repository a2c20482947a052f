from __future__ import annotations

import sys
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core.validation import ValidationError
from backend.core.weeks import WEEKDAY_LABELS, coerce_date, resolve_window, weekday_label, window_containing


def test_window_for_midweek_date():
    window = window_containing(date(2024, 6, 12))
    assert window.start_date == date(2024, 6, 10)
    assert window.end_date == date(2024, 6, 16)
    assert window.week_range == "2024-06-10 - 2024-06-16"


def test_sunday_belongs_to_the_preceding_monday():
    window = window_containing(date(2024, 6, 16))
    assert window.start_date == date(2024, 6, 10)
    assert window.end_date == date(2024, 6, 16)


def test_window_covers_every_weekday():
    first = date(2023, 12, 25)
    for offset in range(400):
        day = first + timedelta(days=offset)
        window = window_containing(day)
        assert window.start_date.weekday() == 0
        assert window.end_date == window.start_date + timedelta(days=6)
        assert window.start_date <= day <= window.end_date
        assert day in window
        assert window.labels == list(WEEKDAY_LABELS)
        assert [current for current, _ in window.days] == [
            window.start_date + timedelta(days=index) for index in range(7)
        ]


def test_weekday_label():
    assert weekday_label(date(2024, 6, 10)) == "mon"
    assert weekday_label(date(2024, 6, 15)) == "sat"
    assert weekday_label(date(2024, 6, 16)) == "sun"


def test_coerce_date_accepts_common_inputs():
    assert coerce_date("2024-06-12") == date(2024, 6, 12)
    assert coerce_date("2024-06-12T09:30:00Z") == date(2024, 6, 12)
    assert coerce_date(datetime(2024, 6, 12, 9, 30)) == date(2024, 6, 12)
    with pytest.raises(ValidationError):
        coerce_date("12/06/2024")


def test_resolve_window_defaults_to_current_week():
    window = resolve_window(today=date(2024, 6, 12))
    assert window.start_date == date(2024, 6, 10)


def test_resolve_window_snaps_to_start_date_week():
    window = resolve_window("2024-06-13", "2024-06-20")
    assert window.start_date == date(2024, 6, 10)
    assert window.to_period() == {
        "start_date": "2024-06-10",
        "end_date": "2024-06-16",
        "week_range": "2024-06-10 - 2024-06-16",
    }


def test_resolve_window_rejects_inverted_range():
    with pytest.raises(ValidationError):
        resolve_window("2024-06-12", "2024-06-01")
