"""Monday-to-Sunday week windows used by the weekly timesheet grid."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from backend.core.validation import ValidationError

WEEKDAY_LABELS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            raise ValidationError(f"invalid date: {value!r}") from None
    raise ValidationError(f"invalid date: {value!r}")


def _sunday_based_dow(day: date) -> int:
    # Sunday=0 ... Saturday=6
    return (day.weekday() + 1) % 7


def weekday_label(day: date) -> str:
    dow = _sunday_based_dow(day)
    return WEEKDAY_LABELS[6 if dow == 0 else dow - 1]


@dataclass(frozen=True, slots=True)
class WeekWindow:
    start_date: date
    end_date: date
    days: tuple[tuple[date, str], ...]

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start_date <= day <= self.end_date

    @property
    def week_range(self) -> str:
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    @property
    def labels(self) -> list[str]:
        return [label for _, label in self.days]

    def to_period(self) -> dict[str, str]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "week_range": self.week_range,
        }


def window_containing(value: Any) -> WeekWindow:
    day = coerce_date(value)
    dow = _sunday_based_dow(day)
    days_to_monday = -6 if dow == 0 else 1 - dow
    monday = day + timedelta(days=days_to_monday)
    sunday = monday + timedelta(days=6)
    days = tuple(
        (current, weekday_label(current))
        for current in (monday + timedelta(days=offset) for offset in range(7))
    )
    return WeekWindow(start_date=monday, end_date=sunday, days=days)


def resolve_window(start_date: Any = None, end_date: Any = None, *, today: date | None = None) -> WeekWindow:
    """Pick the week for a summary request.

    Without a start date the current week is used.  An explicit range always
    snaps to the week containing its start date.
    """

    if not start_date:
        return window_containing(today or date.today())
    start = coerce_date(start_date)
    if end_date:
        end = coerce_date(end_date)
        if end < start:
            raise ValidationError("end_date cannot be earlier than start_date")
    return window_containing(start)
