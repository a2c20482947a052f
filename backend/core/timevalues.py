"""Conversions between the time representations used by timesheet records.

Three shapes travel through the system:

* clock durations such as ``"04:30:00"`` (or ``"04:30"``) stored on entries,
* decimal hours (``4.5``) used for arithmetic and pricing,
* display strings such as ``"4h 30m"`` returned to dashboards and stored on
  bluesheets (older rows use the compact ``"4h30m"`` form).

Parsing is lenient: historical rows contain malformed values and a single bad
cell must not abort a weekly aggregation, so bad input converts to ``0`` with a
warning.  The approval override is the exception, see
:func:`normalize_billable`.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from backend.core.validation import ValidationError

logger = logging.getLogger(__name__)

ZERO_CLOCK = "00:00:00"

_CLOCK_RE = re.compile(r"^(\d+):(\d{1,2})(?::(\d{1,2}))?$")
_DISPLAY_RE = re.compile(r"^(?:(\d+(?:\.\d+)?)\s*h)?\s*(?:(\d+(?:\.\d+)?)\s*m)?$", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clock_seconds(value: Any) -> int | None:
    if not isinstance(value, str):
        return None
    match = _CLOCK_RE.match(value.strip())
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)
    if minutes >= 60 or seconds >= 60:
        return None
    return hours * 3600 + minutes * 60 + seconds


def parse_clock_duration(value: Any) -> float:
    """Convert ``HH:MM:SS`` or ``HH:MM`` into decimal hours."""

    seconds = _clock_seconds(value)
    if seconds is None:
        logger.warning("Invalid clock duration %r, treating as 0 hours", value)
        return 0.0
    return seconds / 3600


def decimal_hours_to_clock(hours: float) -> str:
    total = max(_round_half_up(float(hours or 0) * 3600), 0)
    h, remainder = divmod(total, 3600)
    m, s = divmod(remainder, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def decimal_hours_to_display(hours: float) -> str:
    value = float(hours or 0)
    if value <= 0 or not math.isfinite(value):
        return "0h"
    whole = math.floor(value)
    minutes = _round_half_up((value - whole) * 60)
    if minutes == 60:
        whole += 1
        minutes = 0
    if minutes == 0:
        return f"{whole}h"
    if whole == 0:
        return f"{minutes}m"
    return f"{whole}h {minutes}m"


def duration_between(start: Any, end: Any) -> str:
    """Return ``end - start`` as a clock duration, never negative."""

    if not start or not end:
        return ZERO_CLOCK
    start_seconds = _clock_seconds(start)
    end_seconds = _clock_seconds(end)
    if start_seconds is None or end_seconds is None:
        logger.warning("Invalid start/end times %r - %r, treating as 0 hours", start, end)
        return ZERO_CLOCK
    if end_seconds <= start_seconds:
        return ZERO_CLOCK
    return decimal_hours_to_clock((end_seconds - start_seconds) / 3600)


def parse_display_hours(value: Any) -> float:
    """Convert ``"8h"``, ``"8.5h"``, ``"8h30m"``, ``"8h 30m"``, ``"45m"`` or ``"8:30"``."""

    if not isinstance(value, str) or not value.strip():
        if value not in (None, ""):
            logger.warning("Invalid hours value %r, treating as 0 hours", value)
        return 0.0
    text = value.strip()
    if ":" in text:
        return parse_clock_duration(text)
    if _NUMBER_RE.match(text):
        return float(text)
    match = _DISPLAY_RE.match(text)
    if not match or (match.group(1) is None and match.group(2) is None):
        logger.warning("Invalid hours value %r, treating as 0 hours", value)
        return 0.0
    hours = float(match.group(1) or 0)
    minutes = float(match.group(2) or 0)
    return hours + minutes / 60


def coerce_hours(value: Any) -> float:
    """Best-effort conversion of any stored hours value into decimal hours."""

    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        logger.warning("Invalid hours value %r, treating as 0 hours", value)
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        if not math.isfinite(number) or number < 0:
            logger.warning("Invalid hours value %r, treating as 0 hours", value)
            return 0.0
        return number
    if isinstance(value, str) and ":" in value:
        return parse_clock_duration(value)
    return parse_display_hours(value)


def normalize_billable(value: Any) -> float | None:
    """Normalise an approval-time billable override into decimal hours.

    Accepts a number, an ``"H:MM"`` string or an ``"Xh"`` string.  Unlike the
    lenient parsers above, an unusable override is a caller mistake and raises.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"invalid billable value: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        if not math.isfinite(number) or number < 0:
            raise ValidationError(f"invalid billable value: {value!r}")
        return number
    if not isinstance(value, str):
        raise ValidationError(f"invalid billable value: {value!r}")

    text = value.strip()
    if _NUMBER_RE.match(text):
        return float(text)
    clock = _CLOCK_RE.match(text)
    if clock and clock.group(3) is None:
        minutes = int(clock.group(2))
        if minutes >= 60:
            raise ValidationError(f"invalid billable value: {value!r}")
        return int(clock.group(1)) + minutes / 60
    display = _DISPLAY_RE.match(text)
    if text and display and (display.group(1) is not None or display.group(2) is not None):
        return float(display.group(1) or 0) + float(display.group(2) or 0) / 60
    raise ValidationError(f"invalid billable value: {value!r}")


@dataclass(frozen=True, slots=True)
class Hours:
    """Decimal hours carried through aggregation and rendered for display."""

    value: float = 0.0

    @classmethod
    def from_clock(cls, text: Any) -> "Hours":
        return cls(parse_clock_duration(text))

    @classmethod
    def coerce(cls, value: Any) -> "Hours":
        return cls(coerce_hours(value))

    def to_display(self) -> str:
        return decimal_hours_to_display(self.value)

    def __add__(self, other: object) -> "Hours":
        if isinstance(other, Hours):
            return Hours(self.value + other.value)
        return NotImplemented
