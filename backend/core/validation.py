from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping


class ValidationError(Exception):
    """Raised when domain validation fails."""


def _number(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except Exception:
        raise ValidationError(f"expected a number, got {value!r}") from None


def validate_rate_tier(data: Mapping[str, Any]) -> None:
    errors: list[str] = []
    min_hours = _number(data.get("min_hours"))
    max_hours = _number(data.get("max_hours"))
    rate = _number(data.get("rate"))

    if min_hours is not None and max_hours is not None and min_hours > max_hours:
        errors.append("Minimum hours cannot be greater than maximum hours")
    if min_hours is not None and min_hours < 0:
        errors.append("Minimum hours cannot be negative")
    if max_hours is not None and max_hours < 0:
        errors.append("Maximum hours cannot be negative")
    if rate is not None and rate < 0:
        errors.append("Rate cannot be negative")

    if errors:
        raise ValidationError(", ".join(errors))


def validate_markup_percentage(value: Any) -> None:
    percentage = _number(value)
    if percentage is None:
        return
    if percentage < 0 or percentage > 100:
        raise ValidationError("Markup percentage must be between 0 and 100")


def validate_page(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if limit < 1:
        raise ValidationError("limit must be 1 or greater")
