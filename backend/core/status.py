"""Single source of truth for reducing entry statuses to one display status."""

from __future__ import annotations

from typing import Iterable

# Evaluated top to bottom; the first tag present decides the status.
STATUS_PRECEDENCE: tuple[tuple[str, str], ...] = (
    ("approved", "Approved"),
    ("submitted", "Submitted"),
    ("active", "Active"),
    ("pending", "Pending"),
)

# Applied after the table: a rejection anywhere in the week wins, even over an
# earlier approval.
OVERRIDE_STATUS: tuple[str, str] = ("rejected", "Rejected")


def resolve_status(statuses: Iterable[str], total_hours: float = 0) -> str:
    seen = {str(status).strip().lower() for status in statuses if status}

    resolved: str | None = None
    for tag, label in STATUS_PRECEDENCE:
        if tag in seen:
            resolved = label
            break

    if OVERRIDE_STATUS[0] in seen:
        return OVERRIDE_STATUS[1]
    if resolved is not None:
        return resolved
    return "Active" if total_hours else "Draft"
