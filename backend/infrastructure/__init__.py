"""Infrastructure layer exports."""

from .timesheets import InMemoryTimesheetRepository, TimesheetRepository

__all__ = [
    "InMemoryTimesheetRepository",
    "TimesheetRepository",
]
