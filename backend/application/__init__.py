"""Application services."""

from .timesheets import (
    JobNotFoundError,
    TimesheetNotFoundError,
    TimesheetService,
    get_timesheet_service,
    reset_timesheet_state,
)

__all__ = [
    "JobNotFoundError",
    "TimesheetNotFoundError",
    "TimesheetService",
    "get_timesheet_service",
    "reset_timesheet_state",
]
