"""Domain layer definitions."""

from .timesheets import JobRecord, LaborStoreState

__all__ = [
    "JobRecord",
    "LaborStoreState",
]
