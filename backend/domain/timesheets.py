"""Domain entities for job labor tracking."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class JobRecord:
    """A job that time entries, materials and bluesheets are booked against."""

    job_id: int
    job_title: str
    status: str = "active"


@dataclass(slots=True)
class LaborStoreState:
    """Everything the in-memory store holds for the process."""

    jobs: dict[int, JobRecord] = field(default_factory=dict)
    timesheets: list[dict[str, Any]] = field(default_factory=list)
    materials: dict[int, list[dict[str, Any]]] = field(default_factory=dict)
    bluesheets: dict[int, list[dict[str, Any]]] = field(default_factory=dict)
    configuration: dict[str, Any] = field(default_factory=dict)
