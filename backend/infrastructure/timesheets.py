"""Infrastructure layer for job labor persistence."""
from __future__ import annotations

import copy
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Protocol

from backend.domain import JobRecord, LaborStoreState


class TimesheetRepository(Protocol):
    """Persistence contract for jobs, time entries and their detail groups."""

    def add_job(self, job_id: int, job_title: str, *, status: str = "active") -> dict[str, Any]: ...

    def get_job(self, job_id: int) -> dict[str, Any] | None: ...

    def list_jobs(self) -> list[dict[str, Any]]: ...

    def add_timesheet(self, record: dict[str, Any]) -> dict[str, Any]: ...

    def list_timesheets(
        self,
        job_id: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[dict[str, Any]]: ...

    def update_timesheets(self, entry_ids: list[int], updates: dict[str, Any]) -> list[dict[str, Any]]: ...

    def add_material(self, job_id: int, record: dict[str, Any]) -> None: ...

    def list_materials(self, job_id: int) -> list[dict[str, Any]]: ...

    def add_bluesheet(self, job_id: int, record: dict[str, Any]) -> None: ...

    def list_bluesheets(self, job_id: int) -> list[dict[str, Any]]: ...

    def get_configuration(self) -> dict[str, Any]: ...

    def save_configuration(self, configuration: dict[str, Any]) -> None: ...

    def reset(self) -> None: ...


class InMemoryTimesheetRepository:
    """Simple in-memory repository for fast iteration and tests."""

    def __init__(self) -> None:
        self._state = LaborStoreState()
        self._entry_counter = 0

    # ------------------------------------------------------------------
    # jobs
    # ------------------------------------------------------------------
    def add_job(self, job_id: int, job_title: str, *, status: str = "active") -> dict[str, Any]:
        job = JobRecord(job_id=job_id, job_title=job_title, status=status)
        self._state.jobs[job_id] = job
        return asdict(job)

    def get_job(self, job_id: int) -> dict[str, Any] | None:
        job = self._state.jobs.get(job_id)
        return asdict(job) if job else None

    def list_jobs(self) -> list[dict[str, Any]]:
        return [asdict(job) for job in sorted(self._state.jobs.values(), key=lambda item: item.job_id)]

    # ------------------------------------------------------------------
    # time entries
    # ------------------------------------------------------------------
    def add_timesheet(self, record: dict[str, Any]) -> dict[str, Any]:
        self._entry_counter += 1
        stored = dict(record)
        stored["id"] = self._entry_counter
        stored.setdefault("status", "pending")
        stored["updated_at"] = datetime.now(timezone.utc).isoformat()
        self._state.timesheets.append(stored)
        return dict(stored)

    def list_timesheets(
        self,
        job_id: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for row in self._state.timesheets:
            if job_id is not None and row.get("job_id") != job_id:
                continue
            day = str(row.get("date") or "")[:10]
            if start_date and day < start_date:
                continue
            if end_date and day > end_date:
                continue
            rows.append(dict(row))
        return rows

    def update_timesheets(self, entry_ids: list[int], updates: dict[str, Any]) -> list[dict[str, Any]]:
        wanted = set(entry_ids)
        updated: list[dict[str, Any]] = []
        stamp = datetime.now(timezone.utc).isoformat()
        for row in self._state.timesheets:
            if row.get("id") in wanted:
                row.update(updates)
                row["updated_at"] = stamp
                updated.append(dict(row))
        return updated

    # ------------------------------------------------------------------
    # detail groups
    # ------------------------------------------------------------------
    def add_material(self, job_id: int, record: dict[str, Any]) -> None:
        self._state.materials.setdefault(job_id, []).append(dict(record))

    def list_materials(self, job_id: int) -> list[dict[str, Any]]:
        return [dict(row) for row in self._state.materials.get(job_id, [])]

    def add_bluesheet(self, job_id: int, record: dict[str, Any]) -> None:
        self._state.bluesheets.setdefault(job_id, []).append(copy.deepcopy(record))

    def list_bluesheets(self, job_id: int) -> list[dict[str, Any]]:
        return copy.deepcopy(self._state.bluesheets.get(job_id, []))

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------
    def get_configuration(self) -> dict[str, Any]:
        return copy.deepcopy(self._state.configuration)

    def save_configuration(self, configuration: dict[str, Any]) -> None:
        self._state.configuration = copy.deepcopy(configuration)

    def reset(self) -> None:
        self._state = LaborStoreState()
        self._entry_counter = 0
