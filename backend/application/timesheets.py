"""Application service layer for timesheet dashboards, approvals and pricing."""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable

import pydantic

from backend.core.dashboard import build_rows, build_weekly_summary, summarize_rows, summarize_stats
from backend.core.rates import price_labor
from backend.core.schema import (
    Configuration,
    DashboardRow,
    LaborQuote,
    TimesheetEntry,
    TimesheetStats,
    WeeklySummary,
    WorkerRef,
)
from backend.core.timevalues import coerce_hours, normalize_billable
from backend.core.validation import ValidationError, validate_markup_percentage, validate_rate_tier
from backend.core.weeks import WeekWindow, coerce_date, resolve_window
from backend.infrastructure import InMemoryTimesheetRepository, TimesheetRepository

logger = logging.getLogger(__name__)

APPROVAL_STATUSES = {"approved", "rejected", "pending", "submitted", "active"}

RATE_FIELDS = ("description", "min_hours", "max_hours", "rate")


class TimesheetNotFoundError(LookupError):
    """Raised when an approval targets entries that do not exist."""


class JobNotFoundError(LookupError):
    """Raised when a job-scoped request names an unknown job."""


def _worker_column(worker: WorkerRef) -> str:
    return "labor_id" if worker.kind == "labor" else "lead_labor_id"


def _matches_worker(row: dict[str, Any], worker: WorkerRef) -> bool:
    value = row.get(_worker_column(worker))
    try:
        return value is not None and int(value) == worker.id
    except (TypeError, ValueError):
        return False


class TimesheetService:
    """Coordinates timesheet use cases on top of a repository."""

    def __init__(self, repository: TimesheetRepository) -> None:
        self._repository = repository

    # ------------------------------------------------------------------
    # record intake
    # ------------------------------------------------------------------
    def add_job(self, job_id: int, job_title: str, *, status: str = "active") -> dict[str, Any]:
        return self._repository.add_job(job_id, job_title, status=status)

    def add_timesheet(self, record: dict[str, Any]) -> dict[str, Any]:
        try:
            TimesheetEntry.model_validate(record)
        except pydantic.ValidationError as exc:
            raise ValidationError(str(exc)) from exc
        return self._repository.add_timesheet(record)

    def add_material(self, job_id: int, record: dict[str, Any]) -> None:
        self._repository.add_material(job_id, record)

    def add_bluesheet(self, job_id: int, record: dict[str, Any]) -> None:
        self._repository.add_bluesheet(job_id, record)

    # ------------------------------------------------------------------
    # fan-out helpers
    # ------------------------------------------------------------------
    async def _fetch(self, label: str, func: Callable[..., list[dict]], *args: Any, **kwargs: Any) -> list[dict]:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except Exception:
            logger.warning("Failed to load %s, continuing with an empty list", label, exc_info=True)
            return []

    def _require_job(self, job_id: int) -> dict[str, Any]:
        job = self._repository.get_job(job_id)
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job

    @staticmethod
    def _to_entries(rows: Iterable[dict[str, Any]], titles: dict[int, str]) -> list[TimesheetEntry]:
        entries: list[TimesheetEntry] = []
        for row in rows:
            data = dict(row)
            if not data.get("job_title"):
                data["job_title"] = titles.get(data.get("job_id"))
            try:
                entries.append(TimesheetEntry.model_validate(data))
            except pydantic.ValidationError as exc:
                logger.warning("Skipping malformed timesheet row %s: %s", row.get("id"), exc)
        return entries

    # ------------------------------------------------------------------
    # weekly summaries
    # ------------------------------------------------------------------
    async def job_weekly_summary(
        self,
        job_id: int,
        day: Any = None,
        *,
        page: int = 1,
        limit: int = 10,
        today: date | None = None,
    ) -> WeeklySummary:
        job = self._require_job(job_id)
        window = resolve_window(day, today=today)
        rows = await self._fetch(
            f"timesheets for job {job_id}",
            self._repository.list_timesheets,
            job_id=job_id,
            start_date=window.start_date.isoformat(),
            end_date=window.end_date.isoformat(),
        )
        entries = self._to_entries(rows, {job_id: job["job_title"]})
        return build_weekly_summary(entries, window, page, limit)

    async def all_jobs_weekly_rows(
        self,
        start_date: Any = None,
        end_date: Any = None,
        *,
        today: date | None = None,
    ) -> tuple[WeekWindow, list[DashboardRow]]:
        window = resolve_window(start_date, end_date, today=today)
        jobs = self._repository.list_jobs()
        batches = await asyncio.gather(
            *(
                self._fetch(
                    f"timesheets for job {job['job_id']}",
                    self._repository.list_timesheets,
                    job_id=job["job_id"],
                    start_date=window.start_date.isoformat(),
                    end_date=window.end_date.isoformat(),
                )
                for job in jobs
            )
        )
        titles = {job["job_id"]: job["job_title"] for job in jobs}
        rows = [row for batch in batches for row in batch]
        return window, build_rows(self._to_entries(rows, titles), window)

    async def all_jobs_weekly_summary(
        self,
        start_date: Any = None,
        end_date: Any = None,
        *,
        page: int = 1,
        limit: int = 10,
        today: date | None = None,
    ) -> WeeklySummary:
        window, rows = await self.all_jobs_weekly_rows(start_date, end_date, today=today)
        return summarize_rows(rows, window, page, limit)

    async def timesheet_stats(self) -> TimesheetStats:
        rows = await self._fetch("timesheets", self._repository.list_timesheets)
        titles = {job["job_id"]: job["job_title"] for job in self._repository.list_jobs()}
        return summarize_stats(self._to_entries(rows, titles))

    # ------------------------------------------------------------------
    # job labor dashboard
    # ------------------------------------------------------------------
    def hourly_rate_tiers(self) -> list[dict[str, Any]]:
        configuration = self._repository.get_configuration()
        return list((configuration.get("settings") or {}).get("hourly_rates") or [])

    def quote(self, regular_hours: Any, overtime_hours: Any = None) -> LaborQuote:
        regular = coerce_hours(regular_hours)
        overtime = coerce_hours(overtime_hours)
        return price_labor(regular, overtime, self.hourly_rate_tiers)

    def price_bluesheet_entry(self, entry: dict[str, Any]) -> dict[str, Any]:
        priced = dict(entry)
        # stored values are a snapshot taken when the sheet was filed
        if priced.get("total_cost") is not None and priced.get("hourly_rate") is not None:
            priced["computed_total_cost"] = priced["total_cost"]
            priced["computed_hourly_rate"] = priced["hourly_rate"]
            return priced
        quote = self.quote(priced.get("regular_hours") or "0h", priced.get("overtime_hours") or "0h")
        priced["computed_total_cost"] = quote.total_cost
        priced["computed_hourly_rate"] = quote.hourly_rate
        return priced

    async def job_labor_dashboard(self, job_id: int) -> dict[str, Any]:
        job = self._require_job(job_id)
        rows, materials, bluesheets = await asyncio.gather(
            self._fetch(f"timesheets for job {job_id}", self._repository.list_timesheets, job_id=job_id),
            self._fetch(f"materials for job {job_id}", self._repository.list_materials, job_id),
            self._fetch(f"bluesheets for job {job_id}", self._repository.list_bluesheets, job_id),
        )

        priced_sheets: list[dict[str, Any]] = []
        labor_cost = Decimal("0")
        for sheet in bluesheets:
            priced = dict(sheet)
            entries = [self.price_bluesheet_entry(item) for item in sheet.get("labor_entries") or []]
            priced["labor_entries"] = entries
            for item in entries:
                labor_cost += Decimal(str(item.get("computed_total_cost") or 0))
            priced_sheets.append(priced)

        material_cost = sum((Decimal(str(item.get("total_cost") or 0)) for item in materials), Decimal("0"))
        stats = summarize_stats(self._to_entries(rows, {job_id: job["job_title"]}))

        return {
            "job": job,
            "timesheets": rows,
            "materials": materials,
            "bluesheets": priced_sheets,
            "summary": {
                "labor_cost": labor_cost,
                "material_cost": material_cost,
                "actual_project_cost": labor_cost + material_cost,
                "total_hours": stats.total_hours_display,
                "billable_hours": stats.billable_hours_display,
                "labor_entries": stats.total,
            },
        }

    # ------------------------------------------------------------------
    # approvals
    # ------------------------------------------------------------------
    @staticmethod
    def _approval_status(status: str | None) -> str:
        final = (status or "approved").strip().lower()
        if final not in APPROVAL_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(sorted(APPROVAL_STATUSES))}")
        return final

    def approve_timesheet(
        self,
        job_id: int,
        worker: WorkerRef,
        day: Any,
        status: str | None = None,
        billable: Any = None,
    ) -> list[dict[str, Any]]:
        final_status = self._approval_status(status)
        target = coerce_date(day).isoformat()
        updates: dict[str, Any] = {"status": final_status}
        normalized = normalize_billable(billable)
        if normalized is not None:
            updates["billable"] = normalized

        matches = [
            row
            for row in self._repository.list_timesheets(job_id=job_id, start_date=target, end_date=target)
            if _matches_worker(row, worker)
        ]
        if not matches:
            raise TimesheetNotFoundError(
                f"Timesheet entry not found for job {job_id}, {worker.kind} {worker.id} on {target}"
            )
        return self._repository.update_timesheets([row["id"] for row in matches], updates)

    def approve_week(
        self,
        job_id: int,
        worker: WorkerRef,
        start_date: Any,
        end_date: Any,
        status: str | None = None,
        billable: Any = None,
    ) -> list[dict[str, Any]]:
        final_status = self._approval_status(status)
        start = coerce_date(start_date)
        end = coerce_date(end_date)
        if end < start:
            raise ValidationError("end_date cannot be earlier than start_date")
        updates: dict[str, Any] = {"status": final_status}
        normalized = normalize_billable(billable)
        if normalized is not None:
            updates["billable"] = normalized

        matches = [
            row
            for row in self._repository.list_timesheets(
                job_id=job_id, start_date=start.isoformat(), end_date=end.isoformat()
            )
            if _matches_worker(row, worker)
        ]
        if not matches:
            raise TimesheetNotFoundError(
                f"No timesheet entries found for job {job_id}, {worker.kind} {worker.id} "
                f"between {start.isoformat()} and {end.isoformat()}"
            )
        return self._repository.update_timesheets([row["id"] for row in matches], updates)

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------
    def get_configuration(self) -> Configuration:
        return Configuration.model_validate(self._repository.get_configuration() or {})

    def update_configuration(self, payload: dict[str, Any]) -> Configuration:
        rates = payload.get("hourly_rates")
        markup = payload.get("markup_percentage")
        if rates is None and markup is None:
            raise ValidationError("At least one configuration field must be provided")
        if rates is not None and not isinstance(rates, list):
            raise ValidationError("hourly_rates must be a list")

        for rate in rates or []:
            if not isinstance(rate, dict):
                raise ValidationError("each hourly rate must be an object")
            validate_rate_tier(rate)
        validate_markup_percentage(markup)

        configuration = self._repository.get_configuration() or {}
        settings = dict(configuration.get("settings") or {})
        current: list[dict[str, Any]] = [dict(item) for item in settings.get("hourly_rates") or []]

        for rate in rates or []:
            fields = {key: rate.get(key) for key in RATE_FIELDS if key in rate}
            rate_id = rate.get("id")
            existing = next((item for item in current if rate_id is not None and item.get("id") == rate_id), None)
            if existing is not None:
                existing.update(fields)
            elif rate_id is not None:
                current.append({"id": rate_id, **fields})
            else:
                next_id = max((int(item.get("id") or 0) for item in current), default=0) + 1
                current.append({"id": next_id, **fields})

        settings["hourly_rates"] = current
        configuration["settings"] = settings
        if markup is not None:
            configuration["markup_percentage"] = markup

        try:
            result = Configuration.model_validate(configuration)
        except pydantic.ValidationError as exc:
            raise ValidationError(str(exc)) from exc
        self._repository.save_configuration(result.model_dump(mode="json"))
        return result

    def remove_hourly_rates(self, rate_ids: list[int]) -> Configuration:
        if not rate_ids:
            raise ValidationError("Rate IDs array is required and cannot be empty")
        if any(isinstance(rate_id, bool) or not isinstance(rate_id, int) or rate_id <= 0 for rate_id in rate_ids):
            raise ValidationError("All rate IDs must be positive integers")

        configuration = self._repository.get_configuration() or {}
        settings = dict(configuration.get("settings") or {})
        removed = set(rate_ids)
        settings["hourly_rates"] = [
            item for item in settings.get("hourly_rates") or [] if item.get("id") not in removed
        ]
        configuration["settings"] = settings
        result = Configuration.model_validate(configuration)
        self._repository.save_configuration(result.model_dump(mode="json"))
        return result

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._repository.reset()


_repository = InMemoryTimesheetRepository()
_service = TimesheetService(_repository)


def get_timesheet_service() -> TimesheetService:
    """Return the singleton timesheet service for the process."""

    return _service


def reset_timesheet_state() -> None:
    """Reset the in-memory store (used in tests)."""

    _service.reset()
