from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.core.validation import ValidationError
from backend.core.weeks import coerce_date

logger = logging.getLogger(__name__)

WorkerKind = Literal["labor", "lead_labor"]

WORKER_LABELS: dict[str, str] = {"labor": "Labor", "lead_labor": "Lead Labor"}


class WorkerRef(BaseModel):
    """Identity of the person an entry belongs to, tagged by role."""

    kind: WorkerKind
    id: int


def worker_from_ids(labor_id: Any = None, lead_labor_id: Any = None) -> WorkerRef:
    has_labor = labor_id not in (None, "")
    has_lead = lead_labor_id not in (None, "")
    if has_labor == has_lead:
        raise ValueError("exactly one of labor_id or lead_labor_id must be provided")
    if has_labor:
        return WorkerRef(kind="labor", id=int(labor_id))
    return WorkerRef(kind="lead_labor", id=int(lead_labor_id))


class TimesheetEntry(BaseModel):
    id: int | None = None
    worker: WorkerRef
    job_id: int
    job_title: str | None = None
    date: dt.date
    start_time: str | None = None
    end_time: str | None = None
    work_hours: str | float | None = None
    status: str = ""
    billable: float | None = None
    employee_name: str = ""

    @model_validator(mode="before")
    @classmethod
    def _map_worker_ids(cls, data: Any) -> Any:
        if isinstance(data, dict) and "worker" not in data:
            data = dict(data)
            data["worker"] = worker_from_ids(data.pop("labor_id", None), data.pop("lead_labor_id", None))
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_day(cls, value: Any) -> Any:
        # stored rows may carry a full timestamp
        if isinstance(value, (str, dt.datetime)):
            try:
                return coerce_date(value)
            except ValidationError as exc:
                raise ValueError(str(exc)) from exc
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _status_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("employee_name", mode="before")
    @classmethod
    def _name_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("billable", mode="before")
    @classmethod
    def _numeric_billable(cls, value: Any) -> float | None:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric billable override %r", value)
            return None

    @property
    def display_name(self) -> str:
        if self.employee_name:
            return self.employee_name
        return f"{WORKER_LABELS[self.worker.kind]}-{self.worker.id}"

    @property
    def normalized_status(self) -> str:
        return self.status.strip().lower()


class RateTier(BaseModel):
    id: int | None = None
    description: str | None = None
    min_hours: float | None = None
    max_hours: float | None = None
    rate: Decimal = Decimal("0")


class ConfigurationSettings(BaseModel):
    hourly_rates: list[RateTier] = Field(default_factory=list)


class Configuration(BaseModel):
    settings: ConfigurationSettings = Field(default_factory=ConfigurationSettings)
    markup_percentage: Decimal | None = None


class LaborQuote(BaseModel):
    hourly_rate: Decimal
    total_cost: Decimal
    degraded: bool = False


class DashboardRow(BaseModel):
    employee: str
    job: str
    job_id: int
    worker_kind: WorkerKind
    worker_id: int
    mon: str = "0h"
    tue: str = "0h"
    wed: str = "0h"
    thu: str = "0h"
    fri: str = "0h"
    sat: str = "0h"
    sun: str = "0h"
    total: str = "0h"
    billable: str = "0h"
    status: str = "Draft"
    actions: list[str] = Field(default_factory=lambda: ["approve", "reject"])


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_records: int
    records_per_page: int
    has_next_page: bool
    has_prev_page: bool


class WeeklyPeriod(BaseModel):
    start_date: str
    end_date: str
    week_range: str


class WeeklySummary(BaseModel):
    period: WeeklyPeriod
    dashboard_timesheets: list[DashboardRow] = Field(default_factory=list)
    pagination: Pagination


class TimesheetStats(BaseModel):
    total: int = 0
    pending: int = 0
    total_hours: float = 0.0
    billable_hours: float = 0.0
    total_hours_display: str = "0h"
    billable_hours_display: str = "0h"
