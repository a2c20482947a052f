"""Weekly dashboard view models built from aggregation buckets."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from backend.core.aggregation import AggregationBucket, BucketKey, aggregate, entry_hours
from backend.core.schema import (
    DashboardRow,
    Pagination,
    TimesheetEntry,
    TimesheetStats,
    WeeklyPeriod,
    WeeklySummary,
)
from backend.core.status import resolve_status
from backend.core.timevalues import Hours
from backend.core.validation import validate_page
from backend.core.weeks import WeekWindow

ROW_ACTIONS = ("approve", "reject")

_KIND_ORDER = {"labor": 0, "lead_labor": 1}


def job_label(job_id: int, job_title: str | None) -> str:
    return f"{job_title or 'Untitled'} (Job-{job_id})"


def build_row(key: BucketKey, bucket: AggregationBucket, window: WeekWindow) -> DashboardRow:
    days = {label: bucket.hours_by_day.get(label, Hours()).to_display() for _, label in window.days}
    return DashboardRow(
        employee=key.employee,
        job=job_label(key.job_id, bucket.job_title),
        job_id=key.job_id,
        worker_kind=key.kind,
        worker_id=bucket.worker_id,
        total=bucket.total.to_display(),
        billable=bucket.billable.to_display(),
        status=resolve_status(bucket.statuses, bucket.total.value),
        actions=list(ROW_ACTIONS),
        **days,
    )


def build_rows(entries: Iterable[TimesheetEntry], window: WeekWindow) -> list[DashboardRow]:
    buckets = aggregate(entries, window)
    ordered = sorted(buckets.items(), key=lambda item: (item[0].employee.lower(), item[0].job_id, _KIND_ORDER[item[0].kind]))
    return [build_row(key, bucket, window) for key, bucket in ordered]


def paginate(rows: Sequence[DashboardRow], page: int = 1, limit: int = 10) -> tuple[list[DashboardRow], Pagination]:
    validate_page(page, limit)
    total = len(rows)
    start = (page - 1) * limit
    end = page * limit
    pagination = Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_records=total,
        records_per_page=limit,
        has_next_page=end < total,
        has_prev_page=page > 1,
    )
    return list(rows[start:end]), pagination


def summarize_rows(rows: Sequence[DashboardRow], window: WeekWindow, page: int = 1, limit: int = 10) -> WeeklySummary:
    page_rows, pagination = paginate(rows, page, limit)
    return WeeklySummary(
        period=WeeklyPeriod(**window.to_period()),
        dashboard_timesheets=page_rows,
        pagination=pagination,
    )


def build_weekly_summary(
    entries: Iterable[TimesheetEntry],
    window: WeekWindow,
    page: int = 1,
    limit: int = 10,
) -> WeeklySummary:
    return summarize_rows(build_rows(entries, window), window, page, limit)


def summarize_stats(entries: Iterable[TimesheetEntry]) -> TimesheetStats:
    total = 0
    pending = 0
    hours = Hours()
    billable = Hours()
    for entry in entries:
        total += 1
        if entry.normalized_status in {"", "pending"}:
            pending += 1
        worked = entry_hours(entry)
        hours += worked
        billable += Hours(entry.billable) if entry.billable is not None else worked
    return TimesheetStats(
        total=total,
        pending=pending,
        total_hours=round(hours.value, 2),
        billable_hours=round(billable.value, 2),
        total_hours_display=hours.to_display(),
        billable_hours_display=billable.to_display(),
    )
