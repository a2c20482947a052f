"""Fold raw timesheet entries into per-employee weekly buckets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, NamedTuple

from backend.core.schema import TimesheetEntry, WorkerKind
from backend.core.timevalues import Hours, duration_between
from backend.core.weeks import WEEKDAY_LABELS, WeekWindow, weekday_label


class BucketKey(NamedTuple):
    employee: str
    job_id: int
    kind: WorkerKind


@dataclass
class AggregationBucket:
    worker_id: int
    job_title: str | None = None
    hours_by_day: dict[str, Hours] = field(default_factory=lambda: {label: Hours() for label in WEEKDAY_LABELS})
    total: Hours = field(default_factory=Hours)
    billable: Hours = field(default_factory=Hours)
    statuses: list[str] = field(default_factory=list)


def entry_hours(entry: TimesheetEntry) -> Hours:
    """Worked hours for one entry.

    An explicit ``work_hours`` value already has break deductions applied and
    always wins over a start/end recomputation.
    """

    if entry.work_hours not in (None, ""):
        return Hours.coerce(entry.work_hours)
    return Hours.from_clock(duration_between(entry.start_time, entry.end_time))


def aggregate(entries: Iterable[TimesheetEntry], window: WeekWindow) -> dict[BucketKey, AggregationBucket]:
    buckets: dict[BucketKey, AggregationBucket] = {}
    for entry in entries:
        if entry.date not in window:
            continue

        key = BucketKey(entry.display_name, entry.job_id, entry.worker.kind)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = AggregationBucket(worker_id=entry.worker.id, job_title=entry.job_title)
            buckets[key] = bucket
        elif not bucket.job_title and entry.job_title:
            bucket.job_title = entry.job_title

        hours = entry_hours(entry)
        bucket.hours_by_day[weekday_label(entry.date)] += hours
        bucket.total += hours
        bucket.billable += Hours(entry.billable) if entry.billable is not None else hours

        status = entry.normalized_status
        if status:
            bucket.statuses.append(status)
    return buckets
