from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import FileResponse

from backend.application import TimesheetNotFoundError, get_timesheet_service
from backend.core.exports import export_path
from backend.core.schema import worker_from_ids
from backend.core.validation import ValidationError
from backend.exporters.weekly_timesheet import SUPPORTED_FORMATS, export_weekly_timesheets

router = APIRouter(prefix="/timesheets", tags=["timesheets"])

MEDIA_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _require(payload: dict[str, Any], *fields: str) -> None:
    missing = [name for name in fields if payload.get(name) in (None, "")]
    if missing:
        raise HTTPException(status_code=400, detail=f"{', '.join(missing)} required")


def _worker(payload: dict[str, Any]):
    try:
        return worker_from_ids(payload.get("labor_id"), payload.get("lead_labor_id"))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _job_id(payload: dict[str, Any]) -> int:
    try:
        return int(payload["job_id"])
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail="job_id must be an integer") from exc


@router.get("/weekly")
async def all_jobs_weekly_summary(
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=10),
) -> dict:
    service = get_timesheet_service()
    try:
        summary = await service.all_jobs_weekly_summary(start_date, end_date, page=page, limit=limit)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return summary.model_dump(mode="json")


@router.get("/weekly/export")
async def export_weekly_summary(
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    format: str = Query(default="csv"),
) -> FileResponse:
    fmt = format.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise HTTPException(status_code=400, detail="format must be csv or xlsx")
    service = get_timesheet_service()
    try:
        window, rows = await service.all_jobs_weekly_rows(start_date, end_date)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    target = export_weekly_timesheets(export_path(f"timesheets_{window.start_date.isoformat()}", fmt), rows, fmt)
    return FileResponse(target, media_type=MEDIA_TYPES[fmt], filename=target.name)


@router.get("/stats")
async def timesheet_stats() -> dict:
    service = get_timesheet_service()
    stats = await service.timesheet_stats()
    return stats.model_dump()


@router.post("/approve")
async def approve_timesheet(
    payload: dict,
    status: str | None = Query(default=None),
    billable: str | None = Query(default=None),
) -> dict:
    _require(payload, "job_id", "date")
    worker = _worker(payload)
    final_status = payload.get("status") or status
    final_billable = payload["billable"] if "billable" in payload else billable

    service = get_timesheet_service()
    try:
        rows = service.approve_timesheet(_job_id(payload), worker, payload["date"], final_status, final_billable)
    except TimesheetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"status": rows[0]["status"], "updated": len(rows), "items": rows}


@router.post("/approve-week")
async def approve_week(
    payload: dict,
    status: str | None = Query(default=None),
    billable: str | None = Query(default=None),
) -> dict:
    _require(payload, "job_id", "start_date", "end_date")
    worker = _worker(payload)
    final_status = payload.get("status") or status
    final_billable = payload["billable"] if "billable" in payload else billable

    service = get_timesheet_service()
    try:
        rows = service.approve_week(
            _job_id(payload),
            worker,
            payload["start_date"],
            payload["end_date"],
            final_status,
            final_billable,
        )
    except TimesheetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"status": rows[0]["status"], "updated": len(rows), "items": rows}
