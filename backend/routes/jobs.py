from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from backend.application import JobNotFoundError, get_timesheet_service
from backend.core.validation import ValidationError

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/{job_id}/timesheets/weekly")
async def job_weekly_summary(
    job_id: int,
    date: str | None = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=10),
) -> dict:
    service = get_timesheet_service()
    try:
        summary = await service.job_weekly_summary(job_id, date, page=page, limit=limit)
    except JobNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return summary.model_dump(mode="json")


@router.get("/{job_id}/labor-dashboard")
async def job_labor_dashboard(job_id: int) -> dict:
    """Timesheets, materials and priced bluesheets for one job."""
    service = get_timesheet_service()
    try:
        data = await service.job_labor_dashboard(job_id)
    except JobNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return jsonable_encoder(data)
