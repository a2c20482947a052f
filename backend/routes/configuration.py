from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from backend.application import get_timesheet_service
from backend.core.validation import ValidationError

router = APIRouter(prefix="/configuration", tags=["configuration"])


@router.get("")
async def get_configuration() -> dict:
    service = get_timesheet_service()
    return service.get_configuration().model_dump()


@router.put("")
async def update_configuration(payload: dict) -> dict:
    service = get_timesheet_service()
    try:
        configuration = service.update_configuration(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return configuration.model_dump()


@router.post("/hourly-rates/remove")
async def remove_hourly_rates(payload: dict) -> dict:
    rate_ids = payload.get("rate_ids")
    if not isinstance(rate_ids, list):
        raise HTTPException(status_code=400, detail="Rate IDs array is required and cannot be empty")
    service = get_timesheet_service()
    try:
        configuration = service.remove_hourly_rates(rate_ids)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return configuration.model_dump()


@router.get("/hourly-rates/quote")
async def quote_labor(
    regular_hours: str = Query(default="0h"),
    overtime_hours: str = Query(default="0h"),
) -> dict:
    service = get_timesheet_service()
    quote = service.quote(regular_hours, overtime_hours)
    return quote.model_dump()
