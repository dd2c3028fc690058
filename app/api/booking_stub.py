from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.application.dto.backend import PrefillSchema
from app.application.exceptions import BackendStatusError
from app.core.config import settings
from app.domain.entities.booking_payload import BookingPayload
from app.domain.entities.hold import Prefill
from app.infrastructure.backend.mock_backend import MockBookingBackend
from app.wiring.dependencies import get_mock_backend


router = APIRouter()
logger = logging.getLogger(__name__)


class BookingRequestSchema(BaseModel):
    token: str | None = None
    name: str
    phone: str
    email: str
    service: str
    stylist: str | None = None
    date: str
    time: str
    notes: str = ""


class IssueHoldRequestSchema(BaseModel):
    prefill: PrefillSchema | None = None
    ttl_seconds: int | None = None


@router.get(settings.HOLD_PATH)
async def lookup_hold(
    t: str = Query(...),
    backend: MockBookingBackend = Depends(get_mock_backend),
):
    try:
        data = await backend.lookup_hold(t)
    except BackendStatusError as e:
        raise HTTPException(status_code=e.status_code, detail=e.body)
    return data.model_dump(mode="json")


@router.get(settings.AVAILABILITY_PATH)
async def availability(
    date: str = Query(...),
    token: str | None = Query(None),
    service: str = Query(""),
    backend: MockBookingBackend = Depends(get_mock_backend),
):
    try:
        slots = await backend.fetch_availability(date=date, service=service, token=token)
    except BackendStatusError as e:
        raise HTTPException(status_code=e.status_code, detail=e.body)
    return {"slots": slots}


@router.post(settings.BOOK_PATH)
async def book(
    request: BookingRequestSchema,
    backend: MockBookingBackend = Depends(get_mock_backend),
) -> JSONResponse:
    result = await backend.submit_booking(BookingPayload(**request.model_dump()))
    logger.info("Stub booking answered", extra={"status": result.status_code})
    return JSONResponse(status_code=result.status_code, content=result.body or {})


@router.post("/api/holds", status_code=201)
async def issue_hold(
    request: IssueHoldRequestSchema,
    backend: MockBookingBackend = Depends(get_mock_backend),
):
    prefill = request.prefill
    hold = backend.issue_hold(
        prefill=Prefill(**prefill.model_dump()) if prefill else None,
        ttl_seconds=request.ttl_seconds,
    )
    return {
        "token": hold.token,
        "expires_at": hold.expires_at.isoformat(),
        "url": f"/book?t={hold.token}",
    }
