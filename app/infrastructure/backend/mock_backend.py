from __future__ import annotations

import logging
import secrets
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from app.application.dto.backend import HoldLookupResponse, PrefillSchema
from app.application.exceptions import BackendStatusError
from app.application.ports.booking_backend import BookingBackendPort, BookingResponse
from app.application.ports.clock import ClockPort
from app.domain.entities.booking_payload import BookingPayload
from app.domain.entities.hold import Hold, Prefill
from app.infrastructure.clock.system_clock import SystemClock


class MockBookingBackend(BookingBackendPort):
    """In-memory backend: half-hour slots between opening hours, holds with a TTL."""

    def __init__(
        self,
        timezone: ZoneInfo,
        clock: ClockPort | None = None,
        hold_ttl_seconds: int = 600,
        closed_weekdays: tuple[int, ...] = (0,),
        start_hour: int = 9,
        end_hour: int = 17,
        slot_minutes: int = 30,
    ) -> None:
        self._timezone = timezone
        self._clock = clock or SystemClock()
        self._hold_ttl = timedelta(seconds=hold_ttl_seconds)
        self._closed_weekdays = closed_weekdays
        self._start_hour = start_hour
        self._end_hour = end_hour
        self._slot_minutes = slot_minutes
        self._holds: dict[str, Hold] = {}
        self._bookings: dict[str, dict] = {}
        self._taken: set[datetime] = set()
        self._logger = logging.getLogger(__name__)

    def issue_hold(self, prefill: Prefill | None = None, ttl_seconds: int | None = None) -> Hold:
        ttl = timedelta(seconds=ttl_seconds) if ttl_seconds is not None else self._hold_ttl
        hold = Hold(
            token=secrets.token_urlsafe(12),
            expires_at=self._clock.now() + ttl,
            prefill=prefill or Prefill(),
        )
        self._holds[hold.token] = hold
        self._logger.info("Mock hold issued", extra={"token": hold.token})
        return hold

    def bookings(self) -> dict[str, dict]:
        return dict(self._bookings)

    async def lookup_hold(self, token: str) -> HoldLookupResponse:
        hold = self._holds.get(token)
        if hold is None:
            raise BackendStatusError(404, "unknown hold")
        return HoldLookupResponse(
            valid=hold.expires_at > self._clock.now(),
            token=hold.token,
            expires_at=hold.expires_at,
            prefill=PrefillSchema(
                name=hold.prefill.name,
                phone=hold.prefill.phone,
                email=hold.prefill.email,
                service=hold.prefill.service,
            ),
        )

    async def fetch_availability(self, date: str, service: str, token: str | None) -> list[str]:
        try:
            day = _parse_day(date)
        except ValueError as e:
            raise BackendStatusError(400, "invalid date") from e
        return [slot.isoformat() for slot in self._free_slots(day)]

    async def submit_booking(self, payload: BookingPayload) -> BookingResponse:
        if payload.token is not None:
            hold = self._holds.get(payload.token)
            if hold is None:
                return BookingResponse(status_code=404, body={"detail": "unknown hold"}, text="unknown hold")
            if hold.expires_at <= self._clock.now():
                return BookingResponse(status_code=410, body={"detail": "hold expired"}, text="hold expired")

        try:
            slot = _parse_instant(payload.time)
        except ValueError:
            return BookingResponse(status_code=422, body={"detail": "invalid time"}, text="invalid time")

        local_day = slot.astimezone(self._timezone).date()
        free = self._free_slots(local_day)
        if slot not in free:
            alternatives = [s.isoformat() for s in free[:3]]
            return BookingResponse(status_code=409, body={"alternatives": alternatives}, text="")

        booking_id = f"mock_booking_{len(self._bookings) + 1}"
        self._taken.add(slot)
        self._bookings[booking_id] = payload.to_json()
        if payload.token is not None:
            self._holds.pop(payload.token, None)
        self._logger.info("Mock booking created", extra={"booking_id": booking_id})
        return BookingResponse(status_code=201, body={"booking_id": booking_id}, text="")

    def _free_slots(self, day: date) -> list[datetime]:
        if day.weekday() in self._closed_weekdays:
            return []
        current = datetime.combine(day, time(hour=self._start_hour), tzinfo=self._timezone)
        end = datetime.combine(day, time(hour=self._end_hour), tzinfo=self._timezone)
        slots: list[datetime] = []
        while current + timedelta(minutes=self._slot_minutes) <= end:
            if current not in self._taken:
                slots.append(current)
            current += timedelta(minutes=self._slot_minutes)
        return slots


def _parse_day(value: str) -> date:
    return date.fromisoformat(value)


def _parse_instant(value: str) -> datetime:
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        raise ValueError("instant without offset")
    return moment
