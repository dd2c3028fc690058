from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class PrefillSchema(BaseModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    service: str | None = None


class HoldLookupResponse(BaseModel):
    valid: bool = False
    token: str | None = None
    expires_at: datetime | None = None
    prefill: PrefillSchema | None = None

    @field_validator("expires_at")
    @classmethod
    def _require_timezone(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            raise ValueError("expires_at must carry a timezone offset")
        return value


class AvailabilityResponse(BaseModel):
    slots: list[str] | None = Field(default_factory=list)


class BookingConfirmation(BaseModel):
    booking_id: str | int | None = None
    id: str | int | None = None
    return_url: str | None = None

    def resolved_id(self) -> str:
        value = self.booking_id or self.id
        return "" if value is None else str(value)


class BookingConflict(BaseModel):
    alternatives: list[str] | None = Field(default_factory=list)
