from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FormValues:
    """Live values of the booking form as read from the view."""

    name: str = ""
    phone: str = ""
    email: str = ""
    service: str = ""
    stylist: str = ""
    date: str = ""  # YYYY-MM-DD
    time: str = ""  # ISO instant of the selected slot, "" for no selection
    notes: str = ""


@dataclass(frozen=True)
class BookingDraft:
    name: str = ""
    phone: str = ""
    email: str = ""
    service: str = ""
    stylist: str = ""
    date: str = ""
    time: str = ""
    notes: str = ""
    saved_at: str | None = None  # ISO instant

    @classmethod
    def from_values(cls, values: FormValues, saved_at: str) -> "BookingDraft":
        return cls(
            name=values.name,
            phone=values.phone,
            email=values.email,
            service=values.service,
            stylist=values.stylist,
            date=values.date,
            time=values.time,
            notes=values.notes,
            saved_at=saved_at,
        )
