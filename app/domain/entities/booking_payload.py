from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class BookingPayload:
    token: str | None
    name: str
    phone: str
    email: str
    service: str
    stylist: str | None
    date: str
    time: str
    notes: str

    def to_json(self) -> dict[str, Any]:
        return asdict(self)
