from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from app.application.dto.backend import HoldLookupResponse
from app.domain.entities.booking_payload import BookingPayload


@dataclass(frozen=True)
class BookingResponse:
    status_code: int
    body: dict[str, Any] | None  # parsed JSON object, None if the body was not a JSON object
    text: str = ""


class BookingBackendPort(ABC):
    @abstractmethod
    async def lookup_hold(self, token: str) -> HoldLookupResponse:
        """Look up a hold token.

        Raises BackendStatusError on non-2xx, BackendTransportError on network
        failures and BackendContractError on a malformed body.
        """
        raise NotImplementedError

    @abstractmethod
    async def fetch_availability(self, date: str, service: str, token: str | None) -> list[str]:
        """Return bookable ISO instants for the date. Raises BackendError subclasses."""
        raise NotImplementedError

    @abstractmethod
    async def submit_booking(self, payload: BookingPayload) -> BookingResponse:
        """POST the booking. Any HTTP status is returned; only transport failures raise."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources. In-memory backends have none."""
        return None
