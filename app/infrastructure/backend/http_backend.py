from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from app.application.dto.backend import AvailabilityResponse, HoldLookupResponse
from app.application.exceptions import BackendContractError, BackendStatusError, BackendTransportError
from app.application.ports.booking_backend import BookingBackendPort, BookingResponse
from app.core.config import settings
from app.domain.entities.booking_payload import BookingPayload


class HttpBookingBackend(BookingBackendPort):
    def __init__(
        self,
        base_url: str | None = None,
        hold_path: str | None = None,
        availability_path: str | None = None,
        book_path: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url if base_url is not None else settings.BOOKING_API_BASE_URL or "").rstrip("/")
        self._hold_path = hold_path or settings.HOLD_PATH
        self._availability_path = availability_path or settings.AVAILABILITY_PATH
        self._book_path = book_path or settings.BOOK_PATH
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    async def lookup_hold(self, token: str) -> HoldLookupResponse:
        response = await self._get(self._hold_path, params={"t": token})
        try:
            return HoldLookupResponse.model_validate(_json_or_none(response))
        except ValidationError as e:
            raise BackendContractError(f"Hold lookup: unexpected body ({e.error_count()} errors)") from e

    async def fetch_availability(self, date: str, service: str, token: str | None) -> list[str]:
        params = {"date": date}
        if token:
            params["token"] = token
        params["service"] = service or ""

        response = await self._get(self._availability_path, params=params)
        data = _json_or_none(response)
        if data is None:
            raise BackendContractError("Availability: body is not a JSON object")
        try:
            parsed = AvailabilityResponse.model_validate(data)
        except ValidationError as e:
            raise BackendContractError(f"Availability: unexpected body ({e.error_count()} errors)") from e
        return list(parsed.slots or [])

    async def submit_booking(self, payload: BookingPayload) -> BookingResponse:
        try:
            response = await self._client.post(self._url(self._book_path), json=payload.to_json())
        except httpx.HTTPError as e:
            raise BackendTransportError(str(e) or type(e).__name__) from e
        return BookingResponse(
            status_code=response.status_code,
            body=_json_or_none(response),
            text=response.text,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, str]) -> httpx.Response:
        try:
            response = await self._client.get(self._url(path), params=params)
        except httpx.HTTPError as e:
            raise BackendTransportError(str(e) or type(e).__name__) from e
        if not response.is_success:
            self._logger.warning("Backend request failed", extra={"status": response.status_code})
            raise BackendStatusError(response.status_code, response.text)
        return response

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"


def _json_or_none(response: httpx.Response) -> dict[str, Any] | None:
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
