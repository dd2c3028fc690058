from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TypeVar
from urllib.parse import urlencode

from pydantic import BaseModel, ValidationError

from app.application.dto.backend import BookingConfirmation, BookingConflict
from app.application.dto.booking_form import BookingFormInput
from app.application.exceptions import BackendError
from app.application.ports.booking_backend import BookingBackendPort, BookingResponse
from app.application.ports.form_view import FormViewPort
from app.application.use_cases.availability import AvailabilityClient
from app.application.use_cases.draft_store import DraftStore
from app.application.use_cases.hold_session import HoldSession
from app.application.utils.business_day import parse_form_date
from app.domain.entities.booking_draft import FormValues
from app.domain.entities.booking_payload import BookingPayload
from app.domain.entities.hold import Hold
from app.domain.entities.messages import (
    CLOSED_DAY_ALERT,
    ERROR_MESSAGES,
    HOLD_TOKEN_EXPIRED,
    SOFT_HOLD_CONFIRM,
    STATUS_BOOKING,
    SUBMIT_LABEL,
    SUBMIT_LABEL_BUSY,
)
from app.domain.entities.session_state import ErrorKind, SubmissionOutcome, SubmissionState

ModelT = TypeVar("ModelT", bound=BaseModel)


def build_payload(values: FormValues, hold: Hold | None) -> BookingPayload:
    return BookingPayload(
        token=hold.token if hold else None,
        name=values.name.strip(),
        phone=values.phone.strip(),
        email=values.email.strip(),
        service=values.service,
        stylist=values.stylist or None,
        date=values.date,
        time=values.time,
        notes=values.notes,
    )


def confirmation_url(base: str, booking_id: str, return_url: str | None) -> str:
    params = {"id": booking_id}
    if return_url:
        params["return"] = return_url
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode(params)}"


class SubmissionController:
    """
    Drives one booking submission at a time.

    Idle -> Submitting -> Succeeded | Conflict | Expired | Failed. Every
    outcome except Succeeded hands control back (state returns to Idle and
    the submit control is re-enabled); Succeeded navigates away.
    """

    def __init__(
        self,
        backend: BookingBackendPort,
        view: FormViewPort,
        session: HoldSession,
        availability: AvailabilityClient,
        drafts: DraftStore,
        confirmation_base_url: str = "thanks.html",
        closed_weekdays: Iterable[int] = (0,),
    ) -> None:
        self._backend = backend
        self._view = view
        self._session = session
        self._availability = availability
        self._drafts = drafts
        self._confirmation_base_url = confirmation_base_url
        self._closed_weekdays = tuple(closed_weekdays)
        self._state = SubmissionState.idle
        self._last_result: SubmissionState | None = None
        self._last_error: ErrorKind | None = None
        self._logger = logging.getLogger(__name__)
        self._availability.set_submit_gate(self.can_submit)

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def last_result(self) -> SubmissionState | None:
        """State the most recent attempt ended in (Succeeded, Conflict, Expired or Failed)."""
        return self._last_result

    @property
    def last_error(self) -> ErrorKind | None:
        return self._last_error

    def can_submit(self) -> bool:
        return self._state not in (SubmissionState.submitting, SubmissionState.succeeded)

    async def submit(self) -> SubmissionOutcome:
        if not self.can_submit():
            return SubmissionOutcome.ignored

        self._view.clear_error()
        values = self._view.read_values()

        form_date = parse_form_date(values.date)
        if form_date is not None and form_date.weekday() in self._closed_weekdays:
            self.reject_closed_day()
            return SubmissionOutcome.closed_day

        try:
            BookingFormInput.model_validate(
                {
                    "name": values.name,
                    "phone": values.phone,
                    "email": values.email,
                    "service": values.service,
                    "stylist": values.stylist,
                    "date": values.date,
                    "time": values.time,
                    "notes": values.notes,
                }
            )
        except ValidationError as e:
            self._logger.info("Form failed validation", extra={"error": str(e.errors())})
            self._fail(ErrorKind.form_invalid)
            return SubmissionOutcome.invalid_form

        if form_date is None:
            self._fail(ErrorKind.form_invalid)
            return SubmissionOutcome.invalid_form

        hold = self._session.hold
        if hold is None and not self._view.confirm(SOFT_HOLD_CONFIRM):
            return SubmissionOutcome.cancelled

        draft_key = self._session.draft_key
        payload = build_payload(values, hold)
        self._enter_submitting()

        try:
            response = await self._backend.submit_booking(payload)
        except BackendError as e:
            self._logger.error("booking error", extra={"token": payload.token, "error": str(e)})
            self._state = SubmissionState.failed
            self._return_to_idle(ErrorKind.network_error)
            return SubmissionOutcome.network_error

        return self._handle_response(response, draft_key)

    def reject_closed_day(self) -> None:
        """Closed weekday: alert, clear the date and empty the time selector. No network."""
        self._view.alert(CLOSED_DAY_ALERT)
        self._view.set_field("date", "")
        self._availability.clear()

    def _handle_response(self, response: BookingResponse, draft_key: str) -> SubmissionOutcome:
        status = response.status_code
        body = response.body or {}

        if status in (200, 201):
            confirmation = _parse_body(BookingConfirmation, body)
            booking_id = confirmation.resolved_id()
            self._drafts.clear(draft_key)
            self._state = SubmissionState.succeeded
            self._last_result = self._state
            self._last_error = None
            self._logger.info("Booking confirmed", extra={"booking_id": booking_id})
            self._view.navigate(confirmation_url(self._confirmation_base_url, booking_id, confirmation.return_url))
            return SubmissionOutcome.succeeded

        if status == 409:
            conflict = _parse_body(BookingConflict, body)
            self._state = SubmissionState.conflict
            self._logger.info("Booking conflict", extra={"status": status})
            self._availability.apply_alternatives(conflict.alternatives or [])
            self._return_to_idle(ErrorKind.submission_conflict)
            return SubmissionOutcome.conflict

        if status == 410:
            # The hold stays in place; the countdown remains its only owner.
            self._state = SubmissionState.expired
            self._logger.info("Hold expired at submit", extra={"status": status})
            self._return_to_idle(ErrorKind.hold_expired, HOLD_TOKEN_EXPIRED)
            return SubmissionOutcome.expired

        self._state = SubmissionState.failed
        self._logger.warning("booking failed", extra={"status": status, "error": response.text})
        self._return_to_idle(ErrorKind.submission_failed)
        return SubmissionOutcome.failed

    def _enter_submitting(self) -> None:
        self._state = SubmissionState.submitting
        self._view.set_submit_enabled(False)
        self._view.set_submit_label(SUBMIT_LABEL_BUSY)
        self._view.set_status(STATUS_BOOKING)

    def _return_to_idle(self, kind: ErrorKind, message: str | None = None) -> None:
        self._last_result = self._state
        self._state = SubmissionState.idle
        self._fail(kind, message)
        self._view.set_submit_label(SUBMIT_LABEL)
        # a fetch still in flight re-enables submit when it finishes
        if self._availability.pending == 0:
            self._view.set_submit_enabled(True)

    def _fail(self, kind: ErrorKind, message: str | None = None) -> None:
        self._last_error = kind
        self._view.show_error(message or ERROR_MESSAGES[kind])


def _parse_body(model: type[ModelT], body: dict) -> ModelT:
    try:
        return model.model_validate(body)
    except ValidationError:
        return model()
