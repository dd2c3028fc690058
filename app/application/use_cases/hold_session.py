from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from app.application.dto.backend import HoldLookupResponse
from app.application.exceptions import BackendError
from app.application.ports.booking_backend import BookingBackendPort
from app.application.ports.form_view import FormViewPort
from app.application.use_cases.countdown_timer import CountdownTimer
from app.application.use_cases.draft_store import DraftStore, restore_draft_fields
from app.domain.entities.hold import Hold, Prefill
from app.domain.entities.messages import ERROR_MESSAGES, STATUS_OPEN_BOOKING, STATUS_VALIDATING_LINK
from app.domain.entities.session_state import ErrorKind

TOKEN_PARAM = "t"


def token_from_url(url: str) -> str | None:
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == TOKEN_PARAM:
            return value or None
    return None


def strip_token(url: str) -> str:
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != TOKEN_PARAM]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def hold_from_response(data: HoldLookupResponse, requested_token: str) -> Hold | None:
    if not data.valid or data.expires_at is None:
        return None
    prefill = data.prefill
    return Hold(
        token=data.token or requested_token,
        expires_at=data.expires_at,
        prefill=Prefill(
            name=prefill.name,
            phone=prefill.phone,
            email=prefill.email,
            service=prefill.service,
        )
        if prefill
        else Prefill(),
    )


class HoldSession:
    """Owns the active Hold and ties the countdown and draft key to it."""

    def __init__(
        self,
        backend: BookingBackendPort,
        view: FormViewPort,
        timer: CountdownTimer,
        drafts: DraftStore,
    ) -> None:
        self._backend = backend
        self._view = view
        self._timer = timer
        self._drafts = drafts
        self._hold: Hold | None = None
        self._invalid_link = False
        self._last_error: ErrorKind | None = None
        self._logger = logging.getLogger(__name__)
        self._timer.set_on_expire(self.expire)

    @property
    def hold(self) -> Hold | None:
        return self._hold

    @property
    def draft_key(self) -> str:
        return self._drafts.key_for(self._hold)

    @property
    def invalid_link(self) -> bool:
        return self._invalid_link

    @property
    def last_error(self) -> ErrorKind | None:
        return self._last_error

    async def resolve_from_url(self, url: str) -> Hold | None:
        token = token_from_url(url)
        if not token:
            self._view.set_status(STATUS_OPEN_BOOKING)
            self.restore_draft()
            return None

        self._view.set_status(STATUS_VALIDATING_LINK)
        hold: Hold | None = None
        try:
            data = await self._backend.lookup_hold(token)
            hold = hold_from_response(data, token)
        except BackendError as e:
            self._logger.error("Hold not available", extra={"token": token, "error": str(e)})

        if hold is None:
            self._invalid_link = True
            self._last_error = ErrorKind.invalid_link
            self._view.show_error(ERROR_MESSAGES[ErrorKind.invalid_link])
            return None

        self._activate(hold)
        self._view.replace_url(strip_token(url))
        self.restore_draft()
        return self._hold

    def expire(self) -> None:
        if self._hold is not None:
            self._logger.info("Hold expired", extra={"token": self._hold.token})
        self._hold = None
        self._last_error = ErrorKind.hold_expired
        self._view.show_error(ERROR_MESSAGES[ErrorKind.hold_expired])

    def restore_draft(self) -> None:
        draft = self._drafts.load(self.draft_key)
        if draft is None:
            return
        for name, value in restore_draft_fields(draft).items():
            self._view.set_field(name, value)
        self._logger.info("Draft restored", extra={"draft_key": self.draft_key})

    def _activate(self, hold: Hold) -> None:
        self._hold = hold
        for name in ("name", "phone", "email", "service"):
            value = getattr(hold.prefill, name)
            if value:
                self._view.set_field(name, value)
        self._logger.info("Hold acquired", extra={"token": hold.token})
        self._timer.start(hold.expires_at)
