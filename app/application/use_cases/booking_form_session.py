from __future__ import annotations

import logging
from collections.abc import Iterable
from zoneinfo import ZoneInfo

from app.application.ports.booking_backend import BookingBackendPort
from app.application.ports.clock import ClockPort
from app.application.ports.draft_storage import DraftStoragePort
from app.application.ports.form_view import FormViewPort
from app.application.use_cases.availability import AvailabilityClient
from app.application.use_cases.countdown_timer import CountdownTimer
from app.application.use_cases.draft_store import DraftStore
from app.application.use_cases.hold_session import HoldSession
from app.application.use_cases.submission import SubmissionController
from app.application.utils.business_day import parse_form_date
from app.domain.entities.hold import Hold
from app.domain.entities.session_state import SubmissionOutcome
from app.domain.entities.slot_set import SlotSet


class BookingFormSession:
    """
    One page load of the booking form.

    Wires form events (load, date/service change, field input, submit) to the
    hold session, availability client, draft store and submission controller.
    """

    def __init__(
        self,
        backend: BookingBackendPort,
        view: FormViewPort,
        clock: ClockPort,
        storage: DraftStoragePort,
        timezone: ZoneInfo,
        draft_key_prefix: str = "booking_draft_",
        confirmation_base_url: str = "thanks.html",
        closed_weekdays: Iterable[int] = (0,),
        tick_seconds: float = 1.0,
        discard_stale: bool = True,
    ) -> None:
        self._backend = backend
        self._view = view
        self._closed_weekdays = tuple(closed_weekdays)
        self._logger = logging.getLogger(__name__)

        self.drafts = DraftStore(storage=storage, clock=clock, key_prefix=draft_key_prefix)
        self.timer = CountdownTimer(clock=clock, view=view, tick_seconds=tick_seconds)
        self.availability = AvailabilityClient(
            backend=backend,
            view=view,
            timezone=timezone,
            discard_stale=discard_stale,
        )
        self.hold_session = HoldSession(backend=backend, view=view, timer=self.timer, drafts=self.drafts)
        self.submission = SubmissionController(
            backend=backend,
            view=view,
            session=self.hold_session,
            availability=self.availability,
            drafts=self.drafts,
            confirmation_base_url=confirmation_base_url,
            closed_weekdays=self._closed_weekdays,
        )

    @property
    def hold(self) -> Hold | None:
        return self.hold_session.hold

    async def start(self, url: str) -> Hold | None:
        return await self.hold_session.resolve_from_url(url)

    async def on_date_changed(self, date: str | None = None) -> SlotSet | None:
        value = self._view.read_values().date if date is None else date
        if not value:
            return None
        parsed = parse_form_date(value)
        if parsed is not None and parsed.weekday() in self._closed_weekdays:
            self.submission.reject_closed_day()
            return None
        if date is not None:
            self._view.set_field("date", value)
        result = await self._fetch(value)
        self.save_draft()
        return result

    async def on_service_changed(self) -> SlotSet | None:
        value = self._view.read_values().date
        if not value:
            return None
        return await self._fetch(value)

    def on_field_input(self) -> None:
        self.save_draft()

    def save_draft(self) -> None:
        self.drafts.save(self.hold_session.draft_key, self._view.read_values())

    async def submit(self) -> SubmissionOutcome:
        return await self.submission.submit()

    def close(self) -> None:
        self.timer.stop()

    async def aclose(self) -> None:
        """Stop the countdown and close the backend the session was built with."""
        self.close()
        await self._backend.aclose()

    async def _fetch(self, date: str) -> SlotSet:
        hold = self.hold_session.hold
        return await self.availability.fetch_slots(
            date=date,
            service=self._view.read_values().service,
            token=hold.token if hold else None,
        )
