from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from zoneinfo import ZoneInfo

from app.application.exceptions import BackendError
from app.application.ports.booking_backend import BookingBackendPort
from app.application.ports.form_view import FormViewPort
from app.domain.entities.messages import (
    ERROR_MESSAGES,
    PLACEHOLDER_CHOOSE,
    PLACEHOLDER_NONE,
    STATUS_CHECKING,
    STATUS_SLOTS_UPDATED,
)
from app.domain.entities.session_state import ErrorKind
from app.domain.entities.slot_set import NO_SELECTION, SlotSet, TimeOption


def slot_label(iso_value: str, timezone: ZoneInfo) -> str:
    try:
        moment = datetime.fromisoformat(iso_value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return iso_value
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone)
    return moment.strftime("%H:%M")


def build_time_options(slots: Iterable[str], timezone: ZoneInfo) -> list[TimeOption]:
    options = [TimeOption(value=NO_SELECTION, label=PLACEHOLDER_CHOOSE)]
    slot_list = list(slots)
    if not slot_list:
        options.append(TimeOption(value=NO_SELECTION, label=PLACEHOLDER_NONE))
        return options
    for slot in slot_list:
        options.append(TimeOption(value=slot, label=slot_label(slot, timezone)))
    return options


class AvailabilityClient:
    """
    Owns the current SlotSet and keeps the time selector in sync with it.

    Each fetch gets a sequence number. When discard_stale is set, a response
    older than the last applied one is dropped; otherwise whichever response
    arrives last wins.

    Submit is re-enabled once no fetch is pending, and only when the submit
    gate allows it. The submission controller installs the gate.
    """

    def __init__(
        self,
        backend: BookingBackendPort,
        view: FormViewPort,
        timezone: ZoneInfo,
        discard_stale: bool = True,
    ) -> None:
        self._backend = backend
        self._view = view
        self._timezone = timezone
        self._discard_stale = discard_stale
        self._current = SlotSet()
        self._issued = 0
        self._pending = 0
        self._submit_gate: Callable[[], bool] = lambda: True
        self._last_error: ErrorKind | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def current(self) -> SlotSet:
        return self._current

    @property
    def last_error(self) -> ErrorKind | None:
        return self._last_error

    @property
    def pending(self) -> int:
        return self._pending

    def set_submit_gate(self, gate: Callable[[], bool]) -> None:
        self._submit_gate = gate

    async def fetch_slots(self, date: str, service: str, token: str | None) -> SlotSet:
        self._view.clear_error()
        self._issued += 1
        seq = self._issued
        self._pending += 1
        self._view.set_submit_enabled(False)
        self._view.set_status(STATUS_CHECKING)
        try:
            slots = await self._backend.fetch_availability(date=date, service=service, token=token)
        except BackendError as e:
            self._logger.error(
                "Could not load slots",
                extra={"date": date, "service": service, "seq": seq, "error": str(e)},
            )
            result = SlotSet(seq=seq)
            if self._apply(result):
                self._last_error = ErrorKind.availability_fetch_failed
                self._view.show_error(ERROR_MESSAGES[ErrorKind.availability_fetch_failed])
            self._finish()
            return result

        result = SlotSet(slots=tuple(slots), seq=seq)
        if self._apply(result):
            self._last_error = None
            self._view.set_status(STATUS_SLOTS_UPDATED)
        self._finish()
        return result

    def apply_alternatives(self, slots: Iterable[str]) -> SlotSet:
        """Replace the SlotSet with server-suggested alternatives (409 at submit)."""
        self._issued += 1
        result = SlotSet(slots=tuple(slots), seq=self._issued)
        self._apply(result)
        return result

    def clear(self) -> SlotSet:
        return self.apply_alternatives(())

    def _apply(self, result: SlotSet) -> bool:
        if self._discard_stale and result.seq < self._current.seq:
            self._logger.debug(
                "Discarding stale availability response",
                extra={"seq": result.seq},
            )
            return False
        self._current = result
        self._view.set_time_options(build_time_options(result.slots, self._timezone))
        return True

    def _finish(self) -> None:
        self._pending -= 1
        if self._pending <= 0:
            self._pending = 0
            if self._submit_gate():
                self._view.set_submit_enabled(True)
