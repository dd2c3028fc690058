from __future__ import annotations

import logging
from dataclasses import fields, replace

from app.application.ports.form_view import FormViewPort
from app.domain.entities.booking_draft import FormValues
from app.domain.entities.messages import SUBMIT_LABEL
from app.domain.entities.slot_set import NO_SELECTION, TimeOption

_FIELD_NAMES = {f.name for f in fields(FormValues)}


class RecordingFormView(FormViewPort):
    """
    Headless form view that keeps the rendered state in memory.

    Used by the local console harness and the test suite; every rendering call
    is also kept in order so callers can inspect what the user would have seen.
    """

    def __init__(self, url: str = "/book", confirm_answer: bool = True) -> None:
        self.values = FormValues()
        self.time_options: list[TimeOption] = []
        self.status = ""
        self.error = ""
        self.submit_enabled = True
        self.submit_label = SUBMIT_LABEL
        self.timer_text = ""
        self.timer_history: list[str] = []
        self.alerts: list[str] = []
        self.confirmations: list[str] = []
        self.confirm_answer = confirm_answer
        self.url = url
        self.navigated_to: str | None = None
        self.events: list[tuple[str, object]] = []
        self._logger = logging.getLogger(__name__)

    def read_values(self) -> FormValues:
        return self.values

    def set_field(self, name: str, value: str) -> None:
        if name not in _FIELD_NAMES:
            raise ValueError(f"Unknown form field: {name}")
        if name == "time" and value != NO_SELECTION and value not in self.time_values():
            # a select keeps its value only when a matching option exists
            value = NO_SELECTION
        self.values = replace(self.values, **{name: value})
        self._record("field", (name, value))

    def set_time_options(self, options: list[TimeOption]) -> None:
        self.time_options = list(options)
        if self.values.time not in self.time_values():
            self.values = replace(self.values, time=NO_SELECTION)
        self._record("time_options", [o.value for o in options])

    def time_values(self) -> list[str]:
        return [o.value for o in self.time_options if o.value != NO_SELECTION]

    def set_status(self, message: str) -> None:
        self.status = message
        self._record("status", message)

    def show_error(self, message: str) -> None:
        self.error = message
        self.status = message
        self._record("error", message)

    def clear_error(self) -> None:
        self.error = ""
        self.status = ""
        self._record("clear_error", None)

    def set_submit_enabled(self, enabled: bool) -> None:
        self.submit_enabled = enabled
        self._record("submit_enabled", enabled)

    def set_submit_label(self, label: str) -> None:
        self.submit_label = label
        self._record("submit_label", label)

    def set_timer_text(self, text: str) -> None:
        self.timer_text = text
        self.timer_history.append(text)

    def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        self._record("confirm", message)
        return self.confirm_answer

    def alert(self, message: str) -> None:
        self.alerts.append(message)
        self._record("alert", message)

    def navigate(self, url: str) -> None:
        self.navigated_to = url
        self._record("navigate", url)

    def replace_url(self, url: str) -> None:
        self.url = url
        self._record("replace_url", url)

    def _record(self, kind: str, value: object) -> None:
        self.events.append((kind, value))
        self._logger.debug("view %s: %s", kind, value)
