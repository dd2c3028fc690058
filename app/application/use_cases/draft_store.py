from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from typing import Any

from app.application.ports.clock import ClockPort
from app.application.ports.draft_storage import DraftStoragePort
from app.domain.entities.booking_draft import BookingDraft, FormValues
from app.domain.entities.hold import Hold

ANONYMOUS_SUFFIX = "anon"

_DRAFT_FIELDS = tuple(f.name for f in fields(BookingDraft) if f.name != "saved_at")


class DraftStore:
    """
    Best-effort persistence of in-progress form values.

    Drafts are a convenience: storage errors are logged and swallowed, a
    malformed record reads as no draft.
    """

    def __init__(self, storage: DraftStoragePort, clock: ClockPort, key_prefix: str = "booking_draft_") -> None:
        self._storage = storage
        self._clock = clock
        self._key_prefix = key_prefix
        self._logger = logging.getLogger(__name__)

    def key_for(self, hold: Hold | None) -> str:
        if hold is not None and hold.token:
            return self._key_prefix + hold.token
        return self._key_prefix + ANONYMOUS_SUFFIX

    def save(self, key: str, values: FormValues) -> BookingDraft | None:
        draft = BookingDraft.from_values(values, saved_at=self._clock.now().isoformat())
        data = asdict(draft)
        data["savedAt"] = data.pop("saved_at")
        try:
            self._storage.set_item(key, json.dumps(data, ensure_ascii=False))
        except Exception as e:
            self._logger.warning("draft save failed", extra={"draft_key": key, "error": str(e)})
            return None
        return draft

    def load(self, key: str) -> BookingDraft | None:
        try:
            raw = self._storage.get_item(key)
        except Exception as e:
            self._logger.warning("draft load failed", extra={"draft_key": key, "error": str(e)})
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            self._logger.warning("draft load failed", extra={"draft_key": key, "error": str(e)})
            return None
        return _draft_from_dict(data)

    def clear(self, key: str) -> None:
        try:
            self._storage.remove_item(key)
        except Exception as e:
            self._logger.warning("draft clear failed", extra={"draft_key": key, "error": str(e)})


def _draft_from_dict(data: Any) -> BookingDraft | None:
    if not isinstance(data, dict):
        return None
    values: dict[str, str] = {}
    for name in _DRAFT_FIELDS:
        value = data.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            return None
        values[name] = value
    saved_at = data.get("savedAt")
    return BookingDraft(**values, saved_at=saved_at if isinstance(saved_at, str) else None)


def restore_draft_fields(draft: BookingDraft) -> dict[str, str]:
    """Fields worth writing back onto the form: empty stored values never overwrite."""
    return {name: getattr(draft, name) for name in _DRAFT_FIELDS if getattr(draft, name)}
