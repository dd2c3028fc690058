from __future__ import annotations

import asyncio
import json
from datetime import timedelta
from zoneinfo import ZoneInfo

from fakes import T0, FakeClock, ScriptedBackend

from app.application.dto.backend import HoldLookupResponse
from app.application.exceptions import BackendTransportError
from app.application.use_cases.booking_form_session import BookingFormSession
from app.application.utils.business_day import is_business_day, parse_form_date
from app.infrastructure.store.memory_draft_storage import MemoryDraftStorage
from app.infrastructure.view.recording_view import RecordingFormView


def _session(backend: ScriptedBackend, storage: MemoryDraftStorage | None = None):
    view = RecordingFormView()
    storage = storage or MemoryDraftStorage()
    clock = FakeClock()
    session = BookingFormSession(
        backend=backend,
        view=view,
        clock=clock,
        storage=storage,
        timezone=ZoneInfo("UTC"),
    )
    return session, view, storage, clock


def test_business_day_rules():
    assert parse_form_date("2024-05-06").weekday() == 0
    assert parse_form_date("06/05/2024") is None
    assert is_business_day("2024-05-06") is False
    assert is_business_day("2024-05-07") is True
    assert is_business_day("2024-05-05") is True
    assert is_business_day("") is False
    assert is_business_day("2024-05-07", closed_weekdays=(0, 1)) is False


def test_monday_date_change_clears_selector_without_fetch():
    async def scenario():
        backend = ScriptedBackend(slots=["2024-05-02T08:00:00Z"])
        session, view, _, _ = _session(backend)
        await session.on_date_changed("2024-05-02")
        assert view.time_values() == ["2024-05-02T08:00:00Z"]

        result = await session.on_date_changed("2024-05-06")

        assert result is None
        assert len(backend.availability_calls) == 1
        assert view.values.date == ""
        assert view.time_values() == []
        assert view.alerts == ["We are closed on Mondays. Please choose another date."]

    asyncio.run(scenario())


def test_date_change_fetches_with_token_and_service_then_saves_draft():
    async def scenario():
        backend = ScriptedBackend(
            hold=HoldLookupResponse(valid=True, token="tok1", expires_at=T0 + timedelta(minutes=5)),
            slots=["2024-05-02T08:00:00Z"],
        )
        session, view, storage, _ = _session(backend)
        await session.start("/book?t=tok1")
        view.set_field("service", "color")

        await session.on_date_changed("2024-05-02")

        assert backend.availability_calls == [("2024-05-02", "color", "tok1")]
        saved = json.loads(storage.get_item("booking_draft_tok1"))
        assert saved["date"] == "2024-05-02"
        assert saved["service"] == "color"
        assert storage.get_item("booking_draft_anon") is None
        session.close()

    asyncio.run(scenario())


def test_draft_saved_even_when_fetch_fails():
    async def scenario():
        backend = ScriptedBackend(availability_error=BackendTransportError("offline"))
        session, view, storage, _ = _session(backend)

        await session.on_date_changed("2024-05-02")

        assert view.error == "Unable to fetch available times. Try again."
        assert json.loads(storage.get_item("booking_draft_anon"))["date"] == "2024-05-02"

    asyncio.run(scenario())


def test_service_change_refetches_only_with_date():
    async def scenario():
        backend = ScriptedBackend(slots=[])
        session, view, _, _ = _session(backend)

        assert await session.on_service_changed() is None
        assert backend.availability_calls == []

        view.set_field("date", "2024-05-03")
        view.set_field("service", "nails")
        await session.on_service_changed()
        assert backend.availability_calls == [("2024-05-03", "nails", None)]

    asyncio.run(scenario())


def test_field_input_autosaves_under_effective_key():
    async def scenario():
        backend = ScriptedBackend()
        session, view, storage, _ = _session(backend)
        await session.start("/book")

        view.set_field("notes", "window seat")
        session.on_field_input()

        saved = json.loads(storage.get_item("booking_draft_anon"))
        assert saved["notes"] == "window seat"
        assert saved["savedAt"] == T0.isoformat()

    asyncio.run(scenario())


def test_hold_expiry_moves_drafts_to_anonymous_bucket():
    async def scenario():
        backend = ScriptedBackend(
            hold=HoldLookupResponse(valid=True, token="tok1", expires_at=T0 + timedelta(seconds=2)),
        )
        session, view, storage, clock = _session(backend)
        await session.start("/book?t=tok1")

        await clock.advance(2)
        assert session.hold is None
        assert view.error == "Your hold has expired. Please request a new booking link."

        view.set_field("notes", "after expiry")
        session.on_field_input()
        assert storage.get_item("booking_draft_anon") is not None

    asyncio.run(scenario())
