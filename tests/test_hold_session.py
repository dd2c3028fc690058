from __future__ import annotations

import asyncio
from datetime import timedelta

from fakes import T0, FakeClock, ScriptedBackend

from app.application.dto.backend import HoldLookupResponse, PrefillSchema
from app.application.exceptions import BackendContractError, BackendStatusError, BackendTransportError
from app.application.use_cases.countdown_timer import CountdownTimer
from app.application.use_cases.draft_store import DraftStore
from app.application.use_cases.hold_session import HoldSession, strip_token, token_from_url
from app.domain.entities.booking_draft import FormValues
from app.domain.entities.session_state import ErrorKind, TimerState
from app.infrastructure.store.memory_draft_storage import MemoryDraftStorage
from app.infrastructure.view.recording_view import RecordingFormView


def _valid_hold(token: str = "tok1", seconds: int = 600) -> HoldLookupResponse:
    return HoldLookupResponse(
        valid=True,
        token=token,
        expires_at=T0 + timedelta(seconds=seconds),
        prefill=PrefillSchema(name="Jana", phone="+420777000111", email=None, service="haircut"),
    )


def _session(backend: ScriptedBackend, clock: FakeClock | None = None, storage: MemoryDraftStorage | None = None):
    clock = clock or FakeClock()
    view = RecordingFormView()
    drafts = DraftStore(storage=storage or MemoryDraftStorage(), clock=clock)
    timer = CountdownTimer(clock=clock, view=view)
    return HoldSession(backend=backend, view=view, timer=timer, drafts=drafts), view, timer, drafts, clock


def test_token_helpers():
    assert token_from_url("https://salon.example/book?t=abc&x=1") == "abc"
    assert token_from_url("/book?x=1") is None
    assert token_from_url("/book?t=") is None
    assert strip_token("https://salon.example/book?t=abc&x=1#form") == "https://salon.example/book?x=1#form"
    assert strip_token("/book?t=abc") == "/book"


def test_valid_token_acquires_hold():
    async def scenario():
        backend = ScriptedBackend(hold=_valid_hold())
        session, view, timer, _, _ = _session(backend)

        hold = await session.resolve_from_url("/book?t=tok1&lang=cs")

        assert hold is not None
        assert session.hold == hold
        assert hold.token == "tok1"
        assert backend.hold_calls == ["tok1"]
        assert view.url == "/book?lang=cs"
        assert ("replace_url", "/book?lang=cs") in view.events
        assert view.values.name == "Jana"
        assert view.values.service == "haircut"
        assert view.values.email == ""
        assert timer.state is TimerState.running
        assert view.timer_text == "10:00"
        assert session.draft_key == "booking_draft_tok1"
        assert session.invalid_link is False
        timer.stop()

    asyncio.run(scenario())


def test_invalid_link_conditions():
    """Non-2xx, valid:false, transport and contract failures all end as an invalid link."""
    async def scenario():
        cases = [
            ScriptedBackend(hold=HoldLookupResponse(valid=False)),
            ScriptedBackend(hold_error=BackendStatusError(404, "gone")),
            ScriptedBackend(hold_error=BackendTransportError("offline")),
            ScriptedBackend(hold_error=BackendContractError("bad body")),
            ScriptedBackend(hold=HoldLookupResponse(valid=True, token="tok1", expires_at=None)),
        ]
        for backend in cases:
            session, view, timer, _, _ = _session(backend)

            hold = await session.resolve_from_url("/book?t=tok1")

            assert hold is None
            assert session.hold is None
            assert session.invalid_link is True
            assert session.last_error is ErrorKind.invalid_link
            assert view.error.startswith("Booking link expired or invalid")
            assert timer.state is TimerState.idle
            assert len(backend.hold_calls) == 1
            assert view.url == "/book"

    asyncio.run(scenario())


def test_no_token_restores_anonymous_draft():
    async def scenario():
        storage = MemoryDraftStorage()
        backend = ScriptedBackend()
        session, view, _, drafts, _ = _session(backend, storage=storage)
        drafts.save("booking_draft_anon", FormValues(name="Anon", notes="hi"))

        hold = await session.resolve_from_url("/book")

        assert hold is None
        assert backend.hold_calls == []
        assert view.status.startswith("Open booking")
        assert view.values.name == "Anon"
        assert view.values.notes == "hi"
        assert session.invalid_link is False

    asyncio.run(scenario())


def test_token_draft_restored_without_anonymous_merge():
    async def scenario():
        storage = MemoryDraftStorage()
        backend = ScriptedBackend(hold=_valid_hold())
        session, view, timer, drafts, _ = _session(backend, storage=storage)
        drafts.save("booking_draft_anon", FormValues(notes="anonymous notes", stylist="eva"))
        drafts.save("booking_draft_tok1", FormValues(name="Draft Name", phone="+420111222333"))

        await session.resolve_from_url("/book?t=tok1")

        # draft overrides prefill, anonymous bucket is never consulted
        assert view.values.name == "Draft Name"
        assert view.values.phone == "+420111222333"
        assert view.values.service == "haircut"
        assert view.values.notes == ""
        assert view.values.stylist == ""
        timer.stop()

    asyncio.run(scenario())


def test_countdown_expiry_clears_hold():
    async def scenario():
        backend = ScriptedBackend(hold=_valid_hold(seconds=3))
        session, view, timer, _, clock = _session(backend)
        await session.resolve_from_url("/book?t=tok1")

        await clock.advance(3)

        assert session.hold is None
        assert session.last_error is ErrorKind.hold_expired
        assert view.error == "Your hold has expired. Please request a new booking link."
        assert view.timer_text == "expired"
        assert session.draft_key == "booking_draft_anon"
        assert backend.hold_calls == ["tok1"]

    asyncio.run(scenario())


def test_hold_already_expired_on_load():
    async def scenario():
        storage = MemoryDraftStorage()
        backend = ScriptedBackend(hold=_valid_hold(seconds=-30))
        session, view, timer, drafts, _ = _session(backend, storage=storage)
        drafts.save("booking_draft_anon", FormValues(notes="from before"))

        hold = await session.resolve_from_url("/book?t=tok1")

        assert hold is None
        assert session.hold is None
        assert session.invalid_link is False
        assert session.last_error is ErrorKind.hold_expired
        assert view.error == "Your hold has expired. Please request a new booking link."
        assert view.timer_text == "expired"
        assert timer.state is TimerState.expired
        assert session.draft_key == "booking_draft_anon"
        assert view.values.notes == "from before"

    asyncio.run(scenario())
