"""
Tests for draft persistence keyed by hold token.
"""

from __future__ import annotations

import json
import tempfile
from datetime import timedelta

from fakes import T0, BrokenStorage, FakeClock

from app.application.use_cases.draft_store import DraftStore, restore_draft_fields
from app.domain.entities.booking_draft import FormValues
from app.domain.entities.hold import Hold
from app.infrastructure.store.json_draft_storage import JsonDraftStorage
from app.infrastructure.store.memory_draft_storage import MemoryDraftStorage


VALUES = FormValues(
    name="Jana Novak",
    phone="+420 777 000 111",
    email="jana@example.com",
    service="haircut",
    stylist="eva",
    date="2024-05-02",
    time="2024-05-02T10:00:00+02:00",
    notes="short please",
)


def test_round_trip_under_same_key():
    """Saving under K then loading under K reproduces every field."""
    store = DraftStore(storage=MemoryDraftStorage(), clock=FakeClock())
    store.save("booking_draft_tok1", VALUES)

    draft = store.load("booking_draft_tok1")

    assert draft is not None
    for name in ("name", "phone", "email", "service", "stylist", "date", "time", "notes"):
        assert getattr(draft, name) == getattr(VALUES, name)
    assert draft.saved_at == T0.isoformat()


def test_load_under_other_key_is_absent():
    store = DraftStore(storage=MemoryDraftStorage(), clock=FakeClock())
    store.save("booking_draft_tok1", VALUES)

    assert store.load("booking_draft_tok2") is None
    assert store.load("booking_draft_anon") is None


def test_key_for_hold_and_anonymous():
    store = DraftStore(storage=MemoryDraftStorage(), clock=FakeClock())
    hold = Hold(token="tok1", expires_at=T0 + timedelta(minutes=10))

    assert store.key_for(hold) == "booking_draft_tok1"
    assert store.key_for(None) == "booking_draft_anon"


def test_stored_record_uses_saved_at_camel_case():
    storage = MemoryDraftStorage()
    store = DraftStore(storage=storage, clock=FakeClock())
    store.save("k", VALUES)

    raw = json.loads(storage.get_item("k"))
    assert raw["savedAt"] == T0.isoformat()
    assert "saved_at" not in raw


def test_malformed_data_reads_as_absent():
    storage = MemoryDraftStorage()
    store = DraftStore(storage=storage, clock=FakeClock())

    storage.set_item("k1", "{not json")
    storage.set_item("k2", json.dumps(["a", "list"]))
    storage.set_item("k3", json.dumps({"name": 42}))

    assert store.load("k1") is None
    assert store.load("k2") is None
    assert store.load("k3") is None


def test_storage_failures_are_swallowed():
    store = DraftStore(storage=BrokenStorage(), clock=FakeClock())

    assert store.save("k", VALUES) is None
    assert store.load("k") is None
    store.clear("k")


def test_clear_removes_only_that_key():
    store = DraftStore(storage=MemoryDraftStorage(), clock=FakeClock())
    store.save("booking_draft_tok1", VALUES)
    store.save("booking_draft_anon", VALUES)

    store.clear("booking_draft_tok1")

    assert store.load("booking_draft_tok1") is None
    assert store.load("booking_draft_anon") is not None


def test_restore_skips_empty_fields():
    store = DraftStore(storage=MemoryDraftStorage(), clock=FakeClock())
    store.save("k", FormValues(name="Jana", notes=""))

    fields = restore_draft_fields(store.load("k"))

    assert fields == {"name": "Jana"}


def test_json_storage_persists_across_instances():
    """Drafts written to disk are readable by a fresh storage on the same directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        DraftStore(storage=JsonDraftStorage(data_dir=tmpdir), clock=FakeClock()).save("booking_draft_tok/../x", VALUES)

        reopened = DraftStore(storage=JsonDraftStorage(data_dir=tmpdir), clock=FakeClock())
        draft = reopened.load("booking_draft_tok/../x")

        assert draft is not None
        assert draft.email == "jana@example.com"

        reopened.clear("booking_draft_tok/../x")
        assert reopened.load("booking_draft_tok/../x") is None
