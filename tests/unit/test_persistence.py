import json
from datetime import datetime, timezone

from readloop.entry import Entry
from readloop.kv import InMemorySlot
from readloop.persistence import PersistenceGateway
from tests.helpers.fakes import FailingSlot, RecordingMetrics


def make_gateway(slot=None):
    metrics = RecordingMetrics()
    return PersistenceGateway(slot or InMemorySlot(), key="savedTexts", metrics=metrics), metrics


def test_load_returns_what_save_wrote_in_order():
    gateway, _ = make_gateway()
    entries = [Entry.new("first\nline two"), Entry.new("second"), Entry.new("a\nb\nc\nd")]

    assert gateway.save(entries) is True

    assert gateway.load() == entries


def test_save_writes_persisted_layout():
    slot = InMemorySlot()
    gateway, _ = make_gateway(slot)
    entry = Entry(
        id="6F1E0B6C-0000-4000-8000-000000000001",
        text="Hello\nWorld",
        preview_text="Hello\nWorld",
        date_created=datetime(2025, 3, 21, 9, 30, tzinfo=timezone.utc),
    )

    gateway.save([entry])

    data = json.loads(slot.get("savedTexts"))
    assert data == [{
        "id": "6F1E0B6C-0000-4000-8000-000000000001",
        "text": "Hello\nWorld",
        "previewText": "Hello\nWorld",
        "dateCreated": "2025-03-21T09:30:00Z",
    }]


def test_save_overwrites_previous_collection():
    gateway, _ = make_gateway()
    gateway.save([Entry.new("a"), Entry.new("b")])
    only = Entry.new("c")

    gateway.save([only])

    assert gateway.load() == [only]


def test_load_missing_slot_is_empty():
    gateway, metrics = make_gateway()

    assert gateway.load() == []
    assert metrics.increments == []


def test_load_malformed_blob_is_empty_and_preserved():
    slot = InMemorySlot({"savedTexts": b"{not json"})
    gateway, metrics = make_gateway(slot)

    assert gateway.load() == []
    assert metrics.names == ["persistence.decode_failure"]
    assert slot.get("savedTexts.corrupt") == b"{not json"


def test_load_incompatible_shape_is_empty():
    slot = InMemorySlot({"savedTexts": json.dumps([{"id": "x", "body": "old"}]).encode()})
    gateway, metrics = make_gateway(slot)

    assert gateway.load() == []
    assert metrics.names == ["persistence.decode_failure"]


def test_load_non_utf8_blob_is_empty():
    gateway, _ = make_gateway(InMemorySlot({"savedTexts": b"\xff\xfe\x00"}))

    assert gateway.load() == []


def test_load_read_failure_is_empty():
    gateway, metrics = make_gateway(FailingSlot(fail_get=True))

    assert gateway.load() == []
    assert metrics.names == ["persistence.read_failure"]


def test_save_write_failure_is_swallowed():
    gateway, metrics = make_gateway(FailingSlot(fail_set=True))

    assert gateway.save([Entry.new("text")]) is False
    assert metrics.names == ["persistence.write_failure"]


def test_save_encode_failure_is_swallowed(monkeypatch):
    slot = InMemorySlot({"savedTexts": b"[]"})
    gateway, metrics = make_gateway(slot)

    def broken_encode(entries):
        raise ValueError("cannot encode")

    monkeypatch.setattr(gateway, "encode", broken_encode)

    assert gateway.save([Entry.new("text")]) is False
    assert metrics.names == ["persistence.encode_failure"]
    assert slot.get("savedTexts") == b"[]"


def test_failures_are_logged(caplog):
    gateway, _ = make_gateway(InMemorySlot({"savedTexts": b"garbage"}))

    with caplog.at_level("WARNING", logger="readloop.persistence"):
        gateway.load()

    assert "undecodable" in caplog.text


def test_transaction_without_lock_still_runs_the_block():
    gateway, metrics = make_gateway(FailingSlot(fail_lock=True))
    ran = []

    with gateway.transaction():
        ran.append(gateway.save([Entry.new("text")]))

    assert ran == [True]
    assert gateway.last_save_ok is True
    assert metrics.names == ["persistence.lock_failure"]


def test_failed_commit_marks_save_not_persisted():
    gateway, metrics = make_gateway(FailingSlot(fail_commit=True))

    with gateway.transaction():
        assert gateway.save([Entry.new("text")]) is True

    assert gateway.last_save_ok is False
    assert metrics.names == ["persistence.write_failure"]


def test_fetch_separates_unreadable_from_empty():
    unreadable, _ = make_gateway(FailingSlot(fail_get=True))
    missing, _ = make_gateway()

    assert unreadable.fetch() is None
    assert missing.fetch() == []
