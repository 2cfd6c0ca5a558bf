from datetime import timezone

import pytest
from pydantic import ValidationError

from readloop.entry import Entry, clean_text, make_preview


def test_preview_keeps_first_three_lines():
    assert make_preview("Hello\nWorld\nFoo\nBar") == "Hello\nWorld\nFoo"


def test_preview_uses_all_lines_when_fewer_than_three():
    assert make_preview("Hi") == "Hi"
    assert make_preview("one\ntwo") == "one\ntwo"


def test_preview_normalizes_other_line_breaks_to_newline():
    assert make_preview("a\r\nb\rc\u2028d") == "a\nb\nc"


def test_preview_keeps_blank_lines():
    assert make_preview("a\n\nb\nc") == "a\n\nb"


def test_preview_respects_custom_line_count():
    assert make_preview("a\nb\nc", lines=1) == "a"


def test_preview_rejects_zero_lines():
    with pytest.raises(ValueError):
        make_preview("a", lines=0)


def test_new_entry_derives_fields_once():
    entry = Entry.new("Hello\nWorld\nFoo\nBar")

    assert entry.text == "Hello\nWorld\nFoo\nBar"
    assert entry.preview_text == "Hello\nWorld\nFoo"
    assert entry.id
    assert entry.date_created.tzinfo == timezone.utc
    assert entry.line_count == 4


def test_new_entries_get_distinct_ids():
    ids = {Entry.new("x").id for _ in range(200)}
    assert len(ids) == 200


def test_entry_is_immutable():
    entry = Entry.new("text")
    with pytest.raises(ValidationError):
        entry.text = "changed"


def test_dump_uses_persisted_key_names():
    entry = Entry.new("text")
    data = entry.model_dump(by_alias=True)
    assert set(data) == {"id", "text", "previewText", "dateCreated"}


def test_validates_from_persisted_key_names_and_ignores_extras():
    entry = Entry.model_validate({
        "id": "abc",
        "text": "t",
        "previewText": "t",
        "dateCreated": "2025-03-21T10:00:00Z",
        "pinned": True,
    })
    assert entry.id == "abc"
    assert entry.preview_text == "t"


def test_clean_text_replaces_undecodable_bytes():
    # b"ok\xff" decoded with surrogateescape, as argv and stdin do
    assert clean_text("ok\udcff") == "ok\ufffd"


def test_clean_text_replaces_stray_surrogates():
    assert "\ud800" not in clean_text("a\ud800b")
    clean_text("a\ud800b").encode("utf-8")


def test_clean_text_leaves_normal_text_alone():
    assert clean_text("héllo\nwörld ✓") == "héllo\nwörld ✓"
