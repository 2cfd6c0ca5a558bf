from datetime import datetime, timezone

from readloop.entry import Entry
from readloop.surfacing import format_entries, format_entry, format_id


def make_entry(text, entry_id="1b4e28ba-2fa1-11d2-883f-0016d3cca427"):
    return Entry(
        id=entry_id,
        text=text,
        preview_text="\n".join(text.split("\n")[:3]),
        date_created=datetime(2025, 3, 21, 9, 30, tzinfo=timezone.utc),
    )


def test_format_id_uses_first_group():
    assert format_id("1b4e28ba-2fa1-11d2-883f-0016d3cca427") == "1b4e28ba"


def test_format_entries_empty():
    assert format_entries([]) == "No saved texts."


def test_format_entries_numbers_from_one_and_shows_preview_lines():
    out = format_entries([make_entry("Hello\nWorld\nFoo\nBar\nBaz"), make_entry("Hi", "ffff0000-aaaa")])
    lines = out.split("\n")

    assert lines[0] == "━━━ LIBRARY (2) ━━━"
    assert any(line.startswith("   1  1b4e28ba") and line.endswith("Hello") for line in lines)
    assert any(line.strip() == "World" for line in lines)
    assert any(line.strip() == "… +2 more lines" for line in lines)
    assert any(line.startswith("   2  ffff0000") and line.endswith("Hi") for line in lines)
    assert "Bar" not in out


def test_format_entry_shows_full_text():
    out = format_entry(make_entry("Hello\nWorld\nFoo\nBar"), position=1)

    assert out.startswith("#1  1b4e28ba-2fa1-11d2-883f-0016d3cca427")
    assert out.endswith("Hello\nWorld\nFoo\nBar")
