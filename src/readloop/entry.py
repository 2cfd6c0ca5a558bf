"""
Entry model for Readloop.

One saved block of text plus its derived preview and creation timestamp.
"""

import re
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from readloop.config import DEFAULT_PREVIEW_LINES

# \r\n counts as a single boundary; the rest are the Unicode line separators.
# Splitting each character separately would turn "a\r\nb" into ["a", "", "b"].
LINE_BREAK = re.compile(r"\r\n|[\n\v\f\r\x85\u2028\u2029]")


def make_preview(text: str, lines: int = DEFAULT_PREVIEW_LINES) -> str:
    """Return the first `lines` lines of text, rejoined with newlines."""
    if lines < 1:
        raise ValueError(f"Preview needs at least one line, got {lines}")
    return "\n".join(LINE_BREAK.split(text)[:lines])


def clean_text(text: str) -> str:
    """
    Replace lone surrogates so text always encodes as UTF-8.

    Undecodable bytes from argv or stdin arrive as surrogate escapes;
    each becomes one U+FFFD. Other stray surrogates are replaced too.
    """
    try:
        raw = text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        raw = text.encode("utf-8", "surrogatepass")
    return raw.decode("utf-8", "replace")


def generate_id() -> str:
    """Generate a unique entry ID (random UUID4)."""
    return str(uuid.uuid4())


class Entry(BaseModel):
    """
    A saved note.

    Immutable once built. The persisted form uses the camelCase keys
    `id`, `text`, `previewText` and `dateCreated`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1, description="Unique identifier, never reused")
    text: str = Field(description="Full body as typed or pasted")
    preview_text: str = Field(alias="previewText", description="First lines of text")
    date_created: datetime = Field(alias="dateCreated", description="Creation time")

    @classmethod
    def new(cls, text: str, preview_lines: int = DEFAULT_PREVIEW_LINES) -> "Entry":
        """
        Build a fresh entry from text.

        This is where the id is minted, the timestamp taken and the
        preview derived; nothing recomputes them afterwards.
        """
        return cls(
            id=generate_id(),
            text=text,
            preview_text=make_preview(text, preview_lines),
            date_created=datetime.now(timezone.utc),
        )

    @property
    def line_count(self) -> int:
        """Number of lines in the full text."""
        return len(LINE_BREAK.split(self.text))
