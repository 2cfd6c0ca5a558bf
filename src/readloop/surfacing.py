"""
Surfacing module for Readloop.

Terminal rendering of saved entries.
"""

import os
from datetime import datetime

from readloop.entry import Entry


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    GREEN = "\033[32m"
    BLUE = "\033[34m"
    WHITE = "\033[37m"

    BRIGHT_BLACK = "\033[90m"  # Gray
    BRIGHT_CYAN = "\033[96m"

    @classmethod
    def enabled(cls) -> bool:
        """Check if colors should be enabled."""
        if os.environ.get("NO_COLOR"):
            return False
        return True


def c(text: str, *codes: str) -> str:
    """Apply color codes to text if colors are enabled."""
    if not Colors.enabled():
        return text
    return "".join(codes) + text + Colors.RESET


def format_id(entry_id: str) -> str:
    """Short form of an entry ID (first UUID group)."""
    return entry_id.split("-", 1)[0][:8]


def format_date(value: datetime) -> str:
    """Render a creation timestamp in local time."""
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def format_entries(entries: list[Entry]) -> str:
    """Format entries as a numbered list of previews."""
    if not entries:
        return c("No saved texts.", Colors.DIM)

    lines = []
    lines.append(c(f"━━━ LIBRARY ({len(entries)}) ━━━", Colors.BOLD, Colors.BLUE))
    lines.append("")

    lines.append(c(f"{'#':>4}  {'ID':8}  {'SAVED':16}  PREVIEW", Colors.DIM))
    lines.append(c("─" * 70, Colors.DIM))

    indent = " " * (4 + 2 + 8 + 2 + 16 + 2)
    for position, entry in enumerate(entries, start=1):
        seq_str = c(f"{position:>4}", Colors.BOLD, Colors.WHITE)
        id_str = c(f"{format_id(entry.id):8}", Colors.DIM)
        date_str = c(f"{format_date(entry.date_created):16}", Colors.BRIGHT_BLACK)

        preview = entry.preview_text.split("\n")
        lines.append(f"{seq_str}  {id_str}  {date_str}  {preview[0][:42]}")
        for more in preview[1:]:
            lines.append(f"{indent}{more[:42]}")

        hidden = entry.line_count - len(preview)
        if hidden > 0:
            lines.append(c(f"{indent}… +{hidden} more lines", Colors.DIM))

    return "\n".join(lines)


def format_entry(entry: Entry, position: int | None = None) -> str:
    """Format one entry with its full text."""
    header = f"#{position}  " if position is not None else ""
    lines = [
        c(f"{header}{entry.id}", Colors.BOLD, Colors.BRIGHT_CYAN),
        c(f"Saved {format_date(entry.date_created)}", Colors.DIM),
        "",
        entry.text,
    ]
    return "\n".join(lines)
