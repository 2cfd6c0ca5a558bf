"""
System clipboard access for Readloop's shells.

Shells out to whichever platform clipboard tool is installed. The core
never touches the clipboard; the CLI and tool server use this to copy an
entry's text out and to read pasted text in.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass

CLIPBOARD_TIMEOUT = 5


class ClipboardError(Exception):
    """Raised when the clipboard can't be read or written."""


@dataclass(frozen=True)
class ClipboardTool:
    name: str
    copy_cmd: list[str]
    paste_cmd: list[str]
    requires_env: str | None = None  # display variable the tool needs

    def available(self) -> bool:
        if self.requires_env and not os.environ.get(self.requires_env):
            return False
        return all(shutil.which(cmd[0]) for cmd in (self.copy_cmd, self.paste_cmd))


# Checked in order
CLIPBOARD_TOOLS = [
    ClipboardTool("wl-clipboard", ["wl-copy"], ["wl-paste", "--no-newline"], "WAYLAND_DISPLAY"),
    ClipboardTool("xclip", ["xclip", "-selection", "clipboard"],
                  ["xclip", "-selection", "clipboard", "-o"], "DISPLAY"),
    ClipboardTool("xsel", ["xsel", "--clipboard", "--input"],
                  ["xsel", "--clipboard", "--output"], "DISPLAY"),
    ClipboardTool("pbcopy", ["pbcopy"], ["pbpaste"]),
]


def find_tool() -> ClipboardTool | None:
    """Return the first usable clipboard tool, if any."""
    for tool in CLIPBOARD_TOOLS:
        if tool.available():
            return tool
    return None


def _require_tool() -> ClipboardTool:
    tool = find_tool()
    if tool is None:
        names = ", ".join(t.name for t in CLIPBOARD_TOOLS)
        raise ClipboardError(f"No clipboard tool found (tried: {names})")
    return tool


def copy_text(text: str) -> None:
    """Put text on the system clipboard."""
    tool = _require_tool()
    try:
        subprocess.run(
            tool.copy_cmd,
            input=text,
            text=True,
            check=True,
            capture_output=True,
            timeout=CLIPBOARD_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise ClipboardError(f"{tool.name} failed to copy: {e}") from e


def paste_text() -> str:
    """Read text from the system clipboard."""
    tool = _require_tool()
    try:
        result = subprocess.run(
            tool.paste_cmd,
            text=True,
            check=True,
            capture_output=True,
            timeout=CLIPBOARD_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise ClipboardError(f"{tool.name} failed to paste: {e}") from e
    return result.stdout
