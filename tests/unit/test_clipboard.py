import subprocess

import pytest

from readloop import clipboard


@pytest.fixture
def only_xclip(monkeypatch):
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
    monkeypatch.setenv("DISPLAY", ":0")
    monkeypatch.setattr(
        clipboard.shutil, "which",
        lambda name: f"/usr/bin/{name}" if name == "xclip" else None,
    )


def test_find_tool_skips_tools_without_display(only_xclip):
    assert clipboard.find_tool().name == "xclip"


def test_find_tool_none(monkeypatch):
    monkeypatch.setattr(clipboard.shutil, "which", lambda name: None)

    assert clipboard.find_tool() is None
    with pytest.raises(clipboard.ClipboardError):
        clipboard.copy_text("x")


def test_copy_pipes_text_to_tool(only_xclip, monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs.get("input")))
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(clipboard.subprocess, "run", fake_run)

    clipboard.copy_text("line 1\nline 2")

    assert calls == [(["xclip", "-selection", "clipboard"], "line 1\nline 2")]


def test_paste_returns_tool_output(only_xclip, monkeypatch):
    monkeypatch.setattr(
        clipboard.subprocess, "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, "pasted", ""),
    )

    assert clipboard.paste_text() == "pasted"


def test_tool_failure_becomes_clipboard_error(only_xclip, monkeypatch):
    def fail(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(clipboard.subprocess, "run", fail)

    with pytest.raises(clipboard.ClipboardError):
        clipboard.paste_text()
