import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point config and data dirs at a temp dir for every test."""
    home = tmp_path / "readloop-home"
    monkeypatch.setenv("READLOOP_HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("READLOOP_LOG_LEVEL", raising=False)
    return home
