"""
Configuration management for Readloop.

Uses XDG base directories:
- Config: ~/.config/readloop/config.toml
- Data: ~/.local/share/readloop/ (the slot database)
"""

from pathlib import Path
from typing import Any
import os

# XDG defaults
DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_DATA_HOME = Path.home() / ".local" / "share"

# Well-known key of the slot holding the whole entry collection
DEFAULT_STORE_KEY = "savedTexts"
DEFAULT_PREVIEW_LINES = 3
DB_FILENAME = "readloop.db"


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/readloop)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", DEFAULT_CONFIG_HOME))
    return base / "readloop"


def get_readloop_home() -> Path:
    """Get the data directory (READLOOP_HOME or XDG_DATA_HOME/readloop)."""
    if env_home := os.environ.get("READLOOP_HOME"):
        return Path(env_home)
    base = Path(os.environ.get("XDG_DATA_HOME", DEFAULT_DATA_HOME))
    return base / "readloop"


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / "config.toml"


def get_db_path() -> Path:
    """Get the path to readloop.db."""
    return get_readloop_home() / DB_FILENAME


def load_config() -> dict[str, Any]:
    """
    Load configuration from config.toml.

    Values from the file are layered over the defaults one section at a
    time, so a file that only sets `[logging] level` keeps the default
    store key. Returns the defaults if the file doesn't exist.
    """
    config = get_default_config()
    config_path = get_config_path()

    if not config_path.exists():
        return config

    # Lazy import tomli only when needed
    import tomli

    with open(config_path, "rb") as f:
        loaded = tomli.load(f)

    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values

    return config


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "readloop": {
            "home": str(get_readloop_home()),
        },
        "store": {
            "key": DEFAULT_STORE_KEY,
            "preview_lines": DEFAULT_PREVIEW_LINES,
        },
        "logging": {
            "level": "WARNING",
        },
    }


def get_log_level(config: dict[str, Any] | None = None) -> str:
    """Resolve the log level (READLOOP_LOG_LEVEL wins over config)."""
    if env_level := os.environ.get("READLOOP_LOG_LEVEL"):
        return env_level.upper()
    config = config or load_config()
    return str(config.get("logging", {}).get("level", "WARNING")).upper()


def resolve_db_path(config: dict[str, Any] | None = None) -> Path:
    """Get the slot database path, honouring `[readloop] home` in config."""
    config = config or load_config()
    if home := config.get("readloop", {}).get("home"):
        return Path(home).expanduser() / DB_FILENAME
    return get_db_path()
