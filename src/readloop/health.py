"""
Health check module for Readloop.

Reports status of config, storage and clipboard.
"""

from readloop.clipboard import find_tool
from readloop.config import (
    DEFAULT_STORE_KEY,
    get_config_path,
    get_default_config,
    load_config,
    resolve_db_path,
)
from readloop.kv import SlotError, SqliteSlot
from readloop.persistence import PersistenceGateway


def check_config() -> tuple[str, str]:
    """Check config file status."""
    config_path = get_config_path()
    if not config_path.exists():
        return "-", "Defaults (no config.toml)"

    try:
        load_config()
        return "✓", f"OK ({config_path})"
    except Exception as e:
        return "✗", f"Error: {e}"


def check_storage() -> tuple[str, str]:
    """Check that the saved collection is present and decodes."""
    try:
        config = load_config()
    except Exception:
        config = get_default_config()

    db_path = resolve_db_path(config)
    if not db_path.exists():
        return "✓", "Empty (nothing saved yet)"

    key = config.get("store", {}).get("key", DEFAULT_STORE_KEY)
    slot = SqliteSlot(db_path)

    try:
        blob = slot.get(key)
    except SlotError as e:
        return "✗", f"Error: {e}"

    if blob is None:
        return "✓", "Empty (nothing saved yet)"

    gateway = PersistenceGateway(slot, key=key)
    try:
        entries = gateway.decode(blob)
    except ValueError:
        return "✗", "Saved data is unreadable and will be discarded on next start"

    status = f"OK ({len(entries)} entries)"
    try:
        if gateway.corrupt_key in slot.keys():
            return "!", f"{status}, corrupt backup at {gateway.corrupt_key!r}"
    except SlotError:
        pass
    return "✓", status


def check_clipboard() -> tuple[str, str]:
    """Check clipboard tool availability."""
    tool = find_tool()
    if tool is None:
        return "!", "No clipboard tool (copy/paste unavailable)"
    return "✓", f"OK ({tool.name})"


def run_health_check() -> dict[str, tuple[str, str]]:
    """Run all health checks."""
    return {
        "Config": check_config(),
        "Storage": check_storage(),
        "Clipboard": check_clipboard(),
    }


def format_health_report(checks: dict[str, tuple[str, str]]) -> str:
    """Format health check results."""
    lines = ["Readloop Health Check", "-" * 40]

    for name, (status, message) in checks.items():
        lines.append(f"{status} {name}: {message}")

    return "\n".join(lines)
