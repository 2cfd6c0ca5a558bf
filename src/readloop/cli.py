"""
CLI for Readloop.

Minimal CLI using stdlib for fast startup on the save path.
Subcommands are imported lazily to avoid startup overhead.

Usage:
    readloop "text to keep"         # Save (primary interface)
    readloop list                   # Browse previews
    readloop --help                 # Show help
"""

import logging
import sys


def print_help() -> None:
    """Print help message."""
    print("""readloop - keep text, read it back

Usage:
    readloop "text to keep"       Save text as a new entry
    echo "text" | readloop        Save piped text

Commands:
    readloop list                 List saved entries with previews
    readloop show <ref>           Print an entry's full text
    readloop copy <ref>           Copy an entry's full text to the clipboard
    readloop paste                Save the clipboard contents as a new entry
    readloop delete <id>...       Delete entries by id (or unique id prefix)
    readloop delete-at <n>...     Delete entries by list position, in one go
    readloop clear --yes          Delete every entry
    readloop health               Show system status

Options:
    readloop --help, -h           Show this help
    readloop --version, -v        Show version

A <ref> is either a list position (as shown by `readloop list`)
or an entry id / unique id prefix.

Examples:
    readloop "Chapter 3 quote worth rereading"
    readloop list
    readloop copy 2
    readloop delete-at 1 3""")


def print_version() -> None:
    """Print version."""
    from readloop import __version__
    print(f"readloop {__version__}")


def setup_logging() -> None:
    """Configure logging for the CLI process."""
    from readloop.config import get_log_level

    try:
        level = get_log_level()
    except Exception:
        level = "WARNING"

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level, logging.WARNING),
    )


def resolve_ref(store, ref: str):
    """
    Find the entry a user reference points at.

    All-digit references are 1-based list positions; anything else is
    matched as an id prefix. Empty references match nothing. Raises
    ValueError if a prefix is ambiguous.
    """
    ref = ref.strip().lstrip("#")
    if not ref:
        return None
    if ref.isdigit():
        return store.entry_at(int(ref) - 1)
    return store.find(ref)


class NotSavedError(Exception):
    """Raised when a change was made but could not be written to storage."""

    def __init__(self, what: str):
        super().__init__(f"{what} was not saved to storage (see log for details)")


def ensure_saved(store, what: str) -> None:
    """Raise NotSavedError unless the store's last save went through."""
    if not store.persisted:
        raise NotSavedError(what)


def capture(text: str) -> str | None:
    """
    Save text as a new entry.

    Returns the entry ID, or None if the text was empty.
    Raises NotSavedError if the entry could not be stored.
    """
    from readloop.store import open_store

    store = open_store()
    entry = store.create(text)
    if entry is None:
        return None
    ensure_saved(store, f"Entry {entry.id}")
    return entry.id


def cmd_save(text: str) -> int:
    """Save text and print the new entry ID."""
    try:
        entry_id = capture(text)
    except NotSavedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if entry_id is None:
        print("Error: Empty text", file=sys.stderr)
        return 1

    print(entry_id)
    return 0


def cmd_list() -> int:
    """List saved entries."""
    from readloop.store import open_store
    from readloop.surfacing import format_entries

    try:
        store = open_store()
        print(format_entries(store.list()))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_show(args: list[str]) -> int:
    """Print one entry in full."""
    from readloop.store import open_store
    from readloop.surfacing import format_entry

    if not args:
        print("Usage: readloop show <ref>", file=sys.stderr)
        return 1

    try:
        store = open_store()
        entry = resolve_ref(store, args[0])
        if entry is None:
            print(f"Not found: {args[0]}", file=sys.stderr)
            return 1
        position = store.list().index(entry) + 1
        print(format_entry(entry, position))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_copy(args: list[str]) -> int:
    """Copy an entry's full text to the clipboard."""
    from readloop.clipboard import copy_text
    from readloop.store import open_store
    from readloop.surfacing import format_id

    if not args:
        print("Usage: readloop copy <ref>", file=sys.stderr)
        return 1

    try:
        store = open_store()
        entry = resolve_ref(store, args[0])
        if entry is None:
            print(f"Not found: {args[0]}", file=sys.stderr)
            return 1
        copy_text(entry.text)
        print(f"Text copied: {format_id(entry.id)} is on the clipboard.")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_paste() -> int:
    """Save the clipboard contents as a new entry."""
    from readloop.clipboard import paste_text

    try:
        text = paste_text()
        entry_id = capture(text)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if entry_id is None:
        print("Clipboard is empty. Nothing saved.", file=sys.stderr)
        return 1

    print(entry_id)
    return 0


def cmd_delete(args: list[str]) -> int:
    """Delete entries by id or id prefix."""
    from readloop.store import open_store

    if not args:
        print("Usage: readloop delete <id>...", file=sys.stderr)
        return 1

    try:
        store = open_store()
        status = 0
        for ref in args:
            if ref.strip().lstrip("#").isdigit():
                print(f"'{ref}' looks like a position; use delete-at", file=sys.stderr)
                status = 1
                continue
            entry = resolve_ref(store, ref)
            if entry is None:
                print(f"Not found: {ref}", file=sys.stderr)
                status = 1
                continue
            store.delete_by_id(entry.id)
            ensure_saved(store, f"Deleting {entry.id}")
            print(f"Deleted: {entry.id}")
        return status
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_delete_at(args: list[str]) -> int:
    """Delete entries by 1-based position, all resolved before any removal."""
    from readloop.store import open_store

    if not args:
        print("Usage: readloop delete-at <n>...", file=sys.stderr)
        return 1

    try:
        positions = {int(arg.lstrip("#")) - 1 for arg in args}
    except ValueError:
        print(f"Positions must be numbers: {' '.join(args)}", file=sys.stderr)
        return 1

    try:
        store = open_store()
        removed = store.delete_at_positions(positions)
        if removed:
            ensure_saved(store, "Deletion")
        for entry in removed:
            print(f"Deleted: {entry.id}")
        if not removed:
            print("Nothing deleted.")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_clear(args: list[str]) -> int:
    """Delete every entry."""
    from readloop.store import open_store

    if "--yes" not in args and "-y" not in args:
        print("This deletes every saved entry. Re-run with --yes to confirm.", file=sys.stderr)
        return 1

    try:
        store = open_store()
        count = store.clear()
        ensure_saved(store, "Clearing")
        print(f"Cleared {count} entries.")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_health() -> int:
    """Show health report."""
    from readloop.health import format_health_report, run_health_check

    print(format_health_report(run_health_check()))
    return 0


def main() -> int:
    """
    Main entry point.

    Optimized for minimal startup time on the save path.
    """
    args = sys.argv[1:]
    setup_logging()

    # No args - check for piped input
    if not args:
        if not sys.stdin.isatty():
            # Reading from pipe; the trailing newline belongs to the pipe
            return cmd_save(sys.stdin.read().rstrip("\n"))
        print_help()
        return 0

    # Handle flags and commands
    first_arg = args[0]

    if first_arg in ("--help", "-h", "help"):
        print_help()
        return 0

    if first_arg in ("--version", "-v", "version"):
        print_version()
        return 0

    # Subcommands (lazy import to keep startup fast)
    if first_arg == "list":
        return cmd_list()

    if first_arg == "show":
        return cmd_show(args[1:])

    if first_arg == "copy":
        return cmd_copy(args[1:])

    if first_arg == "paste":
        return cmd_paste()

    if first_arg == "delete":
        return cmd_delete(args[1:])

    if first_arg == "delete-at":
        return cmd_delete_at(args[1:])

    if first_arg == "clear":
        return cmd_clear(args[1:])

    if first_arg == "health":
        return cmd_health()

    # Everything else is text to save
    # Join all args (allows: readloop Remember page 42)
    return cmd_save(" ".join(args))


if __name__ == "__main__":
    sys.exit(main())
