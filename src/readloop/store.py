"""
Entry store for Readloop.

The authoritative in-memory list of entries and the only way to change
it. Every mutation ends with a full save through the gateway.

Several stores (the CLI, the MCP server) may share one slot. Each
mutation therefore runs inside the slot's write transaction and starts
by re-reading the saved collection, so a write from another store is
never overwritten by a stale copy.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator

from readloop.config import (
    DEFAULT_PREVIEW_LINES,
    DEFAULT_STORE_KEY,
    load_config,
    resolve_db_path,
)
from readloop.entry import Entry, clean_text
from readloop.kv import SqliteSlot
from readloop.persistence import PersistenceGateway

logger = logging.getLogger(__name__)


class EntryStore:
    """Insertion-ordered collection of entries."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        preview_lines: int = DEFAULT_PREVIEW_LINES,
    ):
        if preview_lines < 1:
            raise ValueError(f"preview_lines must be at least 1, got {preview_lines}")
        self.gateway = gateway
        self.preview_lines = preview_lines
        self._entries: list[Entry] = []
        # Single writer: mutations and their saves never interleave
        self._lock = threading.RLock()
        self.load()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def persisted(self) -> bool:
        """Whether the last save reached storage."""
        return self.gateway.last_save_ok

    def load(self) -> None:
        """Replace the in-memory state with whatever the gateway has."""
        with self._lock:
            self._replace(self.gateway.load())

    def create(self, text: str) -> Entry | None:
        """
        Save text as a new entry at the end of the list.

        Empty or whitespace-only text is ignored and returns None. Check
        `persisted` afterwards to know whether it reached storage.
        """
        if not text or not text.strip():
            logger.debug("Ignoring empty input")
            return None

        with self._mutation():
            entry = Entry.new(clean_text(text), self.preview_lines)
            self._entries.append(entry)

        logger.debug("Created entry %s", entry.id)
        return entry

    def delete_by_id(self, entry_id: str) -> bool:
        """Remove the entry with this id. Returns False if it wasn't there."""
        with self._mutation():
            before = len(self._entries)
            self._entries = [e for e in self._entries if e.id != entry_id]
            removed = len(self._entries) != before

        if removed:
            logger.debug("Deleted entry %s", entry_id)
        return removed

    def delete_at_positions(self, positions: Iterable[int]) -> list[Entry]:
        """
        Remove the entries at the given 0-based positions in one batch.

        Positions all refer to the order before the call. Out-of-range
        positions are ignored. Returns the removed entries in order.
        """
        targets = set(positions)
        with self._mutation():
            kept: list[Entry] = []
            removed: list[Entry] = []
            for position, entry in enumerate(self._entries):
                (removed if position in targets else kept).append(entry)
            self._entries = kept

        logger.debug("Deleted %d entries by position", len(removed))
        return removed

    def clear(self) -> int:
        """Remove every entry. Returns how many were removed."""
        with self._mutation():
            count = len(self._entries)
            self._entries = []

        logger.debug("Cleared %d entries", count)
        return count

    def get(self, entry_id: str) -> Entry | None:
        """Look up an entry by id."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def find(self, id_prefix: str) -> Entry | None:
        """
        Look up an entry by id or unique id prefix, ignoring case.

        An empty prefix matches nothing. Raises ValueError if the prefix
        matches more than one entry.
        """
        id_prefix = id_prefix.strip().lower()
        if not id_prefix:
            return None

        matches = [e for e in self._entries if e.id.lower().startswith(id_prefix)]
        if len(matches) > 1:
            raise ValueError(f"Ambiguous id prefix '{id_prefix}' ({len(matches)} matches)")
        return matches[0] if matches else None

    def entry_at(self, position: int) -> Entry | None:
        """Look up an entry by 0-based position."""
        if 0 <= position < len(self._entries):
            return self._entries[position]
        return None

    def list(self) -> list[Entry]:
        """Snapshot of the entries in insertion order."""
        return list(self._entries)

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with self._lock, self.gateway.transaction():
            # After a failed save memory holds the only copy; keep it
            if self.gateway.last_save_ok:
                saved = self.gateway.fetch()
                if saved is not None:
                    self._replace(saved)
            yield
            self.gateway.save(list(self._entries))

    def _replace(self, loaded: list[Entry]) -> None:
        entries: list[Entry] = []
        seen: set[str] = set()
        for entry in loaded:
            if entry.id in seen:
                logger.warning("Dropping duplicate entry id %s on load", entry.id)
                continue
            seen.add(entry.id)
            entries.append(entry)
        self._entries = entries


def open_store(config: dict[str, Any] | None = None) -> EntryStore:
    """Open the store backed by the configured SQLite slot."""
    config = config or load_config()
    store_config = config.get("store", {})

    gateway = PersistenceGateway(
        SqliteSlot(resolve_db_path(config)),
        key=store_config.get("key", DEFAULT_STORE_KEY),
    )
    return EntryStore(
        gateway,
        preview_lines=int(store_config.get("preview_lines", DEFAULT_PREVIEW_LINES)),
    )
