"""
Key-value slot storage for Readloop.

A slot is a named location holding one opaque blob. The durable
implementation is a single SQLite table; the in-memory one is for tests
and throwaway sessions.
"""

import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from readloop.config import get_db_path

SCHEMA = """
CREATE TABLE IF NOT EXISTS slots (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL,
    updated_at TEXT NOT NULL                -- ISO 8601
);
"""


class SlotError(Exception):
    """Raised when a slot cannot be read or written."""


class KeyValueSlot(ABC):
    """Named blob storage."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the blob stored under key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store value under key, replacing whatever was there."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys in sorted order."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Hold exclusive write access for a read-modify-write cycle.

        Other writers on the same storage wait until the block exits.
        """
        yield


class InMemorySlot(KeyValueSlot):
    """Dict-backed slot storage."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self.data: dict[str, bytes] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)

    def keys(self) -> list[str]:
        return sorted(self.data)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield


class SqliteSlot(KeyValueSlot):
    """SQLite-backed slot storage."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self._schema_ready = False
        # Connection owning the open write transaction, if any
        self._held: sqlite3.Connection | None = None

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        if self._held is not None:
            try:
                yield self._held
            except sqlite3.Error as e:
                raise SlotError(f"Storage error in {self.db_path}: {e}") from e
            return

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        except (OSError, sqlite3.Error) as e:
            raise SlotError(f"Cannot open {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            if not self._schema_ready:
                conn.executescript(SCHEMA)
                self._schema_ready = True
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise SlotError(f"Storage error in {self.db_path}: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        BEGIN IMMEDIATE on one connection for the whole block.

        Other processes block on their own BEGIN IMMEDIATE (up to sqlite's
        busy timeout) until this commits. Nested calls join the outer one.
        """
        if self._held is not None:
            yield
            return

        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            self._held = conn
            try:
                yield
            finally:
                self._held = None

    def get(self, key: str) -> bytes | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM slots WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        value = row["value"]
        # Rows written by other tools may hold TEXT
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def set(self, key: str, value: bytes) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute("""
                INSERT INTO slots (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, (key, sqlite3.Binary(value), now))

    def keys(self) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM slots ORDER BY key").fetchall()
        return [row["key"] for row in rows]
