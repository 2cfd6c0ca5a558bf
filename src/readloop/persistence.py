"""
Persistence gateway for Readloop.

The whole entry collection lives as one JSON blob under one well-known
slot key and is rewritten in full on every save. Both directions fail
soft: a save that cannot encode or write is logged and skipped, and a
load that finds nothing usable returns an empty collection.

Losing a corrupt collection is the accepted price of never blocking
startup. To keep it recoverable by hand, an undecodable blob is copied
to `<key>.corrupt` before the empty collection is handed back.
"""

import logging
from contextlib import ExitStack, contextmanager
from typing import Iterator, Sequence

from pydantic import TypeAdapter

from readloop.config import DEFAULT_STORE_KEY
from readloop.entry import Entry
from readloop.kv import KeyValueSlot, SlotError
from readloop.metrics import MetricsClient, get_metrics_client

logger = logging.getLogger(__name__)

ENTRY_LIST = TypeAdapter(list[Entry])


class PersistenceGateway:
    """Saves and loads the full entry collection through one slot key."""

    def __init__(
        self,
        slot: KeyValueSlot,
        key: str = DEFAULT_STORE_KEY,
        metrics: MetricsClient | None = None,
    ):
        self.slot = slot
        self.key = key
        self.metrics = metrics or get_metrics_client()
        # Outcome of the most recent save, including its commit
        self.last_save_ok = True

    @property
    def corrupt_key(self) -> str:
        """Slot key an undecodable blob is moved aside to."""
        return f"{self.key}.corrupt"

    def encode(self, entries: Sequence[Entry]) -> bytes:
        """Serialize entries to the persisted JSON layout."""
        return ENTRY_LIST.dump_json(list(entries), by_alias=True)

    def decode(self, blob: bytes) -> list[Entry]:
        """Parse a persisted blob. Raises ValueError if it is unusable."""
        return ENTRY_LIST.validate_json(blob)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Hold the slot's write lock around a load-mutate-save cycle.

        If the lock can't be taken the block still runs, unlocked. A
        failed commit marks the save as not persisted. Neither raises.
        """
        try:
            with ExitStack() as stack:
                try:
                    stack.enter_context(self.slot.transaction())
                except SlotError as e:
                    logger.warning("Could not lock %r, continuing unlocked: %s", self.key, e)
                    self.metrics.increment("persistence.lock_failure")
                yield
        except SlotError as e:
            logger.error("Could not commit %r: %s", self.key, e)
            self.metrics.increment("persistence.write_failure")
            self.last_save_ok = False

    def save(self, entries: Sequence[Entry]) -> bool:
        """
        Overwrite the slot with the full collection.

        Returns True if the blob was written. Never raises for encode or
        storage failures; the caller's in-memory state stays authoritative.
        """
        try:
            blob = self.encode(entries)
        except (ValueError, TypeError) as e:
            logger.error("Could not encode %d entries, save skipped: %s", len(entries), e)
            self.metrics.increment("persistence.encode_failure")
            self.last_save_ok = False
            return False

        try:
            self.slot.set(self.key, blob)
        except SlotError as e:
            logger.error("Could not write %r, save skipped: %s", self.key, e)
            self.metrics.increment("persistence.write_failure")
            self.last_save_ok = False
            return False

        logger.debug("Saved %d entries to %r (%d bytes)", len(entries), self.key, len(blob))
        self.last_save_ok = True
        return True

    def fetch(self) -> list[Entry] | None:
        """
        Like load(), but returns None when the slot can't be read at all.

        Missing or undecodable data still comes back as an empty list.
        """
        try:
            blob = self.slot.get(self.key)
        except SlotError as e:
            logger.warning("Could not read %r: %s", self.key, e)
            self.metrics.increment("persistence.read_failure")
            return None

        if blob is None:
            logger.debug("No saved entries under %r", self.key)
            return []

        try:
            entries = self.decode(blob)
        except ValueError as e:
            logger.warning(
                "Discarding undecodable entries under %r (copied to %r): %s",
                self.key, self.corrupt_key, e,
            )
            self.metrics.increment("persistence.decode_failure")
            self._preserve_corrupt(blob)
            return []

        logger.debug("Loaded %d entries from %r", len(entries), self.key)
        return entries

    def load(self) -> list[Entry]:
        """
        Read the collection back.

        Missing, unreadable or malformed data all yield an empty list.
        """
        entries = self.fetch()
        if entries is None:
            return []
        return entries

    def _preserve_corrupt(self, blob: bytes) -> None:
        try:
            self.slot.set(self.corrupt_key, blob)
        except SlotError as e:
            logger.error("Could not preserve corrupt blob as %r: %s", self.corrupt_key, e)
