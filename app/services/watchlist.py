"""Watchlist stored as one JSON list under a single storage key."""

import json
import logging
from typing import List

from pydantic import ValidationError as PydanticValidationError

from app.core.storage import StoragePort
from app.models.media import WatchlistEntry

logger = logging.getLogger(__name__)

WATCHLIST_KEY = "watchlist"


class WatchlistStore:
    """Add/remove/contains over an injected StoragePort.

    Entries are unique by id and kept in insertion order.
    """

    def __init__(self, storage: StoragePort, key: str = WATCHLIST_KEY):
        self.storage = storage
        self.key = key

    def _load(self) -> List[WatchlistEntry]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            records = json.loads(raw)
            return [WatchlistEntry.model_validate(r) for r in records]
        except (json.JSONDecodeError, TypeError, PydanticValidationError) as exc:
            logger.error("Discarding unreadable watchlist '%s': %s", self.key, exc)
            return []

    def _save(self, entries: List[WatchlistEntry]) -> None:
        self.storage.set(
            self.key, json.dumps([e.model_dump(mode="json") for e in entries])
        )

    def list(self) -> List[WatchlistEntry]:
        return self._load()

    def contains(self, entry_id: int) -> bool:
        return any(e.id == entry_id for e in self._load())

    def add(self, entry: WatchlistEntry) -> bool:
        """Add ``entry``; returns False if its id is already present."""
        entries = self._load()
        if any(e.id == entry.id for e in entries):
            return False
        entries.append(entry)
        self._save(entries)
        logger.info("Added %s (%s) to watchlist", entry.id, entry.title)
        return True

    def remove(self, entry_id: int) -> bool:
        """Remove the entry with ``entry_id``; returns False if absent."""
        entries = self._load()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) == len(entries):
            return False
        self._save(remaining)
        logger.info("Removed %s from watchlist", entry_id)
        return True
