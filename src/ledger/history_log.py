"""
History Log - append-only analysis history of VIP identities

The working sequence is newest first. Every append persists the whole
sequence under the owner's key and calls the on_change hook with the new
snapshot, so derived stats are recomputed synchronously.
"""

from datetime import date
from typing import Callable, List, Optional

from loguru import logger
from pydantic import ValidationError

from src.core.exceptions import StaleSessionError
from src.ledger.models import HistoryEntry
from src.ledger.session_store import SessionStore
from src.storage.persisted_store import PersistedStore
from src.storage.store_keys import StoreKeys
from src.utils.dates import in_day_range

HistoryListener = Callable[[List[HistoryEntry]], None]


class HistoryLog:
    """Per-identity analysis history"""

    def __init__(
        self,
        session: SessionStore,
        store: PersistedStore,
        keys: Optional[StoreKeys] = None,
        on_change: Optional[HistoryListener] = None,
    ):
        self._session = session
        self._store = store
        self._keys = keys or StoreKeys()
        self._on_change = on_change
        self._entries: List[HistoryEntry] = []
        self._owner_id: Optional[str] = None

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    def load(self) -> List[HistoryEntry]:
        """
        Load the active identity's persisted history into working memory

        Returns:
            Entries newest first (empty for guests)
        """
        current = self._session.current
        if current is None:
            self.clear()
            return []

        raw = self._store.get_json(self._keys.history(current.id), default=[])
        if not isinstance(raw, list):
            logger.warning(f"History for {current.id} is not a list. Treating as empty.")
            raw = []

        entries: List[HistoryEntry] = []
        for item in raw:
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping corrupt history entry for {current.id} ({e.error_count()} errors)")

        self._entries = entries
        self._owner_id = current.id
        logger.debug(f"Loaded {len(entries)} history entries for {current.id}")
        return list(self._entries)

    def append(self, entry: HistoryEntry) -> bool:
        """
        Prepend an entry for the active VIP identity

        Returns:
            False (and no change) when there is no active VIP identity

        Raises:
            StaleSessionError: If the identity's row is gone (nothing written)
        """
        current = self._session.current
        if current is None or not current.is_vip:
            logger.debug("History append skipped: no active VIP identity")
            return False

        try:
            self._session.require_row()
        except StaleSessionError:
            self.clear()
            raise

        if self._owner_id != current.id:
            self.load()

        self._entries.insert(0, entry)
        self._store.set_json(
            self._keys.history(current.id),
            [e.model_dump(mode="json") for e in self._entries],
        )
        logger.info(f"History entry added for {current.id}: {entry.pair} {entry.timeframe} {entry.signal.value}")

        if self._on_change is not None:
            self._on_change(list(self._entries))
        return True

    def list(self, start: Optional[date] = None, end: Optional[date] = None) -> List[HistoryEntry]:
        """
        Entries newest first, optionally filtered by an inclusive day range

        Args:
            start: First calendar day to include (None = no lower bound)
            end: Last calendar day to include (None = no upper bound)
        """
        current = self._session.current
        if current is None or current.id != self._owner_id:
            return []

        if start is None and end is None:
            return list(self._entries)
        return [e for e in self._entries if in_day_range(e.timestamp, start, end)]

    def clear(self) -> None:
        """Drop working memory; persisted history is kept for the next login."""
        self._entries = []
        self._owner_id = None
