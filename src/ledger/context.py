"""
Ledger Context - the per-process wiring of session, quota and history.

Construct one LedgerContext per process with an explicit PersistedStore and
pass it by reference; it is the interface the UI layer talks to.
"""

from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from loguru import logger

from src.core.exceptions import StaleSessionError
from src.ledger.history_log import HistoryLog
from src.ledger.models import HistoryEntry, IdentityProfile, ProfileUpdate
from src.ledger.preferences import PreferencesStore
from src.ledger.security import PasswordHasher
from src.ledger.session_store import SessionStore
from src.ledger.usage_ledger import UsageLedger
from src.services.stats.trading import compute_trading_stats
from src.storage.persisted_store import PersistedStore
from src.storage.store_keys import StoreKeys
from src.utils.dates import Clock


class LedgerContext:
    """
    Session + usage + history for one local profile

    Usage:
        >>> ledger = LedgerContext(create_store())
        >>> ledger.restore()
        >>> if not ledger.is_exhausted():
        ...     ledger.record_analysis(entry)
    """

    def __init__(
        self,
        store: PersistedStore,
        keys: Optional[StoreKeys] = None,
        hasher: Optional[PasswordHasher] = None,
        clock: Clock = date.today,
    ):
        self.store = store
        keys = keys or StoreKeys()

        self.session = SessionStore(store, keys=keys, hasher=hasher, clock=clock)
        self.usage = UsageLedger(self.session, store, keys=keys, clock=clock)
        self.history = HistoryLog(self.session, store, keys=keys, on_change=self._on_history_changed)
        self.preferences = PreferencesStore(store, keys=keys)

    # --- 1. LIFECYCLE ---

    def restore(self) -> Optional[IdentityProfile]:
        """Load persisted state on process start."""
        profile = self.session.restore()
        self.usage.restore()
        if profile is not None:
            self.history.load()
        logger.info(f"Ledger restored ({'identity ' + profile.id if profile else 'guest'})")
        return profile

    # --- 2. STATE ---

    @contextmanager
    def _forced_logout_on_stale(self) -> Iterator[None]:
        """A stale session is a forced logout: drop the loaded history too."""
        try:
            yield
        except StaleSessionError:
            self.history.clear()
            raise

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def current_user(self) -> Optional[IdentityProfile]:
        return self.session.current

    def current_usage(self) -> int:
        with self._forced_logout_on_stale():
            return self.usage.current_usage()

    def is_exhausted(self) -> bool:
        with self._forced_logout_on_stale():
            return self.usage.is_exhausted()

    def ensure_quota(self) -> None:
        """Raises QuotaExceededError when the caller has no analyses left today."""
        with self._forced_logout_on_stale():
            self.usage.ensure_quota()

    # --- 3. IDENTITY ---

    def register(self, email: str, name: str, password: str, phone: Optional[str] = None) -> IdentityProfile:
        self.history.clear()
        profile = self.session.register(email, name, password, phone)
        self.history.load()
        return profile

    def login(self, email: str, password: str) -> IdentityProfile:
        profile = self.session.login(email, password)
        self.history.load()
        return profile

    def logout(self) -> None:
        self.session.logout()
        self.history.clear()

    def update_profile(self, data: Optional[ProfileUpdate] = None, **fields) -> IdentityProfile:
        with self._forced_logout_on_stale():
            return self.session.update_profile(data, **fields)

    def verify(self) -> IdentityProfile:
        with self._forced_logout_on_stale():
            return self.session.verify()

    def upgrade_to_vip(self) -> IdentityProfile:
        with self._forced_logout_on_stale():
            profile = self.session.upgrade_to_vip()
        self.history.load()
        return profile

    def delete_account(self) -> bool:
        removed = self.session.delete_account()
        self.history.clear()
        return removed

    # --- 4. ANALYSES ---

    def record_analysis(self, entry: HistoryEntry) -> bool:
        """
        Account for one successful analysis

        Records usage, then appends to the history when the identity is VIP.

        Returns:
            True if the entry was added to the history

        Raises:
            StaleSessionError: If the identity's row is gone (session and
                loaded history are cleared, nothing is written)
        """
        with self._forced_logout_on_stale():
            self.usage.record_usage()
            current = self.session.current
            if current is not None and current.is_vip:
                return self.history.append(entry)
        return False

    def history_list(self, start: Optional[date] = None, end: Optional[date] = None) -> List[HistoryEntry]:
        return self.history.list(start, end)

    def _on_history_changed(self, entries: List[HistoryEntry]) -> None:
        """Recompute stats from the full history and persist them if they changed."""
        stats = compute_trading_stats(entries)
        current = self.session.current
        if current is None or current.stats == stats:
            return

        self.session.upsert_identity({"stats": stats})
        logger.debug(f"Stats updated for {current.id}: {stats.total_trades} analyses, win rate {stats.win_rate}%")
