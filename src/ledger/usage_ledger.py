"""
Usage Ledger - daily analysis quota for identities and guests

Registered identities count usage in `free_credits_used` on their own row;
anonymous callers use the guest counter. The two never mix: logging in does
not inherit guest usage and logging out does not leak registered usage into
the guest pool. Both reset lazily on the first access of a new calendar day.
"""

from datetime import date
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from config.limits import get_analysis_limit, get_tier_limits
from src.core.enums import SubscriptionTier
from src.core.exceptions import QuotaExceededError
from src.ledger.models import GuestCounter
from src.ledger.session_store import SessionStore
from src.storage.persisted_store import PersistedStore
from src.storage.store_keys import StoreKeys
from src.utils.dates import Clock, calendar_day


class UsageLedger:
    """Quota checks and usage recording on top of SessionStore"""

    def __init__(
        self,
        session: SessionStore,
        store: PersistedStore,
        keys: Optional[StoreKeys] = None,
        clock: Clock = date.today,
    ):
        self._session = session
        self._store = store
        self._keys = keys or StoreKeys()
        self._clock = clock

    # --- 1. GUEST COUNTER ---

    def _load_guest_counter(self) -> Optional[GuestCounter]:
        raw = self._store.get_json(self._keys.guest_counter)
        if raw is None:
            return None

        try:
            return GuestCounter.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Corrupt guest counter ({e.error_count()} errors). Treating as absent.")
            return None

    def _save_guest_counter(self, counter: GuestCounter) -> None:
        self._store.set_json(self._keys.guest_counter, counter.model_dump())

    def restore(self) -> None:
        """Create the guest counter on first run, or reset it in place on a new day."""
        today = calendar_day(self._clock)
        counter = self._load_guest_counter()
        if counter is None or counter.date != today:
            self._save_guest_counter(GuestCounter(date=today, count=0))
            logger.debug(f"Guest counter initialized for {today}")

    # --- 2. QUOTA CHECKS ---

    @property
    def tier(self) -> SubscriptionTier:
        return SubscriptionTier.for_identity(self._session.current)

    def daily_limit(self) -> Optional[int]:
        """Daily analysis limit for the current caller (None = unlimited)"""
        return get_analysis_limit(self.tier)

    def current_usage(self) -> int:
        """
        Analyses used today by the current caller

        Returns:
            free_credits_used for an active identity, else today's guest count
        """
        if self._session.is_authenticated:
            self._session.ensure_daily_reset()
            return self._session.current.free_credits_used

        counter = self._load_guest_counter()
        if counter is None or counter.date != calendar_day(self._clock):
            return 0
        return counter.count

    def remaining(self) -> Optional[int]:
        """Analyses left today (None = unlimited)"""
        limit = self.daily_limit()
        if limit is None:
            return None
        return max(0, limit - self.current_usage())

    def is_exhausted(self) -> bool:
        """True when a non-VIP caller has used the whole daily quota"""
        limit = self.daily_limit()
        if limit is None:
            return False
        return self.current_usage() >= limit

    def ensure_quota(self) -> None:
        """
        Check quota before an analysis call

        Raises:
            QuotaExceededError: With requires_login=True for guests
        """
        if not self.is_exhausted():
            return

        tier = self.tier
        usage = self.current_usage()
        limit = self.daily_limit()
        requires_login = get_tier_limits(tier)["on_exhausted"] == "login"

        logger.info(f"Quota exceeded for {tier.value} caller: {usage}/{limit}")
        raise QuotaExceededError(usage=usage, limit=limit, requires_login=requires_login)

    # --- 3. RECORDING ---

    def record_usage(self) -> int:
        """
        Record one analysis for the current caller

        VIP identities are not counted. Returns the usage after recording.
        """
        current = self._session.current

        if current is not None:
            if current.is_vip:
                return current.free_credits_used

            self._session.ensure_daily_reset()
            profile = self._session.upsert_identity(
                lambda row: {"free_credits_used": row.free_credits_used + 1}
            )
            logger.info(f"Identity {profile.id} usage: {profile.free_credits_used}/{self.daily_limit()}")
            return profile.free_credits_used

        today = calendar_day(self._clock)
        counter = self._load_guest_counter()
        if counter is None or counter.date != today:
            counter = GuestCounter(date=today, count=1)
        else:
            counter = GuestCounter(date=today, count=counter.count + 1)

        self._save_guest_counter(counter)
        logger.info(f"Guest usage: {counter.count}/{self.daily_limit()}")
        return counter.count

    def usage_stats(self) -> dict:
        """
        Current usage snapshot

        Returns:
            Dict with count, limit, remaining, percentage, tier and date
        """
        count = self.current_usage()
        limit = self.daily_limit()

        return {
            "count": count,
            "limit": limit,
            "remaining": None if limit is None else max(0, limit - count),
            "percentage": 0 if not limit else int(count / limit * 100),
            "tier": self.tier.value,
            "date": calendar_day(self._clock),
        }
