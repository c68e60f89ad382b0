"""
Unit tests for the daily usage quota
"""

import pytest

from src.core.enums import SubscriptionTier
from src.core.exceptions import QuotaExceededError
from src.ledger.context import LedgerContext
from src.storage.store_keys import StoreKeys

KEYS = StoreKeys()


def test_guest_quota(ledger):
    """Guests get 3 analyses per day, then must log in"""
    assert ledger.usage.tier == SubscriptionTier.GUEST
    assert ledger.current_usage() == 0

    for expected in (1, 2, 3):
        assert ledger.usage.record_usage() == expected

    assert ledger.is_exhausted()
    assert ledger.usage.remaining() == 0

    with pytest.raises(QuotaExceededError) as exc_info:
        ledger.usage.ensure_quota()

    assert exc_info.value.requires_login is True
    assert exc_info.value.usage == 3
    assert exc_info.value.limit == 3


def test_restore_creates_guest_counter(store, ledger):
    assert store.get_json(KEYS.guest_counter) == {"date": "2026-10-19", "count": 0}


def test_guest_restart_same_day_keeps_count(store, hasher, clock, ledger):
    ledger.usage.record_usage()
    ledger.usage.record_usage()

    restarted = LedgerContext(store, hasher=hasher, clock=clock)
    restarted.restore()
    assert restarted.current_usage() == 2


def test_guest_restart_next_day_resets(store, hasher, clock, ledger):
    for _ in range(3):
        ledger.usage.record_usage()

    clock.advance()
    restarted = LedgerContext(store, hasher=hasher, clock=clock)
    restarted.restore()

    assert restarted.current_usage() == 0
    assert not restarted.is_exhausted()
    assert store.get_json(KEYS.guest_counter) == {"date": "2026-10-20", "count": 0}


def test_guest_new_day_without_restore(clock, ledger):
    """A stale guest counter reads as 0 and restarts at 1"""
    for _ in range(3):
        ledger.usage.record_usage()

    clock.advance()
    assert ledger.current_usage() == 0
    assert ledger.usage.record_usage() == 1


def test_registered_quota(ledger):
    """Registered non-VIP accounts are sent to the upgrade page"""
    ledger.register("ann@example.com", "Ann", "secret")
    assert ledger.usage.tier == SubscriptionTier.FREE

    for _ in range(3):
        ledger.usage.record_usage()

    assert ledger.current_user.free_credits_used == 3
    assert ledger.session.get_by_email("ann@example.com").free_credits_used == 3

    with pytest.raises(QuotaExceededError) as exc_info:
        ledger.usage.ensure_quota()
    assert exc_info.value.requires_login is False


def test_counters_are_separate(ledger):
    """Guest usage is not inherited on login and not leaked on logout"""
    ledger.usage.record_usage()
    ledger.usage.record_usage()

    ledger.register("ann@example.com", "Ann", "secret")
    assert ledger.current_usage() == 0

    ledger.usage.record_usage()
    ledger.logout()
    assert ledger.current_usage() == 2

    ledger.login("ann@example.com", "secret")
    assert ledger.current_usage() == 1


def test_registered_lazy_reset(clock, ledger):
    """Exhausted account is reset on first access of the next day"""
    ledger.register("ann@example.com", "Ann", "secret")
    for _ in range(3):
        ledger.usage.record_usage()
    assert ledger.is_exhausted()

    clock.advance()
    assert not ledger.is_exhausted()
    assert ledger.current_user.free_credits_used == 0
    assert ledger.current_user.last_reset_date == "2026-10-20"

    assert ledger.usage.record_usage() == 1


def test_vip_unlimited(vip_ledger):
    assert vip_ledger.usage.tier == SubscriptionTier.VIP
    assert vip_ledger.usage.daily_limit() is None

    for _ in range(10):
        vip_ledger.usage.record_usage()

    assert not vip_ledger.is_exhausted()
    assert vip_ledger.usage.remaining() is None
    assert vip_ledger.current_user.free_credits_used == 0
    vip_ledger.usage.ensure_quota()


def test_usage_stats(ledger):
    ledger.usage.record_usage()

    stats = ledger.usage.usage_stats()
    assert stats == {
        "count": 1,
        "limit": 3,
        "remaining": 2,
        "percentage": 33,
        "tier": "guest",
        "date": "2026-10-19",
    }


def test_corrupt_guest_counter(store, ledger):
    store.set(KEYS.guest_counter, "[[")

    assert ledger.current_usage() == 0
    assert ledger.usage.record_usage() == 1
