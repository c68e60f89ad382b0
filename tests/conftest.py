"""
Pytest configuration and fixtures for CNC Signal Ledger tests
"""

import sys
from datetime import date, datetime, timedelta

import pytest
from loguru import logger

from src.core.enums import SignalType
from src.ledger.context import LedgerContext
from src.ledger.models import HistoryEntry
from src.ledger.security import PasswordHasher
from src.storage.persisted_store import MemoryStore


class FakeClock:
    """Mutable calendar clock for day-boundary tests"""

    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day

    def advance(self, days: int = 1) -> None:
        self.day = self.day + timedelta(days=days)


@pytest.fixture
def clock():
    """Clock fixed at 2026-10-19 until advanced"""
    return FakeClock(date(2026, 10, 19))


@pytest.fixture
def store():
    """Empty in-memory persisted store"""
    return MemoryStore()


@pytest.fixture
def hasher():
    """Cheap bcrypt cost for tests"""
    return PasswordHasher(rounds=4)


@pytest.fixture
def ledger(store, hasher, clock):
    """Restored ledger for a fresh profile"""
    context = LedgerContext(store, hasher=hasher, clock=clock)
    context.restore()
    return context


@pytest.fixture
def vip_ledger(ledger):
    """Ledger with a logged-in VIP identity"""
    ledger.register("vip@example.com", "Vera", "secret")
    ledger.upgrade_to_vip()
    return ledger


def ms(year, month, day, hour=12, minute=0):
    """Local-time epoch milliseconds"""
    return int(datetime(year, month, day, hour, minute).timestamp() * 1000)


def make_entry(
    pair="EUR/USD",
    confidence=80,
    risk_reward_ratio="1:2",
    timestamp=None,
    signal=SignalType.BUY,
    timeframe="H1",
) -> HistoryEntry:
    """Build a history entry with sensible defaults"""
    return HistoryEntry(
        pair=pair,
        timeframe=timeframe,
        signal=signal,
        entry_price=1.0850,
        stop_loss=1.0820,
        take_profit=[1.0880, 1.0910, 1.0950],
        risk_reward_ratio=risk_reward_ratio,
        confidence=confidence,
        confluences=["RSI divergence"],
        reasoning="Trend continuation",
        timestamp=timestamp if timestamp is not None else ms(2026, 10, 19),
    )


@pytest.fixture
def restore_logger():
    """Reset loguru sinks after tests that call setup_logging()"""
    yield
    logger.remove()
    logger.add(sys.stderr)
