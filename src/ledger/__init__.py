"""
Ledger Module - identity, daily quota and analysis history.

Usage:
    from src.ledger import LedgerContext
    from src.storage import create_store

    ledger = LedgerContext(create_store())
    ledger.restore()
"""

from src.ledger.context import LedgerContext
from src.ledger.history_log import HistoryLog
from src.ledger.models import (
    GuestCounter,
    HistoryEntry,
    Identity,
    IdentityProfile,
    Indicators,
    ProfileUpdate,
)
from src.ledger.preferences import Preferences, PreferencesStore
from src.ledger.security import PasswordHasher
from src.ledger.session_store import SessionStore
from src.ledger.usage_ledger import UsageLedger

__all__ = [
    "LedgerContext",
    "SessionStore",
    "UsageLedger",
    "HistoryLog",
    "PreferencesStore",
    "Preferences",
    "PasswordHasher",
    "Identity",
    "IdentityProfile",
    "ProfileUpdate",
    "GuestCounter",
    "HistoryEntry",
    "Indicators",
]
