"""
Core module - base types, enums and errors shared by the ledger.
"""

from src.core.enums import (
    SubscriptionTier,
    SignalType,
    Timeframe,
)

__all__ = [
    "SubscriptionTier",
    "SignalType",
    "Timeframe",
]
