"""
Core Enums - shared types for the whole ledger.

Defines:
- SubscriptionTier: quota tier of the caller (guest / free / vip)
- SignalType: direction of an analysis signal
- Timeframe: chart timeframes accepted by the analysis provider
"""

from enum import Enum


class SubscriptionTier(str, Enum):
    """Quota tier of the current caller"""

    GUEST = "guest"  # anonymous, 3 analyses/day
    FREE = "free"  # registered, 3 analyses/day
    VIP = "vip"  # unlimited + history

    @classmethod
    def for_identity(cls, identity) -> "SubscriptionTier":
        """Resolve tier from an identity (None = guest)."""
        if identity is None:
            return cls.GUEST
        return cls.VIP if identity.is_vip else cls.FREE


class SignalType(str, Enum):
    """Analysis signal direction"""

    BUY = "BUY"
    SELL = "SELL"
    WAIT = "WAIT"


class Timeframe(str, Enum):
    """Chart timeframes"""

    M1 = "M1"
    M5 = "M5"
    M15 = "M15"
    M30 = "M30"
    H1 = "H1"
    H4 = "H4"
    D1 = "D1"
