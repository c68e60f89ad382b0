"""
Quota limits configuration for the CNC Signal Ledger

Defines the daily analysis quota and feature flags for each tier:
- GUEST: anonymous callers (separate counter, not inherited on login)
- FREE: registered accounts
- VIP: unlimited analyses + signal history
"""

from typing import Any, Dict, Optional

from config.config import FREE_ANALYSES_PER_DAY
from src.core.enums import SubscriptionTier


# ============================================================================
# LIMITS BY TIER
# ============================================================================

TIER_LIMITS = {
    # GUEST - anonymous usage tracked by the guest counter
    SubscriptionTier.GUEST: {
        "analyses_per_day": FREE_ANALYSES_PER_DAY,
        "history": False,             # ❌ No signal history
        "on_exhausted": "login",      # Redirect to login when the quota is used
    },

    # FREE - registered account without VIP
    SubscriptionTier.FREE: {
        "analyses_per_day": FREE_ANALYSES_PER_DAY,
        "history": False,
        "on_exhausted": "upgrade",    # Redirect to upgrade page
    },

    # VIP - unlimited analyses, history and derived stats
    SubscriptionTier.VIP: {
        "analyses_per_day": None,     # None = unlimited
        "history": True,              # ✅ Signal history + trading stats
        "on_exhausted": None,
    },
}


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def get_tier_limits(tier: SubscriptionTier) -> Dict[str, Any]:
    """
    Get limits for a specific tier

    Args:
        tier: Subscription tier enum

    Returns:
        Dict with limits and feature flags
    """
    return TIER_LIMITS.get(tier, TIER_LIMITS[SubscriptionTier.GUEST])


def get_analysis_limit(tier: SubscriptionTier) -> Optional[int]:
    """Get daily analysis limit for tier (None = unlimited)"""
    return get_tier_limits(tier)["analyses_per_day"]


def has_history(tier: SubscriptionTier) -> bool:
    """Check if tier keeps a signal history"""
    return get_tier_limits(tier).get("history", False)
