"""
Ledger records - Pydantic models for every persisted value.

Records:
- IdentityProfile: redacted identity, persisted as the active session
- Identity: user-table row (profile + password hash)
- GuestCounter: anonymous usage for one calendar day
- HistoryEntry: one immutable analysis result
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.core.enums import SignalType
from src.services.stats.schemas import TradingStats


# =============================================================================
# Identity
# =============================================================================


class IdentityProfile(BaseModel):
    """
    Identity without secrets.

    Held as the single source of truth for "who is logged in now" and mirrors
    one row of the user table.
    """

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    is_verified: bool = False
    is_vip: bool = False
    free_credits_used: int = 0
    last_reset_date: Optional[str] = None  # ISO calendar day
    stats: Optional[TradingStats] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None


class Identity(IdentityProfile):
    """User-table row. Email is the unique key."""

    password_hash: str

    def to_profile(self) -> IdentityProfile:
        """Redacted projection stored as the active session."""
        return IdentityProfile.model_validate(self.model_dump(exclude={"password_hash"}))


class ProfileUpdate(BaseModel):
    """Fields a user may edit on their own profile. Unset fields are untouched."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=2000)


# =============================================================================
# Usage
# =============================================================================


class GuestCounter(BaseModel):
    """Anonymous usage for one calendar day"""

    date: str
    count: int = 0


# =============================================================================
# History
# =============================================================================


class Indicators(BaseModel):
    """Indicator snapshot returned with an analysis"""

    rsi: float = 50
    macd: str = "Neutral"
    trend: str = "Sideways"


class HistoryEntry(BaseModel):
    """Immutable analysis result. Ordered newest first, keyed by timestamp."""

    model_config = ConfigDict(frozen=True)

    pair: str
    timeframe: str
    signal: SignalType
    entry_price: float
    stop_loss: float
    take_profit: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    risk_reward_ratio: str = "1:2"
    confidence: float = Field(ge=0, le=100)
    confluences: list[str] = Field(default_factory=list)
    reasoning: str = ""
    indicators: Indicators = Field(default_factory=Indicators)
    timestamp: int  # epoch milliseconds
    image_url: Optional[str] = None
