"""
Preferences Store - persisted UI and trading preferences of the profile

Kept outside the identity: preferences belong to the local profile and
survive logout.
"""

from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from src.core.enums import Timeframe
from src.storage.persisted_store import PersistedStore
from src.storage.store_keys import StoreKeys

Language = Literal["pt", "en", "fr", "es"]
Theme = Literal["light", "dark", "cyberpunk", "nord", "oled", "forest"]


class ChartConfig(BaseModel):
    style: str = "1"
    show_toolbar: bool = True
    theme: str = "dark"
    timezone: str = "Etc/UTC"
    auto_analyze: bool = False


class NotificationConfig(BaseModel):
    email: bool = True
    push: bool = True
    sound_enabled: bool = True
    high_probability_only: bool = False


class TradingConfig(BaseModel):
    default_lot_size: float = 0.1
    default_risk_percent: float = 1.0
    default_stop_loss_pips: float = 30
    default_take_profit_pips: float = 60
    default_entry_price: float = 0
    default_stop_loss_price: float = 0
    default_take_profit_price: float = 0


class SecurityConfig(BaseModel):
    two_factor: bool = False


class Preferences(BaseModel):
    """All persisted preferences with their defaults"""

    language: Language = "pt"
    theme: Theme = "dark"
    chart: ChartConfig = Field(default_factory=ChartConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    trading: TradingConfig = Field(default_factory=TradingConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    selected_pair: str = "EUR/USD"
    selected_timeframe: Timeframe = Timeframe.H1
    onboarding_complete: bool = False


class PreferencesStore:
    """Load / save / merge preferences"""

    def __init__(self, store: PersistedStore, keys: StoreKeys | None = None):
        self._store = store
        self._keys = keys or StoreKeys()

    def load(self) -> Preferences:
        """Persisted preferences, or defaults if absent or corrupt"""
        raw = self._store.get_json(self._keys.preferences)
        if raw is None:
            return Preferences()

        try:
            return Preferences.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Corrupt preferences ({e.error_count()} errors). Using defaults.")
            return Preferences()

    def save(self, preferences: Preferences) -> Preferences:
        self._store.set_json(self._keys.preferences, preferences.model_dump(mode="json"))
        return preferences

    def update(self, **fields: Any) -> Preferences:
        """
        Merge fields into the stored preferences

        Nested sections (chart, notifications, trading, security) accept a
        partial dict and are merged key by key.

        Raises:
            ValidationError: If a value is invalid (nothing is written)
        """
        current = self.load().model_dump(mode="json")

        for name, value in fields.items():
            if isinstance(value, BaseModel):
                value = value.model_dump(mode="json")
            if isinstance(value, dict) and isinstance(current.get(name), dict):
                current[name] = {**current[name], **value}
            else:
                current[name] = value

        preferences = Preferences.model_validate(current)
        logger.debug(f"Preferences updated: {sorted(fields)}")
        return self.save(preferences)

    def reset(self) -> Preferences:
        """Restore defaults"""
        self._store.delete(self._keys.preferences)
        return Preferences()
