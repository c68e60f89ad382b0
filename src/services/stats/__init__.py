"""
Stats Module - derived trading stats for the analysis history.

Usage:
    from src.services.stats import compute_trading_stats

    stats = compute_trading_stats(history_log.list())
"""

from src.services.stats.trading import compute_trading_stats, parse_reward_component, round_half_up
from src.services.stats.schemas import TradingStats, DefinitionsContract

__all__ = [
    "compute_trading_stats",
    "parse_reward_component",
    "round_half_up",
    "TradingStats",
    "DefinitionsContract",
]
