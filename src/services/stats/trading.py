"""
Trading Stats - aggregation of the analysis history into TradingStats.

Implements:
- win rate (confidence threshold)
- best pair (most frequent)
- average risk:reward
- profit factor / net PnL display scores

The profit factor and net PnL are heuristic display metrics derived from the
win count; they are not real P&L and must not be presented as such.
"""

from collections import Counter
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

from config.config import WIN_CONFIDENCE_THRESHOLD
from src.services.stats.schemas import TradingStats


DEFAULT_REWARD_COMPONENT = 2.0


# =============================================================================
# Helpers
# =============================================================================


def round_half_up(value: float, digits: int = 1) -> float:
    """Round the exact binary value half-up (matches fixed-point display rounding)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_reward_component(ratio: str | None) -> float:
    """Reward part of a "risk:reward" string; malformed ratios count as 2."""
    if not isinstance(ratio, str):
        return DEFAULT_REWARD_COMPONENT

    parts = ratio.split(":")
    if len(parts) != 2:
        return DEFAULT_REWARD_COMPONENT

    try:
        reward = float(parts[1])
    except ValueError:
        return DEFAULT_REWARD_COMPONENT

    # nan / inf are malformed too
    if reward != reward or reward in (float("inf"), float("-inf")):
        return DEFAULT_REWARD_COMPONENT
    return reward


def find_best_pair(pairs: Iterable[str]) -> str:
    """Most frequent pair; on ties the pair seen first wins."""
    counts = Counter(pairs)
    if not counts:
        return "-"
    # Counter keeps first-insertion order and max() returns the first maximum
    return max(counts, key=counts.__getitem__)


# =============================================================================
# Aggregation
# =============================================================================


def compute_trading_stats(history: Sequence) -> TradingStats:
    """
    Compute TradingStats from a history snapshot

    Args:
        history: Sequence of HistoryEntry (any order)

    Returns:
        TradingStats (all zeros with best_pair "-" for an empty history)
    """
    total = len(history)
    if total == 0:
        return TradingStats()

    wins = sum(1 for entry in history if entry.confidence > WIN_CONFIDENCE_THRESHOLD)
    win_rate = round_half_up(wins / total * 100, 1)

    rewards = [parse_reward_component(entry.risk_reward_ratio) for entry in history]
    avg_reward = sum(rewards) / total

    return TradingStats(
        total_trades=total,
        win_rate=win_rate,
        profit_factor=1.1 + wins * 0.1,
        net_pnl=total * 125 - (total - wins) * 75,
        average_risk_reward=f"1:{round_half_up(avg_reward, 1):.1f}",
        best_pair=find_best_pair(entry.pair for entry in history),
    )
