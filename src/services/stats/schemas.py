"""
Stats Schemas - Pydantic models for derived trading stats.
"""

from pydantic import BaseModel


class DefinitionsContract(BaseModel):
    """Metric definitions for the UI."""

    win_rate: str = "analyses with confidence > 75 / total analyses, percent, 1 decimal"
    best_pair: str = "most frequent pair, the pair seen first wins ties"
    average_risk_reward: str = "1:mean(reward component of risk:reward), 1 decimal"
    profit_factor: str = "1.1 + 0.1 * wins (heuristic display score, not real P&L)"
    net_pnl: str = "125 * total - 75 * losses (heuristic display score, not real P&L)"


class TradingStats(BaseModel):
    """Derived stats of an identity's history. Never edited directly."""

    win_rate: float = 0
    total_trades: int = 0
    profit_factor: float = 0
    net_pnl: float = 0
    average_risk_reward: str = "0:0"
    best_pair: str = "-"
