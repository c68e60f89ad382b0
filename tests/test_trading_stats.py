"""
Unit tests for trading stats aggregation
"""

import pytest

from conftest import make_entry
from src.services.stats import (
    DefinitionsContract,
    TradingStats,
    compute_trading_stats,
    parse_reward_component,
    round_half_up,
)
from src.services.stats.trading import find_best_pair


def test_empty_history():
    stats = compute_trading_stats([])

    assert stats == TradingStats()
    assert stats.average_risk_reward == "0:0"
    assert stats.best_pair == "-"
    assert stats.total_trades == 0


def test_one_win_of_three():
    history = [
        make_entry(pair="EUR/USD", confidence=90),
        make_entry(pair="EUR/USD", confidence=60),
        make_entry(pair="GBP/USD", confidence=70),
    ]

    stats = compute_trading_stats(history)
    assert stats.win_rate == 33.3
    assert stats.best_pair == "EUR/USD"
    assert stats.total_trades == 3


def test_win_threshold_is_strict():
    """Confidence must be above 75 to count as a win"""
    history = [
        make_entry(pair="EUR/USD", confidence=90),
        make_entry(pair="EUR/USD", confidence=60),
        make_entry(pair="GBP/USD", confidence=85),
    ]
    assert compute_trading_stats(history).win_rate == 66.7

    assert compute_trading_stats([make_entry(confidence=75)]).win_rate == 0
    assert compute_trading_stats([make_entry(confidence=75.5)]).win_rate == 100


def test_display_scores():
    """Profit factor and net PnL follow the win count"""
    history = [
        make_entry(confidence=80),
        make_entry(confidence=90),
        make_entry(confidence=10),
    ]

    stats = compute_trading_stats(history)
    assert stats.profit_factor == pytest.approx(1.3)
    assert stats.net_pnl == 3 * 125 - 1 * 75


def test_average_risk_reward():
    history = [
        make_entry(risk_reward_ratio="1:2"),
        make_entry(risk_reward_ratio="1:3"),
        make_entry(risk_reward_ratio="1:2.5"),
    ]
    assert compute_trading_stats(history).average_risk_reward == "1:2.5"

    # Malformed ratios count as 2
    history = [make_entry(risk_reward_ratio="1:4"), make_entry(risk_reward_ratio="n/a")]
    assert compute_trading_stats(history).average_risk_reward == "1:3.0"


@pytest.mark.parametrize(
    "ratio, expected",
    [
        ("1:3", 3.0),
        ("1:1.5", 1.5),
        ("2", 2.0),
        ("1:2:3", 2.0),
        ("1:abc", 2.0),
        ("1:nan", 2.0),
        (None, 2.0),
    ],
)
def test_parse_reward_component(ratio, expected):
    assert parse_reward_component(ratio) == expected


def test_best_pair_tie_first_seen_wins():
    assert find_best_pair(["GBP/USD", "EUR/USD", "EUR/USD", "GBP/USD"]) == "GBP/USD"
    assert find_best_pair(["XAU/USD", "EUR/USD", "EUR/USD"]) == "EUR/USD"
    assert find_best_pair([]) == "-"


def test_round_half_up():
    assert round_half_up(2.25) == 2.3
    assert round_half_up(66.66666) == 66.7
    assert round_half_up(0.05) == 0.1


def test_definitions_contract():
    definitions = DefinitionsContract()
    assert "75" in definitions.win_rate
    assert "not real P&L" in definitions.net_pnl
