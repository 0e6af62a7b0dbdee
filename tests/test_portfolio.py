"""Tests for aurora.analysis.portfolio -- allocation, concentration, actions, stress test."""

import pytest

from aurora.analysis.portfolio import (
    build_portfolio_context,
    calculate_allocation,
    calculate_portfolio_beta,
    calculate_portfolio_metrics,
    calculate_portfolio_stress_test,
    detect_concentration_risk,
    suggest_portfolio_action,
)
from aurora.analysis.scenarios import generate_scenarios
from aurora.config import PortfolioConfig
from aurora.models import (
    HoldingScenarioSnapshot,
    Portfolio,
    PortfolioAllocation,
    PortfolioHolding,
    UserProfile,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_allocations(*weights):
    return [
        PortfolioAllocation(ticker=f"T{i}", value=w * 100, weight_pct=w, gain_loss=0.0, gain_loss_pct=0.0)
        for i, w in enumerate(weights)
    ]


def _held(ticker="AAPL"):
    return Portfolio(
        id="p1",
        name="Core",
        holdings=(PortfolioHolding(ticker=ticker, shares=10, average_cost_basis=100.0),),
    )


# ---------------------------------------------------------------------------
# Tests for allocation and metrics
# ---------------------------------------------------------------------------

class TestAllocation:

    def test_weights_and_gains(self, sample_portfolio, sample_prices):
        allocations = {a.ticker: a for a in calculate_allocation(sample_portfolio, sample_prices)}
        assert allocations["AAPL"].value == 1500.0
        assert allocations["AAPL"].weight_pct == 50.0
        assert allocations["AAPL"].gain_loss_pct == 50.0
        assert allocations["MSFT"].weight_pct == pytest.approx(36.67)
        assert allocations["TSLA"].gain_loss == -100.0
        assert allocations["TSLA"].gain_loss_pct == -20.0

    def test_weights_sum_to_100(self, sample_portfolio, sample_prices):
        total = sum(a.weight_pct for a in calculate_allocation(sample_portfolio, sample_prices))
        assert total == pytest.approx(100.0, abs=0.05)

    def test_missing_price_falls_back_to_cost_basis(self, sample_portfolio):
        allocations = calculate_allocation(sample_portfolio, {"aapl": 150.0, "MSFT": float("nan")})
        by_ticker = {a.ticker: a for a in allocations}
        assert by_ticker["AAPL"].value == 1500.0
        assert by_ticker["MSFT"].value == 1000.0
        assert by_ticker["MSFT"].gain_loss == 0.0

    def test_empty_portfolio(self):
        assert calculate_allocation(Portfolio(id="p", name="Empty"), {}) == []
        assert calculate_allocation(None) == []

    def test_metrics(self, sample_portfolio, sample_prices):
        metrics = calculate_portfolio_metrics(
            sample_portfolio, sample_prices, stock_betas={"AAPL": 1.2, "MSFT": 0.9}
        )
        assert metrics.total_value == 3000.0
        assert metrics.total_cost == 2500.0
        assert metrics.total_gain_loss == 500.0
        assert metrics.total_gain_loss_pct == 20.0
        assert metrics.beta == pytest.approx(1.06)
        assert metrics.volatility == pytest.approx(29.01, abs=0.01)

    def test_beta_defaults_to_market(self, sample_portfolio, sample_prices):
        assert calculate_portfolio_beta(sample_portfolio.holdings, None, sample_prices) == 1.0
        assert calculate_portfolio_beta((), None, sample_prices) == 0.0

    def test_empty_metrics(self):
        metrics = calculate_portfolio_metrics(Portfolio(id="p", name="Empty"))
        assert metrics.total_value == 0.0
        assert metrics.volatility == 0.0


# ---------------------------------------------------------------------------
# Tests for detect_concentration_risk
# ---------------------------------------------------------------------------

class TestConcentrationRisk:

    def test_position_above_max_is_high(self, sample_portfolio, sample_prices):
        risk = detect_concentration_risk(calculate_allocation(sample_portfolio, sample_prices))
        assert risk.level == "high"
        assert len(risk.warnings) == 2
        assert "25% single-position guardrail" in risk.warnings[0]
        assert [p.ticker for p in risk.largest_positions] == ["AAPL", "MSFT", "TSLA"]

    def test_watch_level_is_moderate(self):
        risk = detect_concentration_risk(_make_allocations(22, 18, 15, 15, 15, 15))
        assert risk.level == "moderate"
        assert "20% watch level" in risk.warnings[0]

    def test_thresholds_are_strict(self):
        assert detect_concentration_risk(_make_allocations(25, 25, 25, 25)).level == "moderate"
        assert detect_concentration_risk(_make_allocations(20, 20, 20, 20, 20)).level == "low"

    def test_largest_positions_capped_at_three(self):
        risk = detect_concentration_risk(_make_allocations(10, 30, 15, 20, 25))
        assert [p.weight_pct for p in risk.largest_positions] == [30, 25, 20]

    def test_custom_config(self):
        config = PortfolioConfig(max_single_position_pct=10, concentration_watch_pct=5)
        risk = detect_concentration_risk(_make_allocations(12, 8, 80), config)
        assert risk.level == "high"
        assert len(risk.warnings) == 3

    def test_empty(self):
        risk = detect_concentration_risk([])
        assert risk.level == "low"
        assert risk.warnings == ()


# ---------------------------------------------------------------------------
# Tests for suggest_portfolio_action
# ---------------------------------------------------------------------------

class TestSuggestPortfolioAction:

    def test_oversized_position_is_sell(self):
        suggestion = suggest_portfolio_action("AAPL", _held(), 26.0, conviction_score=90)
        assert suggestion.action == "sell"
        assert "25% sell threshold" in suggestion.reasoning[0]

    def test_sell_threshold_is_inclusive(self):
        assert suggest_portfolio_action("AAPL", _held(), 25.0).action == "sell"

    def test_large_position_is_trim(self):
        suggestion = suggest_portfolio_action("AAPL", _held(), 21.0)
        assert suggestion.action == "trim"
        assert "20% trim threshold" in suggestion.reasoning[0]

    def test_new_position_with_high_conviction_is_buy(self):
        suggestion = suggest_portfolio_action("NVDA", _held(), 0.0, conviction_score=65)
        assert suggestion.action == "buy"
        assert any("60-point" in r for r in suggestion.reasoning)

    def test_new_position_with_middling_conviction_is_hold(self):
        suggestion = suggest_portfolio_action("NVDA", _held(), 0.0, conviction_score=55)
        assert suggestion.action == "hold"
        assert any("below the 60-point" in r for r in suggestion.reasoning)

    def test_new_position_without_conviction_is_buy(self):
        assert suggest_portfolio_action("NVDA", _held(), 0.0).action == "buy"

    def test_first_holding(self):
        suggestion = suggest_portfolio_action("NVDA", Portfolio(id="p", name="Empty"), 0.0)
        assert suggestion.action == "buy"
        assert "first holding" in suggestion.reasoning[1]

    def test_small_holding_with_moderate_conviction_is_buy(self):
        suggestion = suggest_portfolio_action("aapl", _held(), 2.0, conviction_score=55)
        assert suggestion.action == "buy"
        assert "3% minimum meaningful weight" in suggestion.reasoning[0]

    def test_small_holding_with_weak_conviction_is_hold(self):
        assert suggest_portfolio_action("AAPL", _held(), 2.0, conviction_score=45).action == "hold"

    def test_low_conviction_is_trim(self):
        suggestion = suggest_portfolio_action("AAPL", _held(), 10.0, conviction_score=30)
        assert suggestion.action == "trim"
        assert "40-point" in suggestion.reasoning[0]

    def test_sized_holding_is_hold(self):
        suggestion = suggest_portfolio_action("AAPL", _held(), 10.0, conviction_score=55)
        assert suggestion.action == "hold"
        assert "3-20% guardrails" in suggestion.reasoning[0]


class TestPortfolioContext:

    def test_context_for_held_ticker(self, sample_portfolio, sample_prices):
        context = build_portfolio_context("aapl", sample_portfolio, sample_prices, conviction_score=60)
        assert context.position_weight_pct == 50.0
        assert context.existing_holding.ticker == "AAPL"
        assert context.portfolio is sample_portfolio
        assert context.portfolio_metrics.total_value == 3000.0
        assert context.suggested_action == "sell"
        assert context.reasoning

    def test_context_for_new_ticker(self, sample_portfolio, sample_prices):
        context = build_portfolio_context("NVDA", sample_portfolio, sample_prices, conviction_score=60)
        assert context.position_weight_pct == 0.0
        assert context.existing_holding is None
        assert context.suggested_action == "buy"

    def test_split_lots_add_up_to_one_position(self):
        book = Portfolio(
            id="p",
            name="Lots",
            holdings=(
                PortfolioHolding("AAPL", shares=1, average_cost_basis=100.0),
                PortfolioHolding("MSFT", shares=7, average_cost_basis=100.0),
                PortfolioHolding("aapl", shares=1, average_cost_basis=120.0),
            ),
        )
        prices = {"AAPL": 150.0, "MSFT": 100.0}
        assert [a.weight_pct for a in calculate_allocation(book, prices)] == [15.0, 70.0, 15.0]

        context = build_portfolio_context("AAPL", book, prices, conviction_score=60)
        assert context.position_weight_pct == 30.0
        assert context.suggested_action == "sell"


# ---------------------------------------------------------------------------
# Tests for calculate_portfolio_stress_test
# ---------------------------------------------------------------------------

class TestStressTest:

    def test_projects_band_midpoints(self):
        scenarios = generate_scenarios(UserProfile("moderate", "5-10", "balanced"))
        result = calculate_portfolio_stress_test(
            [HoldingScenarioSnapshot(ticker="aapl", shares=10, current_price=150.0, scenarios=scenarios)]
        )
        assert result.current_value == 1500.0
        assert result.bull_value == pytest.approx(1672.5)
        assert result.base_value == pytest.approx(1507.5)
        assert result.bear_value == pytest.approx(1350.0)
        assert result.bull_change_pct == pytest.approx(11.5)
        assert result.bear_change_pct == pytest.approx(-10.0)
        assert result.entries[0].ticker == "AAPL"

    def test_holding_without_scenarios_is_flat(self):
        result = calculate_portfolio_stress_test(
            [HoldingScenarioSnapshot(ticker="MSFT", shares=5, current_price=200.0)]
        )
        assert result.bull_value == result.bear_value == result.current_value == 1000.0
        assert result.base_change_pct == 0.0

    def test_empty(self):
        result = calculate_portfolio_stress_test([])
        assert result.current_value == 0.0
        assert result.entries == ()
