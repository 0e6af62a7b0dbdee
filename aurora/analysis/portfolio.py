"""Portfolio allocation, metrics, concentration risk and action suggestions.

Every function is pure: prices, betas and thresholds are passed in. Weights
are percentages of total portfolio value (0-100).
"""

from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional, Sequence

import numpy as np

from aurora.config import PortfolioConfig
from aurora.models.insights import ScenarioSummary
from aurora.models.portfolio import (
    ConcentrationRisk,
    HoldingScenarioSnapshot,
    Portfolio,
    PortfolioActionSuggestion,
    PortfolioAllocation,
    PortfolioContext,
    PortfolioHolding,
    PortfolioMetrics,
    PortfolioStressTestResult,
    PositionWeight,
    StressTestEntry,
)
from aurora.utils.logger import setup_logger
from aurora.utils.numbers import clean_number, round_half_up

logger = setup_logger("portfolio")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_BASE_VOLATILITY = 12.0
_DIVERSIFICATION_VOL_SCALE = 15.0
_CONCENTRATION_VOL_PENALTY = 0.3
_LARGEST_POSITIONS = 3


def _round(value: float, digits: int = 2) -> float:
    """Round for presentation; non-finite values collapse to 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return round_half_up(float(value), digits)


def _normalize_prices(prices: Optional[Mapping[str, float]]) -> dict[str, float]:
    """Upper-case tickers and drop non-finite quotes."""
    normalized: dict[str, float] = {}
    for ticker, value in (prices or {}).items():
        quote = clean_number(value)
        if quote is not None:
            normalized[ticker.upper()] = quote
    return normalized


def _holding_value(holding: PortfolioHolding, prices: Mapping[str, float]) -> float:
    price = prices.get(holding.ticker.upper())
    if price is not None and price > 0:
        return holding.shares * price
    return holding.shares * (holding.average_cost_basis or 0.0)


# =========================================================================
# 1. Allocation & metrics
# =========================================================================


def calculate_allocation(
    portfolio: Optional[Portfolio],
    current_prices: Optional[Mapping[str, float]] = None,
) -> list[PortfolioAllocation]:
    """Per-position value, weight and gain/loss (current price, else cost basis)."""
    if portfolio is None or not portfolio.holdings:
        return []

    prices = _normalize_prices(current_prices)
    values = np.array([_holding_value(h, prices) for h in portfolio.holdings], dtype=float)
    costs = np.array([h.average_cost_basis * h.shares for h in portfolio.holdings], dtype=float)
    total = float(values.sum())

    allocations = []
    for holding, value, cost in zip(portfolio.holdings, values, costs):
        gain = value - cost
        allocations.append(
            PortfolioAllocation(
                ticker=holding.ticker.upper(),
                value=_round(value),
                weight_pct=_round(value / total * 100) if total > 0 else 0.0,
                gain_loss=_round(gain),
                gain_loss_pct=_round(gain / cost * 100) if cost > 0 else 0.0,
            )
        )
    return allocations


def calculate_portfolio_beta(
    holdings: Sequence[PortfolioHolding],
    stock_betas: Optional[Mapping[str, float]] = None,
    current_prices: Optional[Mapping[str, float]] = None,
) -> float:
    """Value-weighted beta; holdings without a beta count as 1.0."""
    if not holdings:
        return 0.0

    prices = _normalize_prices(current_prices)
    betas = {k.upper(): v for k, v in (stock_betas or {}).items()}
    rows = []
    for holding in holdings:
        ticker = holding.ticker.upper()
        price = prices.get(ticker, holding.average_cost_basis)
        value = holding.shares * (price or 0.0)
        beta = clean_number(betas.get(ticker))
        if value > 0:
            rows.append((value, 1.0 if beta is None else beta))

    if not rows:
        return 0.0
    values, row_betas = np.array(rows).T
    return _round(float(np.average(row_betas, weights=values)))


def _estimate_volatility(allocations: Sequence[PortfolioAllocation]) -> float:
    """12% floor + diversification term + penalty above a 25% position."""
    if not allocations:
        return 0.0
    weights = np.array([a.weight_pct for a in allocations], dtype=float)
    herfindahl = float(np.sum((weights / 100) ** 2))
    penalty = max(0.0, float(weights.max()) - 25.0)
    volatility = (
        _BASE_VOLATILITY
        + math.sqrt(herfindahl) * _DIVERSIFICATION_VOL_SCALE
        + penalty * _CONCENTRATION_VOL_PENALTY
    )
    return _round(volatility)


def calculate_portfolio_metrics(
    portfolio: Optional[Portfolio],
    current_prices: Optional[Mapping[str, float]] = None,
    stock_betas: Optional[Mapping[str, float]] = None,
) -> PortfolioMetrics:
    allocations = calculate_allocation(portfolio, current_prices)
    holdings = portfolio.holdings if portfolio is not None else ()
    total_value = sum(a.value for a in allocations)
    total_cost = sum(h.average_cost_basis * h.shares for h in holdings)
    gain = total_value - total_cost

    return PortfolioMetrics(
        total_value=_round(total_value),
        total_cost=_round(total_cost),
        total_gain_loss=_round(gain),
        total_gain_loss_pct=_round(gain / total_cost * 100) if total_cost > 0 else 0.0,
        beta=calculate_portfolio_beta(holdings, stock_betas, current_prices),
        volatility=_estimate_volatility(allocations),
    )


# =========================================================================
# 2. Concentration risk
# =========================================================================


def detect_concentration_risk(
    allocations: Sequence[PortfolioAllocation],
    config: Optional[PortfolioConfig] = None,
) -> ConcentrationRisk:
    """Flag positions above the watch and max-single-position thresholds.

    ``level`` is the worst flag seen: a position above
    ``max_single_position_pct`` is ``high``, one above
    ``concentration_watch_pct`` is ``moderate``.
    """
    if not allocations:
        return ConcentrationRisk()

    config = config or PortfolioConfig()
    level = "low"
    warnings = []

    for a in allocations:
        if a.weight_pct > config.max_single_position_pct:
            warnings.append(
                f"{a.ticker} represents {a.weight_pct:.1f}% of portfolio value which exceeds "
                f"the {config.max_single_position_pct:g}% single-position guardrail."
            )
            level = "high"
        elif a.weight_pct > config.concentration_watch_pct:
            warnings.append(
                f"{a.ticker} is {a.weight_pct:.1f}% of the portfolio, above the "
                f"{config.concentration_watch_pct:g}% watch level. Keep it under "
                f"{config.max_single_position_pct:g}% to avoid concentration risk."
            )
            if level == "low":
                level = "moderate"

    largest = sorted(allocations, key=lambda a: a.weight_pct, reverse=True)[:_LARGEST_POSITIONS]
    return ConcentrationRisk(
        level=level,
        warnings=tuple(warnings),
        largest_positions=tuple(PositionWeight(a.ticker, _round(a.weight_pct)) for a in largest),
    )


# =========================================================================
# 3. Action suggestion
# =========================================================================


def suggest_portfolio_action(
    ticker: str,
    portfolio: Optional[Portfolio],
    weight_pct: Optional[float],
    conviction_score: Optional[float] = None,
    config: Optional[PortfolioConfig] = None,
) -> PortfolioActionSuggestion:
    """Suggest buy / hold / trim / sell for *ticker* given its current weight.

    Weight gates come first (sell, then trim). Conviction gates only apply
    when a conviction score is supplied; without one the suggestion falls
    back to the weight-only rules.
    """
    config = config or PortfolioConfig()
    symbol = (ticker or "").upper()
    weight = clean_number(weight_pct) or 0.0
    conviction = clean_number(conviction_score)
    holding = portfolio.find_holding(symbol) if portfolio is not None else None
    has_holdings = portfolio is not None and bool(portfolio.holdings)

    if weight >= config.sell_weight_pct:
        return PortfolioActionSuggestion(
            "sell",
            (
                f"{symbol} accounts for {weight:.1f}% of your portfolio, at or above the "
                f"{config.sell_weight_pct:g}% sell threshold.",
                "Taking profits and redeploying into other ideas can reduce single-stock risk.",
            ),
        )

    if weight >= config.trim_weight_pct:
        return PortfolioActionSuggestion(
            "trim",
            (
                f"{symbol} represents {weight:.1f}% of the portfolio, above the "
                f"{config.trim_weight_pct:g}% trim threshold. Consider trimming to stay diversified.",
            ),
        )

    if holding is None:
        reasoning = [f"{symbol} is not currently held in the portfolio."]
        if not has_holdings:
            reasoning.append("Adding the first holding will establish your portfolio baseline.")
        else:
            reasoning.append("Consider how this addition fits alongside existing positions.")
        if conviction is None:
            reasoning.append(
                f"No conviction score supplied, so the {config.high_conviction:g}-point "
                "high-conviction gate for new positions was not applied."
            )
            return PortfolioActionSuggestion("buy", tuple(reasoning))
        if conviction >= config.high_conviction:
            reasoning.append(
                f"Conviction score {conviction:.0f} meets the {config.high_conviction:g}-point "
                "high-conviction threshold for opening a position."
            )
            return PortfolioActionSuggestion("buy", tuple(reasoning))
        reasoning.append(
            f"Conviction score {conviction:.0f} is below the {config.high_conviction:g}-point "
            "high-conviction threshold for opening a position."
        )
        return PortfolioActionSuggestion("hold", tuple(reasoning))

    if weight <= config.min_meaningful_weight_pct and (
        conviction is None or conviction >= config.moderate_conviction
    ):
        reasoning = [
            f"Position size is only {weight:.1f}%, at or below the "
            f"{config.min_meaningful_weight_pct:g}% minimum meaningful weight."
        ]
        if conviction is None:
            reasoning.append("If conviction is high, you could add to reach a 5-10% allocation.")
        else:
            reasoning.append(
                f"Conviction score {conviction:.0f} clears the {config.moderate_conviction:g}-point "
                "moderate-conviction bar for adding toward a 5-10% allocation."
            )
        return PortfolioActionSuggestion("buy", tuple(reasoning))

    if conviction is not None and conviction < config.low_conviction:
        return PortfolioActionSuggestion(
            "trim",
            (
                f"Conviction score {conviction:.0f} is below the {config.low_conviction:g}-point "
                "low-conviction threshold.",
                f"Reducing {symbol} from {weight:.1f}% frees capital for higher-conviction ideas.",
            ),
        )

    return PortfolioActionSuggestion(
        "hold",
        (
            f"{symbol} sits at {weight:.1f}% which is within the usual "
            f"{config.min_meaningful_weight_pct:g}-{config.trim_weight_pct:g}% guardrails "
            "for single positions.",
            "Maintain current size while monitoring fundamentals and risk exposure.",
        ),
    )


def build_portfolio_context(
    ticker: str,
    portfolio: Optional[Portfolio],
    current_prices: Optional[Mapping[str, float]] = None,
    conviction_score: Optional[float] = None,
    config: Optional[PortfolioConfig] = None,
) -> PortfolioContext:
    """Assemble the portfolio view of *ticker* used by the recommendation composer."""
    symbol = (ticker or "").upper()
    allocations = calculate_allocation(portfolio, current_prices)
    # several purchase lots of one ticker add up to a single position
    weight = _round(sum(a.weight_pct for a in allocations if a.ticker == symbol))
    suggestion = suggest_portfolio_action(symbol, portfolio, weight, conviction_score, config)

    return PortfolioContext(
        position_weight_pct=weight,
        existing_holding=portfolio.find_holding(symbol) if portfolio is not None else None,
        portfolio=portfolio,
        portfolio_metrics=calculate_portfolio_metrics(portfolio, current_prices),
        suggested_action=suggestion.action,
        reasoning=suggestion.reasoning,
    )


# =========================================================================
# 4. Stress test
# =========================================================================


def _midpoint(band_range: Optional[Iterable[float]]) -> float:
    if band_range is None:
        return 0.0
    bounds = list(band_range)
    if len(bounds) != 2:
        return 0.0
    low = clean_number(bounds[0])
    high = clean_number(bounds[1])
    low = 0.0 if low is None else low
    high = low if high is None else high
    return (low + high) / 2


def _project(current_value: float, scenarios: Optional[ScenarioSummary], band: str) -> float:
    band_range = getattr(scenarios, band).expected_return_pct_range if scenarios else None
    return _round(current_value * (1 + _midpoint(band_range) / 100))


def calculate_portfolio_stress_test(
    snapshots: Sequence[HoldingScenarioSnapshot],
) -> PortfolioStressTestResult:
    """Project each holding at its bull/base/bear midpoints and aggregate."""
    if not snapshots:
        return PortfolioStressTestResult()

    entries = []
    for snap in snapshots:
        current = _round(snap.shares * snap.current_price)
        entries.append(
            StressTestEntry(
                ticker=snap.ticker.upper(),
                current_value=current,
                bull_value=_project(current, snap.scenarios, "bull"),
                base_value=_project(current, snap.scenarios, "base"),
                bear_value=_project(current, snap.scenarios, "bear"),
            )
        )

    current_total = sum(e.current_value for e in entries)
    bull_total = sum(e.bull_value for e in entries)
    base_total = sum(e.base_value for e in entries)
    bear_total = sum(e.bear_value for e in entries)

    def change_pct(total: float) -> float:
        if current_total == 0:
            return 0.0
        return _round((total - current_total) / current_total * 100)

    return PortfolioStressTestResult(
        current_value=_round(current_total),
        bull_value=_round(bull_total),
        base_value=_round(base_total),
        bear_value=_round(bear_total),
        bull_change_pct=change_pct(bull_total),
        base_change_pct=change_pct(base_total),
        bear_change_pct=change_pct(bear_total),
        entries=tuple(entries),
    )
