"""Active manager recommendation composer.

Turns an ``AnalysisResult`` plus the investor profile (and, optionally, the
investor's current book) into one buy / hold / trim / sell call.

Stages
------
1. Return bias from the scenario point estimate
2. Base action from the bias
3. Risk guardrails (risk score and position weight)
4. Portfolio override, then guardrails again
5. Profile adjustment, then guardrails again
6. Confidence score
7. Headline, de-duplicated rationale / risk flags / notes

Only the portfolio review may raise exposure, and it always says so in the
rationale. Guardrails run after every later stage, so they have the final word.
"""

from __future__ import annotations

from typing import Literal, NamedTuple, Optional

from aurora.analysis.portfolio import suggest_portfolio_action
from aurora.config import ActiveManagerConfig
from aurora.models.insights import AnalysisResult
from aurora.models.portfolio import (
    Portfolio,
    PortfolioAction,
    PortfolioActionSuggestion,
    PortfolioContext,
)
from aurora.models.profile import InvestmentHorizon, UserProfile
from aurora.models.recommendation import ActiveManagerRecommendation, RecommendationHorizon
from aurora.utils.logger import setup_logger
from aurora.utils.numbers import clamp, clean_number, dedupe, round_score

logger = setup_logger("active_manager")

ReturnBias = Literal["positive", "negative", "neutral"]


class GuardrailResult(NamedTuple):
    action: PortfolioAction
    triggered: tuple[str, ...]


# ---------------------------------------------------------------------------
# Stage helpers
# ---------------------------------------------------------------------------

def determine_return_bias(
    point_estimate_pct: Optional[float],
    config: Optional[ActiveManagerConfig] = None,
) -> ReturnBias:
    config = config or ActiveManagerConfig()
    estimate = clean_number(point_estimate_pct)
    if estimate is None:
        return "neutral"
    if estimate >= config.positive_return_pct:
        return "positive"
    if estimate <= config.negative_return_pct:
        return "negative"
    return "neutral"


def determine_base_action(
    bias: ReturnBias,
    point_estimate_pct: Optional[float],
    config: Optional[ActiveManagerConfig] = None,
) -> PortfolioAction:
    config = config or ActiveManagerConfig()
    if bias == "positive":
        return "buy"
    if bias == "negative":
        estimate = clean_number(point_estimate_pct)
        if estimate is not None and estimate <= config.sell_return_pct:
            return "sell"
        return "trim"
    if bias == "neutral":
        return "hold"
    raise ValueError(f"Unknown return bias: {bias!r}")


def apply_risk_guardrails(
    action: PortfolioAction,
    risk_score: Optional[float],
    weight_pct: Optional[float],
    config: Optional[ActiveManagerConfig] = None,
) -> GuardrailResult:
    """Downgrade *action* when risk or position weight is too high.

    * risk >= ``high_risk_score`` never buys;
    * weight >= ``guardrail_hold_weight_pct`` never buys;
    * weight >= ``guardrail_trim_weight_pct`` never holds (or buys).
    """
    config = config or ActiveManagerConfig()
    risk = clean_number(risk_score) or 0.0
    weight = clean_number(weight_pct) or 0.0
    triggered = []

    if action == "buy" and risk >= config.high_risk_score:
        action = "hold"
        triggered.append(
            f"Risk score {risk:g}/10 is at or above the {config.high_risk_score:g} "
            "risk guardrail, so new buying is held back."
        )
    if action == "buy" and weight >= config.guardrail_hold_weight_pct:
        action = "hold"
        triggered.append(
            f"Position weight of {weight:.1f}% of the portfolio is at or above the "
            f"{config.guardrail_hold_weight_pct:g}% guardrail, so adding is paused."
        )
    if action == "hold" and weight >= config.guardrail_trim_weight_pct:
        action = "trim"
        triggered.append(
            f"Position weight of {weight:.1f}% of the portfolio is at or above the "
            f"{config.guardrail_trim_weight_pct:g}% guardrail; trimming keeps the book diversified."
        )

    if triggered:
        logger.debug("Guardrails moved action to %s: %s", action, "; ".join(triggered))
    return GuardrailResult(action, tuple(triggered))


def map_horizon(horizon: InvestmentHorizon) -> RecommendationHorizon:
    if horizon == "1-3":
        return "short_term"
    if horizon == "5-10":
        return "medium_term"
    if horizon == "10+":
        return "long_term"
    raise ValueError(f"Unknown investment horizon: {horizon!r}")


def calculate_confidence_score(
    conviction_score: Optional[float],
    bias: ReturnBias,
    risk_score: Optional[float],
    weight_pct: Optional[float],
    profile: UserProfile,
    config: Optional[ActiveManagerConfig] = None,
) -> int:
    """Adjust the 3-month conviction into a 0-100 confidence score."""
    config = config or ActiveManagerConfig()
    score = clean_number(conviction_score)
    score = config.default_conviction if score is None else score
    risk = clean_number(risk_score) or 0.0
    weight = clean_number(weight_pct) or 0.0

    if bias == "positive":
        score += 5
    elif bias == "negative":
        score -= 10

    if risk >= config.high_risk_score:
        score -= 15
    elif risk >= config.moderate_risk_score:
        score -= 5

    if weight >= config.guardrail_hold_weight_pct:
        score -= 10

    if profile.risk_tolerance == "high" and bias == "positive" and risk < config.high_risk_score:
        score += 5
    if profile.risk_tolerance == "low" and bias == "positive":
        score -= 5

    return round_score(clamp(score, 0, 100))


def _action_label(action: PortfolioAction) -> str:
    if action == "buy":
        return "Buy"
    if action == "hold":
        return "Hold"
    if action == "trim":
        return "Trim"
    if action == "sell":
        return "Sell"
    raise ValueError(f"Unknown action: {action!r}")


# ---------------------------------------------------------------------------
# Portfolio / profile stages
# ---------------------------------------------------------------------------

def _portfolio_suggestion(
    ticker: str,
    context: PortfolioContext,
    conviction: Optional[float],
    config: ActiveManagerConfig,
) -> PortfolioActionSuggestion:
    """Use the context's precomputed suggestion, else ask the portfolio engine."""
    if context.suggested_action is not None:
        return PortfolioActionSuggestion(context.suggested_action, context.reasoning)

    portfolio = context.portfolio
    if portfolio is None and context.existing_holding is not None:
        portfolio = Portfolio(id="context", name="context", holdings=(context.existing_holding,))
    return suggest_portfolio_action(
        ticker, portfolio, context.position_weight_pct, conviction, config.portfolio
    )


def _profile_adjustment(
    action: PortfolioAction,
    bias: ReturnBias,
    profile: UserProfile,
) -> tuple[PortfolioAction, Optional[str]]:
    if profile.risk_tolerance == "low" and action == "buy" and bias != "positive":
        return "hold", "Low risk tolerance keeps a buy without a positive return bias at hold."
    if profile.risk_tolerance == "high" and action == "trim" and bias != "negative":
        return "hold", (
            "High risk tolerance favours holding over trimming while the return bias is not negative."
        )
    return action, None


def _risk_flags(
    risk: float,
    weight: float,
    bias: ReturnBias,
    point_estimate: float,
    profile: UserProfile,
    config: ActiveManagerConfig,
) -> list[str]:
    flags = []
    if risk >= config.high_risk_score:
        flags.append(f"Risk score {risk:g}/10 indicates significant uncertainty in return estimates.")
    elif risk >= config.moderate_risk_score:
        flags.append(f"Risk score {risk:g}/10 sits in the moderate band; size positions accordingly.")
    if weight >= config.guardrail_trim_weight_pct:
        flags.append(
            f"Position weight of {weight:.1f}% exceeds the {config.guardrail_trim_weight_pct:g}% "
            "concentration limit for diversified portfolios."
        )
    elif weight >= config.guardrail_hold_weight_pct:
        flags.append(
            f"Position weight of {weight:.1f}% is above the {config.guardrail_hold_weight_pct:g}% "
            "concentration watch level."
        )
    if profile.risk_tolerance == "low" and risk >= config.moderate_risk_score:
        flags.append("Risk level may exceed tolerance parameters for conservative profiles.")
    if bias == "negative":
        flags.append(f"Scenario point estimate of {point_estimate:+.1f}% skews negative.")
    return flags


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_active_manager_recommendation(
    analysis: Optional[AnalysisResult],
    profile: UserProfile,
    portfolio_context: Optional[PortfolioContext] = None,
    config: Optional[ActiveManagerConfig] = None,
) -> Optional[ActiveManagerRecommendation]:
    """Compose a portfolio-aware action recommendation.

    Returns ``None`` (and logs a warning) when *analysis* or its ticker is
    missing, since the recommendation only augments an analysis.

    Raises:
        ValueError: if *profile* is missing.
    """
    if profile is None:
        raise ValueError("User profile is required for an active manager recommendation")
    if analysis is None or not analysis.ticker:
        logger.warning("Skipping active manager recommendation: analysis or ticker missing")
        return None

    config = config or ActiveManagerConfig()
    ticker = analysis.ticker
    scenarios = analysis.scenarios
    point_estimate = scenarios.point_estimate_return_pct
    risk = clean_number(analysis.summary.risk_score) or 0.0
    conviction = clean_number(analysis.summary.conviction_score_3m)
    weight = clean_number(portfolio_context.position_weight_pct) if portfolio_context else None
    weight = weight or 0.0

    rationale: list[str] = []
    notes: list[str] = []

    # 1-2. bias and base action
    bias = determine_return_bias(point_estimate, config)
    action = determine_base_action(bias, point_estimate, config)
    rationale.append(
        f"Scenario point estimate of {point_estimate:+.1f}% over {scenarios.horizon_months}M "
        f"implies a {bias} return bias."
    )
    rationale.append(f"Return bias maps to a base action of {action}.")

    # 3. guardrails
    action, triggered = apply_risk_guardrails(action, risk, weight, config)
    rationale.extend(triggered)

    # 4. portfolio override
    if portfolio_context is not None:
        conviction_gate = None if conviction is None else clamp(conviction, 0, 100)
        suggestion = _portfolio_suggestion(ticker, portfolio_context, conviction_gate, config)
        if suggestion.action != action:
            rationale.append(
                f"Portfolio review suggests {suggestion.action} instead of {action}."
            )
        action = suggestion.action
        rationale.extend(suggestion.reasoning)
        action, triggered = apply_risk_guardrails(action, risk, weight, config)
        rationale.extend(triggered)

    # 5. profile adjustment
    action, adjustment = _profile_adjustment(action, bias, profile)
    if adjustment:
        rationale.append(adjustment)
        action, triggered = apply_risk_guardrails(action, risk, weight, config)
        rationale.extend(triggered)

    # 6. confidence
    confidence = calculate_confidence_score(conviction, bias, risk, weight, profile, config)

    # 7. compose
    fundamentals = analysis.fundamentals_insight
    valuation = analysis.valuation_insight
    rationale.append(
        f"Fundamentals screen {fundamentals.classification} "
        f"(quality {fundamentals.quality_score}/100) with {valuation.classification} valuation."
    )
    if fundamentals.drivers:
        rationale.append(f"Key driver: {fundamentals.drivers[0]}")

    if weight > config.portfolio.max_single_position_pct:
        notes.append(
            f"Position size adjusted to respect {config.portfolio.max_single_position_pct:g}% "
            "concentration limit per framework guardrails."
        )
    notes.append(scenarios.uncertainty_comment)
    notes.append(analysis.planning_guidance.language_notes)

    headline = (
        f"{_action_label(action)} – {point_estimate:+.1f}% expected over "
        f"{scenarios.horizon_months}M"
    )

    logger.info("%s: %s (confidence %d, bias %s)", ticker, action, confidence, bias)
    return ActiveManagerRecommendation(
        ticker=ticker,
        primary_action=action,
        horizon=map_horizon(profile.horizon),
        confidence_score=confidence,
        headline=headline,
        # only a three-month scenario fills the 3M expectation
        expected_return_3m=point_estimate if scenarios.horizon_months == 3 else None,
        rationale=tuple(dedupe(rationale)),
        risk_flags=tuple(dedupe(_risk_flags(risk, weight, bias, point_estimate, profile, config))),
        notes=tuple(dedupe(notes)),
    )
