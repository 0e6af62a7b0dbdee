"""Analysis composer - orchestrates every engine into one ``AnalysisResult``.

Pipeline
--------
1. Fundamentals and valuation insights
2. Technical and sentiment reads
3. Scenario bands and planning guidance for the profile
4. Summary (headline, risk score, 3-month conviction, key takeaways)
5. Human-readable view strings and the disclaimer

Everything is a pure function of the inputs except ``generated_at``, which
comes from the injected clock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from aurora.analysis.fundamental import NO_DATA_NOTE, build_fundamentals_insight
from aurora.analysis.planning import generate_planning_guidance
from aurora.analysis.scenarios import generate_scenarios
from aurora.analysis.sentiment import analyze_sentiment
from aurora.analysis.technical import analyze_technicals
from aurora.analysis.valuation import build_valuation_insight
from aurora.models.insights import (
    AnalysisResult,
    AnalysisSummary,
    FundamentalsInsight,
    SentimentRead,
    TechnicalRead,
    ValuationInsight,
)
from aurora.models.profile import RiskTolerance, UserProfile
from aurora.models.stock import StockData
from aurora.utils.logger import setup_logger

logger = setup_logger("composer")

Clock = Callable[[], datetime]

DISCLAIMER = (
    "This analysis is educational only and does not constitute financial advice. "
    "Past performance is not a guide to future results. Consider consulting a "
    "licensed financial professional before making investment decisions."
)

DEFAULT_CONVICTION = 50
HIGH_CONVICTION = 60
LOW_CONVICTION = 40


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def _base_risk(risk_tolerance: RiskTolerance) -> int:
    if risk_tolerance == "low":
        return 3
    if risk_tolerance == "moderate":
        return 5
    if risk_tolerance == "high":
        return 7
    raise ValueError(f"Unknown risk tolerance: {risk_tolerance!r}")


def _risk_score(profile: UserProfile, valuation: ValuationInsight) -> int:
    risk = _base_risk(profile.risk_tolerance)
    if valuation.classification == "rich":
        risk = min(10, risk + 2)
    elif valuation.classification == "cheap":
        risk = max(1, risk - 1)
    return risk


def _conviction(fundamentals: FundamentalsInsight, technical: TechnicalRead) -> int:
    if fundamentals.classification == "weak" or technical.trend == "bearish":
        return LOW_CONVICTION
    if fundamentals.classification == "strong" and technical.trend == "bullish":
        return HIGH_CONVICTION
    return DEFAULT_CONVICTION


def _key_takeaways(
    fundamentals: FundamentalsInsight,
    valuation: ValuationInsight,
    technical: TechnicalRead,
    sentiment: SentimentRead,
) -> list[str]:
    takeaways = [
        f"Fundamentals: {fundamentals.classification}",
        f"Quality score: {fundamentals.quality_score}/100",
        f"Valuation: {valuation.classification}",
    ]
    if fundamentals.drivers:
        takeaways.append(f"Key driver: {fundamentals.drivers[0]}")
    if fundamentals.cautionary_notes:
        takeaways.append(f"Watch list: {fundamentals.cautionary_notes[0]}")
    if valuation.commentary:
        takeaways.append(f"Valuation context: {valuation.commentary}")
    takeaways.append(f"Technical trend: {technical.trend}")
    takeaways.append(f"Analyst consensus: {sentiment.consensus_text}")
    if sentiment.target_vs_price and "Unknown" not in sentiment.target_vs_price:
        takeaways.append(f"Analyst targets suggest {sentiment.target_vs_price}")
    return takeaways


def _summary(
    profile: UserProfile,
    stock: StockData,
    fundamentals: FundamentalsInsight,
    valuation: ValuationInsight,
    technical: TechnicalRead,
    sentiment: SentimentRead,
) -> AnalysisSummary:
    name = stock.name or stock.ticker
    headline = (
        f"{name} ({stock.ticker}) shows {fundamentals.classification} fundamentals "
        f"with {valuation.classification} valuation."
    )
    if valuation.commentary and valuation.classification != "unknown":
        headline = f"{headline} {valuation.commentary}"

    return AnalysisSummary(
        headline_view=headline,
        risk_score=_risk_score(profile, valuation),
        conviction_score_3m=_conviction(fundamentals, technical),
        key_takeaways=tuple(_key_takeaways(fundamentals, valuation, technical, sentiment)),
    )


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

def _fundamentals_view(stock: StockData, insight: FundamentalsInsight) -> str:
    f = stock.fundamentals
    if f is None:
        return NO_DATA_NOTE

    parts = [f"Classification: {insight.classification.upper()}"]
    if insight.quality_score > 0:
        parts.append(f"Quality Score: {insight.quality_score}/100")
    if insight.drivers:
        parts.append(f"Drivers: {', '.join(insight.drivers)}")
    if insight.cautionary_notes:
        parts.append(f"Watch: {', '.join(insight.cautionary_notes)}")
    if f.trailing_pe:
        parts.append(f"Trailing P/E: {f.trailing_pe:.1f}")
    if f.forward_pe:
        parts.append(f"Forward P/E: {f.forward_pe:.1f}")
    if f.eps_growth_yoy_pct:
        parts.append(f"EPS Growth (YoY): {f.eps_growth_yoy_pct:.1f}%")
    if f.net_margin_pct:
        parts.append(f"Net Margin: {f.net_margin_pct:.1f}%")
    if f.free_cash_flow_yield_pct:
        parts.append(f"FCF Yield: {f.free_cash_flow_yield_pct:.1f}%")
    if f.roe:
        parts.append(f"ROE: {f.roe:.1f}%")
    return " | ".join(parts)


def _valuation_view(stock: StockData, insight: ValuationInsight) -> str:
    if stock.fundamentals is None:
        return "Valuation data not available."

    parts = [f"Classification: {insight.classification.upper()}"]
    if insight.valuation_score > 0:
        parts.append(f"Composite Score: {insight.valuation_score}/100")
    if insight.commentary:
        parts.append(f"Notes: {insight.commentary}")
    if insight.drivers:
        parts.append(f"Drivers: {', '.join(insight.drivers)}")
    if insight.cautionary_notes:
        parts.append(f"Watch: {', '.join(insight.cautionary_notes)}")
    if insight.peg_ratio is not None:
        parts.append(f"PEG Ratio: {insight.peg_ratio:.2f}")
    if insight.earnings_yield_pct is not None:
        parts.append(f"Earnings Yield: {insight.earnings_yield_pct:.1f}%")
    if insight.free_cash_flow_yield_pct is not None:
        parts.append(f"FCF Yield: {insight.free_cash_flow_yield_pct:.1f}%")
    if insight.dividend_yield_pct is not None:
        parts.append(f"Dividend Yield: {insight.dividend_yield_pct:.2f}%")
    return " | ".join(parts)


def _technical_view(stock: StockData, read: TechnicalRead) -> str:
    t = stock.technicals
    if t is None:
        return "Technical data not available."
    parts = [
        f"Trend: {read.trend}",
        f"Momentum: {read.momentum}",
        f"Position: {read.price_position}",
    ]
    if t.rsi14:
        parts.append(f"RSI(14): {t.rsi14:.1f}")
    return " | ".join(parts)


def _sentiment_view(read: SentimentRead) -> str:
    return " | ".join(
        [
            f"Analyst Consensus: {read.consensus_text}",
            f"Target vs Price: {read.target_vs_price}",
            f"News: {read.news_highlight}",
        ]
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def analyze_stock(
    profile: UserProfile,
    stock: StockData,
    horizon_months: int = 3,
    clock: Optional[Clock] = None,
) -> AnalysisResult:
    """Run the full analysis for one stock and investor profile.

    Args:
        profile: Investor risk tolerance, horizon and objective.
        stock: Market inputs; any block or field may be absent.
        horizon_months: Scenario horizon (>= 1).
        clock: Returns "now"; defaults to UTC wall-clock time.

    Raises:
        ValueError: if *profile* or *stock* is missing.
    """
    if profile is None or stock is None:
        raise ValueError("User profile and stock data are required")

    logger.info("Analyzing %s (%s risk, %s horizon)",
                stock.ticker, profile.risk_tolerance, profile.horizon)

    fundamentals = build_fundamentals_insight(stock)
    valuation = build_valuation_insight(stock)
    technical = analyze_technicals(stock)
    sentiment = analyze_sentiment(stock)
    scenarios = generate_scenarios(profile, horizon_months)
    guidance = generate_planning_guidance(profile)
    summary = _summary(profile, stock, fundamentals, valuation, technical, sentiment)

    return AnalysisResult(
        ticker=stock.ticker,
        name=stock.name,
        summary=summary,
        fundamentals_view=_fundamentals_view(stock, fundamentals),
        valuation_view=_valuation_view(stock, valuation),
        technical_view=_technical_view(stock, technical),
        sentiment_view=_sentiment_view(sentiment),
        scenarios=scenarios,
        planning_guidance=guidance,
        fundamentals_insight=fundamentals,
        valuation_insight=valuation,
        technical=technical,
        sentiment=sentiment,
        disclaimer=DISCLAIMER,
        generated_at=format_timestamp((clock or utc_now)()),
    )
