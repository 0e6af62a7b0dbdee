"""Outputs of the analysis engines and the composed ``AnalysisResult``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from aurora.models.base import (
    Serializable,
    clean_numeric_fields,
    freeze_list,
    require_member,
)

FundamentalsClassification = Literal["strong", "ok", "weak", "unknown"]
ValuationClassification = Literal["cheap", "fair", "rich", "unknown"]
PegBucket = Literal["discount", "balanced", "demanding", "distorted"]
GrowthSource = Literal["eps", "revenue"]
TrendDirection = Literal["uptrend", "downtrend", "sideways"]

FUNDAMENTALS_CLASSES: frozenset[str] = frozenset({"strong", "ok", "weak", "unknown"})
VALUATION_CLASSES: frozenset[str] = frozenset({"cheap", "fair", "rich", "unknown"})
PEG_BUCKETS: frozenset[str] = frozenset({"discount", "balanced", "demanding", "distorted"})
GROWTH_SOURCES: frozenset[str] = frozenset({"eps", "revenue"})
TREND_DIRECTIONS: frozenset[str] = frozenset({"uptrend", "downtrend", "sideways"})


# ---------------------------------------------------------------------------
# Fundamentals / valuation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FundamentalsInsight(Serializable):
    classification: FundamentalsClassification = "unknown"
    quality_score: int = 0
    drivers: tuple[str, ...] = ()
    cautionary_notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        require_member(self.classification, FUNDAMENTALS_CLASSES, "classification")
        freeze_list(self, "drivers")
        freeze_list(self, "cautionary_notes")


@dataclass(frozen=True)
class PegAssessment(Serializable):
    bucket: PegBucket
    ratio: Optional[float] = None
    normalized_growth_pct: Optional[float] = None
    growth_source: Optional[GrowthSource] = None
    commentary: str = ""

    def __post_init__(self) -> None:
        require_member(self.bucket, PEG_BUCKETS, "bucket")
        if self.growth_source is not None:
            require_member(self.growth_source, GROWTH_SOURCES, "growth_source")
        clean_numeric_fields(self, ("ratio", "normalized_growth_pct"))


@dataclass(frozen=True)
class ValuationInsight(Serializable):
    classification: ValuationClassification = "unknown"
    valuation_score: int = 0
    commentary: str = "Valuation data not available."
    peg_ratio: Optional[float] = None
    peg_assessment: Optional[PegAssessment] = None
    earnings_yield_pct: Optional[float] = None
    free_cash_flow_yield_pct: Optional[float] = None
    dividend_yield_pct: Optional[float] = None
    drivers: tuple[str, ...] = ()
    cautionary_notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        require_member(self.classification, VALUATION_CLASSES, "classification")
        clean_numeric_fields(
            self,
            ("peg_ratio", "earnings_yield_pct", "free_cash_flow_yield_pct", "dividend_yield_pct"),
        )
        freeze_list(self, "drivers")
        freeze_list(self, "cautionary_notes")


# ---------------------------------------------------------------------------
# Technical / sentiment reads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TechnicalRead(Serializable):
    trend: Literal["bullish", "bearish", "neutral"] = "neutral"
    momentum: Literal["overbought", "oversold", "neutral"] = "neutral"
    price_position: str = "Unknown"


@dataclass(frozen=True)
class SentimentRead(Serializable):
    consensus_text: str = "No analyst data available"
    target_vs_price: str = "Unknown"
    upside_pct: Optional[float] = None
    news_highlight: str = "No news themes available"

    def __post_init__(self) -> None:
        clean_numeric_fields(self, ("upside_pct",))


# ---------------------------------------------------------------------------
# Historical analytics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReturnSummary(Serializable):
    period_pct: float = 0.0
    annualized_pct: float = 0.0


@dataclass(frozen=True)
class HistoricalSummary(Serializable):
    ticker: str
    period: str
    returns: ReturnSummary
    volatility_pct: float
    trend: TrendDirection

    def __post_init__(self) -> None:
        require_member(self.trend, TREND_DIRECTIONS, "trend")


# ---------------------------------------------------------------------------
# Scenarios / planning
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScenarioBand(Serializable):
    expected_return_pct_range: tuple[float, float]
    probability_pct: int
    description: str

    def __post_init__(self) -> None:
        low, high = self.expected_return_pct_range
        if low > high:
            raise ValueError(f"Scenario range is inverted: {low} > {high}")
        object.__setattr__(self, "expected_return_pct_range", (low, high))


@dataclass(frozen=True)
class ScenarioSummary(Serializable):
    horizon_months: int
    bull: ScenarioBand
    base: ScenarioBand
    bear: ScenarioBand
    point_estimate_return_pct: float
    uncertainty_comment: str

    def __post_init__(self) -> None:
        total = self.bull.probability_pct + self.base.probability_pct + self.bear.probability_pct
        if total != 100:
            raise ValueError(f"Scenario probabilities must sum to 100, got {total}")


@dataclass(frozen=True)
class PlanningGuidance(Serializable):
    position_sizing: tuple[str, ...]
    timing: tuple[str, ...]
    risk_notes: tuple[str, ...]
    language_notes: str

    def __post_init__(self) -> None:
        for name in ("position_sizing", "timing", "risk_notes"):
            freeze_list(self, name)


# ---------------------------------------------------------------------------
# Composed result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisSummary(Serializable):
    """Headline read of one analysis.

    The composer always emits ``risk_score`` in [1, 10] and
    ``conviction_score_3m`` in [0, 100]. Summaries built elsewhere may carry
    a missing or out-of-range conviction; consumers clamp rather than trust it.
    """

    headline_view: str
    risk_score: float
    conviction_score_3m: Optional[float] = None
    key_takeaways: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        clean_numeric_fields(self, ("risk_score", "conviction_score_3m"))
        if self.risk_score is None:
            raise ValueError("risk_score is required")
        freeze_list(self, "key_takeaways")


@dataclass(frozen=True)
class AnalysisResult(Serializable):
    ticker: str
    name: Optional[str]
    summary: AnalysisSummary
    fundamentals_view: str
    valuation_view: str
    technical_view: str
    sentiment_view: str
    scenarios: ScenarioSummary
    planning_guidance: PlanningGuidance
    fundamentals_insight: FundamentalsInsight
    valuation_insight: ValuationInsight
    technical: TechnicalRead
    sentiment: SentimentRead
    disclaimer: str
    generated_at: str
