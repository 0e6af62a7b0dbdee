"""Fundamentals quality scoring.

Weighted composite over six metrics (missing metric = zero contribution):

    EPS growth YoY       25%   strong 20   weak 0
    Net margin           20%   strong 22   weak 5
    FCF yield            20%   strong 5    weak 0.5
    ROE                  15%   strong 25   weak 8
    Revenue growth YoY   10%   strong 12   weak -5
    Debt/equity (inv.)   10%   strong 0.8  weak 3
"""

from __future__ import annotations

from typing import Optional

from aurora.analysis.metric_scorers import (
    MetricScorer,
    score_negative_metric,
    score_or_zero,
    score_positive_metric,
)
from aurora.models.insights import FundamentalsClassification, FundamentalsInsight
from aurora.models.stock import StockData, StockFundamentals
from aurora.utils.logger import setup_logger
from aurora.utils.numbers import round_score

logger = setup_logger("fundamental")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
# (field, weight, scorer, strong, weak)
_QUALITY_METRICS: tuple[tuple[str, float, MetricScorer, float, float], ...] = (
    ("eps_growth_yoy_pct", 0.25, score_positive_metric, 20.0, 0.0),
    ("net_margin_pct", 0.20, score_positive_metric, 22.0, 5.0),
    ("free_cash_flow_yield_pct", 0.20, score_positive_metric, 5.0, 0.5),
    ("roe", 0.15, score_positive_metric, 25.0, 8.0),
    ("revenue_growth_yoy_pct", 0.10, score_positive_metric, 12.0, -5.0),
    ("debt_to_equity", 0.10, score_negative_metric, 0.8, 3.0),
)

STRONG_THRESHOLD = 72
WEAK_THRESHOLD = 40
MAX_DRIVERS = 3

NO_DATA_NOTE = "Fundamentals data not available."


def _has_quality_data(fundamentals: Optional[StockFundamentals]) -> bool:
    if fundamentals is None:
        return False
    return any(getattr(fundamentals, name) is not None for name, *_ in _QUALITY_METRICS)


def calculate_fundamentals_quality_score(stock: StockData) -> int:
    """Return the 0-100 quality score; 0 when there is no fundamentals block."""
    f = stock.fundamentals if stock is not None else None
    if f is None:
        return 0
    weighted = sum(
        weight * score_or_zero(getattr(f, name), scorer, strong, weak)
        for name, weight, scorer, strong, weak in _QUALITY_METRICS
    )
    return round_score(weighted * 100)


def _classify_score(score: int) -> FundamentalsClassification:
    if score >= STRONG_THRESHOLD:
        return "strong"
    if score < WEAK_THRESHOLD:
        return "weak"
    return "ok"


def _drivers(f: StockFundamentals) -> list[str]:
    drivers = []
    if f.eps_growth_yoy_pct is not None and f.eps_growth_yoy_pct >= 18:
        drivers.append("EPS growth is running above 18%")
    if f.net_margin_pct is not None and f.net_margin_pct >= 22:
        drivers.append("Margins exceed 22%")
    if f.free_cash_flow_yield_pct is not None and f.free_cash_flow_yield_pct >= 4:
        drivers.append("Free cash flow yield surpasses 4%")
    if f.roe is not None and f.roe >= 25:
        drivers.append("ROE is north of 25%")
    if f.revenue_growth_yoy_pct is not None and f.revenue_growth_yoy_pct >= 12:
        drivers.append("Revenue is compounding at double-digit rates")
    return drivers[:MAX_DRIVERS]


def _cautions(f: StockFundamentals) -> list[str]:
    # absent metrics read as zero, so missing FCF or margin data is a caution
    def value(name: str) -> float:
        number = getattr(f, name)
        return 0.0 if number is None else number

    notes = []
    if value("debt_to_equity") > 2.5:
        notes.append("Leverage is elevated (debt-to-equity > 2.5x)")
    if value("free_cash_flow_yield_pct") < 0.5:
        notes.append("Limited free cash flow support (< 0.5%)")
    if value("eps_growth_yoy_pct") < 0:
        notes.append("Recent EPS trend turned negative")
    if value("net_margin_pct") < 8:
        notes.append("Net margins are below 8%")
    return notes


def build_fundamentals_insight(stock: StockData) -> FundamentalsInsight:
    """Composite quality score, classification, drivers and cautionary notes.

    A ``strong`` score is reported as ``ok`` whenever any cautionary note
    fired. Stocks without any of the six quality metrics are ``unknown``.
    """
    f = stock.fundamentals if stock is not None else None
    if not _has_quality_data(f):
        return FundamentalsInsight(cautionary_notes=(NO_DATA_NOTE,))

    score = calculate_fundamentals_quality_score(stock)
    classification = _classify_score(score)
    cautions = _cautions(f)
    if classification == "strong" and cautions:
        logger.debug("%s: strong score %d downgraded by %d caution(s)",
                     stock.ticker, score, len(cautions))
        classification = "ok"

    return FundamentalsInsight(
        classification=classification,
        quality_score=score,
        drivers=tuple(_drivers(f)),
        cautionary_notes=tuple(cautions),
    )


def classify_fundamentals(stock: StockData) -> FundamentalsClassification:
    return build_fundamentals_insight(stock).classification
