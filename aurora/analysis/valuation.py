"""Valuation insight: PEG bucketing blended with yield-based sub-scores.

Composite weights (absent inputs drop out of numerator *and* denominator):

    PEG bucket score   35%   discount 1 / balanced 0.7 / demanding 0.25 / distorted 0.45
    Earnings yield     25%   strong 6%   weak 2%
    FCF yield          25%   strong 5%   weak 1%
    Dividend yield     15%   strong 3%   weak 0.2%

When no PEG assessment is possible but a P/E exists, the P/E itself fills
the PEG slot (lower is better, strong 15x, weak 35x).
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from aurora.analysis.metric_scorers import score_negative_metric, score_positive_metric
from aurora.models.insights import (
    GrowthSource,
    PegAssessment,
    PegBucket,
    ValuationClassification,
    ValuationInsight,
)
from aurora.models.stock import StockData, StockFundamentals
from aurora.utils.logger import setup_logger
from aurora.utils.numbers import dedupe, round_half_up, round_score

logger = setup_logger("valuation")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
PEG_DISCOUNT_MAX = 1.0
PEG_DEMANDING_MIN = 1.8
PEG_STRETCHED_MIN = 3.0
MIN_RELIABLE_GROWTH_PCT = 5.0

CHEAP_THRESHOLD = 65
RICH_THRESHOLD = 35
MAX_BULLETS = 3

_PEG_BUCKET_SCORES: dict[str, float] = {
    "discount": 1.0,
    "balanced": 0.7,
    "demanding": 0.25,
    "distorted": 0.45,
}

_WEIGHT_PEG = 0.35
_WEIGHT_EARNINGS_YIELD = 0.25
_WEIGHT_FCF_YIELD = 0.25
_WEIGHT_DIVIDEND = 0.15


class GrowthMetric(NamedTuple):
    value: float
    source: GrowthSource


def _growth_label(source: GrowthSource) -> str:
    if source == "eps":
        return "EPS growth"
    if source == "revenue":
        return "revenue growth"
    raise ValueError(f"Unknown growth source: {source!r}")


def _usable_pe(f: StockFundamentals) -> Optional[float]:
    """Forward P/E, else trailing; only positive multiples are meaningful."""
    for pe in (f.forward_pe, f.trailing_pe):
        if pe is not None and pe > 0:
            return pe
    return None


# ---------------------------------------------------------------------------
# PEG
# ---------------------------------------------------------------------------

def select_growth_metric(fundamentals: Optional[StockFundamentals]) -> Optional[GrowthMetric]:
    """Prefer EPS growth, fall back to revenue growth."""
    if fundamentals is None:
        return None
    if fundamentals.eps_growth_yoy_pct is not None:
        return GrowthMetric(fundamentals.eps_growth_yoy_pct, "eps")
    if fundamentals.revenue_growth_yoy_pct is not None:
        return GrowthMetric(fundamentals.revenue_growth_yoy_pct, "revenue")
    return None


def classify_peg_ratio(ratio: float) -> PegBucket:
    """Bucket a PEG computed from reliable (>= 5%) growth."""
    if ratio <= PEG_DISCOUNT_MAX:
        return "discount"
    if ratio >= PEG_DEMANDING_MIN:
        return "demanding"
    return "balanced"


def _peg_commentary(bucket: PegBucket, ratio: float) -> str:
    if bucket == "discount":
        return "PEG below 1 suggests valuation is discounting future growth."
    if bucket == "demanding":
        if ratio >= PEG_STRETCHED_MIN:
            return "PEG above 3 signals stretched multiples relative to growth."
        return "PEG above 1.8 requires flawless execution to justify."
    if bucket == "balanced":
        return "PEG indicates valuation is broadly aligned with growth."
    raise ValueError(f"No commentary for PEG bucket {bucket!r}")


def evaluate_peg_ratio(fundamentals: Optional[StockFundamentals]) -> Optional[PegAssessment]:
    """Assess P/E relative to growth, or ``None`` when it cannot be judged."""
    growth = select_growth_metric(fundamentals)
    if growth is None:
        return None

    label = _growth_label(growth.source)
    pe = _usable_pe(fundamentals)

    if growth.value <= 0:
        return PegAssessment(
            bucket="distorted",
            normalized_growth_pct=growth.value,
            growth_source=growth.source,
            commentary=f"{label} turned negative, so PEG loses meaning.",
        )

    if growth.value < MIN_RELIABLE_GROWTH_PCT:
        return PegAssessment(
            bucket="distorted",
            ratio=pe / max(growth.value, 0.1) if pe else None,
            normalized_growth_pct=growth.value,
            growth_source=growth.source,
            commentary=f"{label} below 5% makes PEG less reliable.",
        )

    if pe is None:
        return None

    ratio = pe / growth.value
    bucket = classify_peg_ratio(ratio)
    return PegAssessment(
        bucket=bucket,
        ratio=ratio,
        normalized_growth_pct=growth.value,
        growth_source=growth.source,
        commentary=_peg_commentary(bucket, ratio),
    )


# ---------------------------------------------------------------------------
# Insight
# ---------------------------------------------------------------------------

def _classify_score(score: float) -> ValuationClassification:
    if score >= CHEAP_THRESHOLD:
        return "cheap"
    if score < RICH_THRESHOLD:
        return "rich"
    return "fair"


def _base_commentary(classification: ValuationClassification) -> str:
    if classification == "cheap":
        return "Multiples screen at a discount relative to growth and cash generation"
    if classification == "rich":
        return "Premium multiples rely on sustained growth to be justified"
    if classification == "fair":
        return "Valuation metrics look balanced versus growth profile"
    raise ValueError(f"No commentary for valuation class {classification!r}")


def _composite_score(
    peg: Optional[PegAssessment],
    pe: Optional[float],
    earnings_yield: Optional[float],
    fcf_yield: Optional[float],
    dividend_yield: Optional[float],
) -> Optional[float]:
    """Weighted mean over the metrics present, on a 0-100 scale."""
    parts: list[tuple[float, float]] = []
    if peg is not None:
        parts.append((_PEG_BUCKET_SCORES[peg.bucket], _WEIGHT_PEG))
    elif pe is not None:
        parts.append((score_negative_metric(pe, 15, 35), _WEIGHT_PEG))
    if earnings_yield is not None:
        parts.append((score_positive_metric(earnings_yield, 6, 2), _WEIGHT_EARNINGS_YIELD))
    if fcf_yield is not None:
        parts.append((score_positive_metric(fcf_yield, 5, 1), _WEIGHT_FCF_YIELD))
    if dividend_yield is not None:
        parts.append((score_positive_metric(dividend_yield, 3, 0.2), _WEIGHT_DIVIDEND))

    total_weight = sum(w for _, w in parts)
    if total_weight == 0:
        return None
    return sum(s * w for s, w in parts) / total_weight * 100


def build_valuation_insight(stock: StockData) -> ValuationInsight:
    """Composite valuation score with classification, commentary and bullets."""
    f = stock.fundamentals if stock is not None else None
    if f is None:
        return ValuationInsight()

    pe = _usable_pe(f)
    peg = evaluate_peg_ratio(f)
    earnings_yield = 100.0 / pe if pe else None
    fcf_yield = f.free_cash_flow_yield_pct
    dividend_yield = f.dividend_yield_pct

    raw_score = _composite_score(peg, pe, earnings_yield, fcf_yield, dividend_yield)
    if raw_score is None:
        return ValuationInsight()

    score = round_score(raw_score)
    classification = _classify_score(raw_score)

    drivers: list[str] = []
    cautions: list[str] = []

    if peg is not None:
        if peg.bucket == "discount":
            drivers.append("PEG screens below 1x relative to growth inputs")
        elif peg.bucket == "balanced":
            drivers.append("PEG roughly aligned with growth trajectory")
        elif peg.bucket == "demanding":
            cautions.append("Growth-adjusted PEG above 1.8x carries premium expectations")
        else:
            cautions.append("PEG distorted because growth is limited or negative")

        if peg.normalized_growth_pct is not None and peg.normalized_growth_pct >= 20:
            label = _growth_label(peg.growth_source) if peg.growth_source else "Growth"
            drivers.append(f"{label} running near {round_half_up(peg.normalized_growth_pct):.0f}%")

    if earnings_yield is not None:
        if earnings_yield >= 6.5:
            drivers.append(f"Earnings yield {earnings_yield:.1f}% clears 6% hurdle")
        elif earnings_yield < 3:
            cautions.append("Earnings yield below 3% offers thin cash support")

    if fcf_yield is not None:
        if fcf_yield >= 5:
            drivers.append("Free cash flow yield exceeds 5%")
        elif fcf_yield < 1:
            cautions.append("Free cash flow yield under 1% provides little downside protection")

    if dividend_yield is not None and dividend_yield >= 3:
        drivers.append("Dividend yield north of 3% adds income support")

    if pe is not None and pe >= 35:
        cautions.append("Earnings multiples above 35x embed perfection")

    peg_ratio = peg.ratio if peg is not None else None
    details = []
    if peg_ratio is not None:
        details.append(f"PEG {peg_ratio:.2f}")
    if peg is not None and peg.commentary:
        details.append(peg.commentary)
    if earnings_yield is not None:
        details.append(f"Earnings yield {earnings_yield:.1f}%")
    if fcf_yield is not None:
        details.append(f"FCF yield {fcf_yield:.1f}%")
    if dividend_yield is not None:
        details.append(f"Dividend yield {dividend_yield:.2f}%")

    commentary = _base_commentary(classification)
    if details:
        commentary = f"{commentary} ({' | '.join(details)})"

    logger.debug("%s: valuation score %d (%s)", stock.ticker, score, classification)
    return ValuationInsight(
        classification=classification,
        valuation_score=score,
        commentary=commentary,
        peg_ratio=peg_ratio,
        peg_assessment=peg,
        earnings_yield_pct=earnings_yield,
        free_cash_flow_yield_pct=fcf_yield,
        dividend_yield_pct=dividend_yield,
        drivers=tuple(dedupe(drivers)[:MAX_BULLETS]),
        cautionary_notes=tuple(dedupe(cautions)[:MAX_BULLETS]),
    )


def classify_valuation(stock: StockData) -> ValuationClassification:
    return build_valuation_insight(stock).classification
