"""Bull / base / bear scenario bands tuned by risk tolerance.

Bands are illustrative framework ranges, not forecasts. Probabilities are
fixed at 25 / 50 / 25 and the point estimate is the probability-weighted
mean of the band midpoints.
"""

from __future__ import annotations

from aurora.models.insights import ScenarioBand, ScenarioSummary
from aurora.models.profile import RiskTolerance, UserProfile
from aurora.utils.numbers import round_half_up

Range = tuple[float, float]

BULL_PROBABILITY = 25
BASE_PROBABILITY = 50
BEAR_PROBABILITY = 25

BULL_DESCRIPTION = "Positive catalysts materialize, market sentiment improves"
BASE_DESCRIPTION = "Current trends continue, no major surprises"
BEAR_DESCRIPTION = "Negative developments or broader market weakness"

UNCERTAINTY_COMMENT = (
    "These scenarios are illustrative only and do not constitute predictions. "
    "Actual results may vary significantly."
)


def scenario_ranges(risk_tolerance: RiskTolerance) -> tuple[Range, Range, Range]:
    """Return the (bull, base, bear) return ranges in percent."""
    if risk_tolerance == "low":
        return (6, 12), (-4, 5), (-12, -3)
    if risk_tolerance == "moderate":
        return (8, 15), (-6, 7), (-15, -5)
    if risk_tolerance == "high":
        return (10, 18), (-8, 9), (-20, -7)
    raise ValueError(f"Unknown risk tolerance: {risk_tolerance!r}")


def _midpoint(band: Range) -> float:
    return (band[0] + band[1]) / 2


def generate_scenarios(profile: UserProfile, horizon_months: int = 3) -> ScenarioSummary:
    if profile is None:
        raise ValueError("User profile is required to generate scenarios")
    if horizon_months < 1:
        raise ValueError(f"horizon_months must be >= 1, got {horizon_months}")

    bull, base, bear = scenario_ranges(profile.risk_tolerance)
    point_estimate = (
        _midpoint(bull) * BULL_PROBABILITY
        + _midpoint(base) * BASE_PROBABILITY
        + _midpoint(bear) * BEAR_PROBABILITY
    ) / 100

    return ScenarioSummary(
        horizon_months=horizon_months,
        bull=ScenarioBand(bull, BULL_PROBABILITY, BULL_DESCRIPTION),
        base=ScenarioBand(base, BASE_PROBABILITY, BASE_DESCRIPTION),
        bear=ScenarioBand(bear, BEAR_PROBABILITY, BEAR_DESCRIPTION),
        point_estimate_return_pct=round_half_up(point_estimate, 1),
        uncertainty_comment=UNCERTAINTY_COMMENT,
    )
