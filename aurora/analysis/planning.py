"""Framework-language planning guidance keyed off the investor profile.

Guidance is educational. Sentences describe what investors with a given
profile *often* do; none of it is a personal instruction.
"""

from __future__ import annotations

from aurora.models.insights import PlanningGuidance
from aurora.models.profile import (
    InvestmentHorizon,
    InvestmentObjective,
    RiskTolerance,
    UserProfile,
)

GENERIC_RISK_NOTES = (
    "All equity investments carry market risk and can lose value, especially in the short term.",
    "Single-stock positions carry company-specific risk beyond general market risk.",
)

LANGUAGE_NOTES = (
    "This guidance is educational and framework-based. "
    "It does not constitute personalized financial advice."
)


def _position_sizing(risk_tolerance: RiskTolerance) -> tuple[str, ...]:
    if risk_tolerance == "low":
        return (
            "Conservative investors often limit individual stock positions to 3-5% of total portfolio.",
            "Many risk-averse investors prefer diversifying across 20+ holdings.",
        )
    if risk_tolerance == "moderate":
        return (
            "Moderate investors typically allocate 5-10% per position in growth stocks.",
            "Balanced portfolios often hold 12-20 positions for adequate diversification.",
        )
    if risk_tolerance == "high":
        return (
            "Growth-focused investors may allocate 10-15% to high-conviction positions.",
            "Concentrated portfolios typically hold 8-12 positions with careful monitoring.",
        )
    raise ValueError(f"Unknown risk tolerance: {risk_tolerance!r}")


def _timing(horizon: InvestmentHorizon) -> tuple[str, ...]:
    if horizon == "1-3":
        return (
            "Short-term investors often consider entry timing more carefully, "
            "watching for technical support levels.",
            "Some traders use dollar-cost averaging over 2-4 weeks to reduce timing risk.",
        )
    if horizon in ("5-10", "10+"):
        return (
            "Long-term investors often prioritize fundamental strength over short-term entry timing.",
            "Many long-horizon investors use systematic entry strategies over several months.",
        )
    raise ValueError(f"Unknown investment horizon: {horizon!r}")


def _objective_note(objective: InvestmentObjective) -> str:
    if objective == "income":
        return (
            "Income-focused investors typically compare dividend yield to bond yields "
            "and consider payout sustainability."
        )
    if objective == "growth":
        return (
            "Growth investors often accept higher volatility in exchange for "
            "potential capital appreciation."
        )
    if objective == "balanced":
        return (
            "Balanced investors often weigh dividend stability alongside growth "
            "potential when sizing positions."
        )
    raise ValueError(f"Unknown investment objective: {objective!r}")


def generate_planning_guidance(profile: UserProfile) -> PlanningGuidance:
    if profile is None:
        raise ValueError("User profile is required to generate planning guidance")
    return PlanningGuidance(
        position_sizing=_position_sizing(profile.risk_tolerance),
        timing=_timing(profile.horizon),
        risk_notes=(_objective_note(profile.objective), *GENERIC_RISK_NOTES),
        language_notes=LANGUAGE_NOTES,
    )
