"""Investor profile supplied with every analysis request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from aurora.models.base import Serializable, require_member

RiskTolerance = Literal["low", "moderate", "high"]
InvestmentHorizon = Literal["1-3", "5-10", "10+"]
InvestmentObjective = Literal["growth", "income", "balanced"]

RISK_TOLERANCES: frozenset[str] = frozenset({"low", "moderate", "high"})
HORIZONS: frozenset[str] = frozenset({"1-3", "5-10", "10+"})
OBJECTIVES: frozenset[str] = frozenset({"growth", "income", "balanced"})


@dataclass(frozen=True)
class UserProfile(Serializable):
    risk_tolerance: RiskTolerance
    horizon: InvestmentHorizon
    objective: InvestmentObjective

    def __post_init__(self) -> None:
        require_member(self.risk_tolerance, RISK_TOLERANCES, "risk_tolerance")
        require_member(self.horizon, HORIZONS, "horizon")
        require_member(self.objective, OBJECTIVES, "objective")
