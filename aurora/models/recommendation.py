"""Active manager recommendation emitted by the top-level composer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from aurora.models.base import (
    Serializable,
    clean_numeric_fields,
    freeze_list,
    require_member,
)
from aurora.models.portfolio import PORTFOLIO_ACTIONS, PortfolioAction

RecommendationHorizon = Literal["short_term", "medium_term", "long_term"]
RECOMMENDATION_HORIZONS: frozenset[str] = frozenset({"short_term", "medium_term", "long_term"})


@dataclass(frozen=True)
class ActiveManagerRecommendation(Serializable):
    ticker: str
    primary_action: PortfolioAction
    horizon: RecommendationHorizon
    confidence_score: int
    headline: str
    expected_return_3m: Optional[float] = None
    rationale: tuple[str, ...] = ()
    risk_flags: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        require_member(self.primary_action, PORTFOLIO_ACTIONS, "primary_action")
        require_member(self.horizon, RECOMMENDATION_HORIZONS, "horizon")
        if not 0 <= self.confidence_score <= 100:
            raise ValueError(f"confidence_score must be within [0, 100], got {self.confidence_score}")
        clean_numeric_fields(self, ("expected_return_3m",))
        for name in ("rationale", "risk_flags", "notes"):
            freeze_list(self, name)
