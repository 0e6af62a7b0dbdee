"""Portfolio entities consumed and produced by the portfolio action engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from aurora.models.base import Serializable, freeze_list, require_member
from aurora.models.insights import ScenarioSummary

PortfolioAction = Literal["buy", "hold", "trim", "sell"]
ConcentrationLevel = Literal["low", "moderate", "high"]

PORTFOLIO_ACTIONS: frozenset[str] = frozenset({"buy", "hold", "trim", "sell"})
CONCENTRATION_LEVELS: frozenset[str] = frozenset({"low", "moderate", "high"})


@dataclass(frozen=True)
class PortfolioHolding(Serializable):
    ticker: str
    shares: float
    average_cost_basis: float
    purchase_date: Optional[str] = None


@dataclass(frozen=True)
class Portfolio(Serializable):
    id: str
    name: str
    holdings: tuple[PortfolioHolding, ...] = ()
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        freeze_list(self, "holdings")

    def find_holding(self, ticker: str) -> Optional[PortfolioHolding]:
        wanted = (ticker or "").upper()
        for holding in self.holdings:
            if holding.ticker.upper() == wanted:
                return holding
        return None


@dataclass(frozen=True)
class PortfolioMetrics(Serializable):
    total_value: float = 0.0
    total_cost: float = 0.0
    total_gain_loss: float = 0.0
    total_gain_loss_pct: float = 0.0
    beta: float = 0.0
    volatility: float = 0.0


@dataclass(frozen=True)
class PortfolioAllocation(Serializable):
    ticker: str
    value: float
    weight_pct: float
    gain_loss: float
    gain_loss_pct: float


@dataclass(frozen=True)
class PositionWeight(Serializable):
    ticker: str
    weight_pct: float


@dataclass(frozen=True)
class ConcentrationRisk(Serializable):
    level: ConcentrationLevel = "low"
    warnings: tuple[str, ...] = ()
    largest_positions: tuple[PositionWeight, ...] = ()

    def __post_init__(self) -> None:
        require_member(self.level, CONCENTRATION_LEVELS, "level")
        freeze_list(self, "warnings")
        freeze_list(self, "largest_positions")


@dataclass(frozen=True)
class PortfolioActionSuggestion(Serializable):
    action: PortfolioAction
    reasoning: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        require_member(self.action, PORTFOLIO_ACTIONS, "action")
        freeze_list(self, "reasoning")


@dataclass(frozen=True)
class PortfolioContext(Serializable):
    """Links an analysis request to the investor's current book."""

    position_weight_pct: float = 0.0
    existing_holding: Optional[PortfolioHolding] = None
    portfolio: Optional[Portfolio] = None
    portfolio_metrics: Optional[PortfolioMetrics] = None
    suggested_action: Optional[PortfolioAction] = None
    reasoning: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.suggested_action is not None:
            require_member(self.suggested_action, PORTFOLIO_ACTIONS, "suggested_action")
        freeze_list(self, "reasoning")


# ---------------------------------------------------------------------------
# Stress test
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HoldingScenarioSnapshot(Serializable):
    ticker: str
    shares: float
    current_price: float
    scenarios: Optional[ScenarioSummary] = None


@dataclass(frozen=True)
class StressTestEntry(Serializable):
    ticker: str
    current_value: float
    bull_value: float
    base_value: float
    bear_value: float


@dataclass(frozen=True)
class PortfolioStressTestResult(Serializable):
    current_value: float = 0.0
    bull_value: float = 0.0
    base_value: float = 0.0
    bear_value: float = 0.0
    bull_change_pct: float = 0.0
    base_change_pct: float = 0.0
    bear_change_pct: float = 0.0
    entries: tuple[StressTestEntry, ...] = ()

    def __post_init__(self) -> None:
        freeze_list(self, "entries")
