"""Raw market inputs: fundamentals, technicals, sentiment and price history.

Every numeric field is optional. NaN and infinities coming from a provider are
stored as ``None`` so that downstream scorers only ever see "present" or
"absent", never a poisoned float.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Literal, Optional

from aurora.models.base import (
    Serializable,
    clean_numeric_fields,
    freeze_list,
    require_member,
)

AnalystConsensus = Literal["strong_buy", "buy", "hold", "sell", "strong_sell"]
HistoricalPeriod = Literal["1M", "3M", "6M", "1Y", "5Y"]

ANALYST_CONSENSUS: frozenset[str] = frozenset(
    {"strong_buy", "buy", "hold", "sell", "strong_sell"}
)
HISTORICAL_PERIODS: frozenset[str] = frozenset({"1M", "3M", "6M", "1Y", "5Y"})


def _numeric_names(cls) -> list[str]:
    # annotations are strings under postponed evaluation
    return [f.name for f in fields(cls) if f.type == "Optional[float]"]


@dataclass(frozen=True)
class StockFundamentals(Serializable):
    trailing_pe: Optional[float] = None
    forward_pe: Optional[float] = None
    dividend_yield_pct: Optional[float] = None
    revenue_growth_yoy_pct: Optional[float] = None
    eps_growth_yoy_pct: Optional[float] = None
    net_margin_pct: Optional[float] = None
    free_cash_flow_yield_pct: Optional[float] = None
    debt_to_equity: Optional[float] = None
    roe: Optional[float] = None

    def __post_init__(self) -> None:
        clean_numeric_fields(self, _numeric_names(type(self)))


@dataclass(frozen=True)
class StockTechnicals(Serializable):
    price: Optional[float] = None
    price_52w_high: Optional[float] = None
    price_52w_low: Optional[float] = None
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    rsi14: Optional[float] = None
    volume: Optional[float] = None
    avg_volume: Optional[float] = None

    def __post_init__(self) -> None:
        clean_numeric_fields(self, _numeric_names(type(self)))


@dataclass(frozen=True)
class StockSentiment(Serializable):
    analyst_consensus: Optional[AnalystConsensus] = None
    analyst_target_mean: Optional[float] = None
    analyst_target_high: Optional[float] = None
    analyst_target_low: Optional[float] = None
    news_themes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.analyst_consensus is not None:
            require_member(self.analyst_consensus, ANALYST_CONSENSUS, "analyst_consensus")
        clean_numeric_fields(self, _numeric_names(type(self)))
        freeze_list(self, "news_themes")


@dataclass(frozen=True)
class StockData(Serializable):
    """Everything the engine knows about one ticker at analysis time."""

    ticker: str
    name: Optional[str] = None
    currency: Optional[str] = None
    fundamentals: Optional[StockFundamentals] = None
    technicals: Optional[StockTechnicals] = None
    sentiment: Optional[StockSentiment] = None


# ---------------------------------------------------------------------------
# Price history
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HistoricalDataPoint(Serializable):
    date: str
    price: Optional[float]
    volume: Optional[float] = None

    def __post_init__(self) -> None:
        clean_numeric_fields(self, ("price", "volume"))


@dataclass(frozen=True)
class HistoricalData(Serializable):
    ticker: str
    period: HistoricalPeriod = "6M"
    data_points: tuple[HistoricalDataPoint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        require_member(self.period, HISTORICAL_PERIODS, "period")
        freeze_list(self, "data_points")
