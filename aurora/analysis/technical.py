"""Technical read: moving-average trend, RSI momentum and 52-week position."""

from __future__ import annotations

from typing import Literal, Optional

from aurora.models.insights import TechnicalRead
from aurora.models.stock import StockData, StockTechnicals

RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0
NEAR_HIGH_PCT = 80.0
NEAR_LOW_PCT = 20.0

POSITION_UNKNOWN = "Unknown"
POSITION_NEAR_HIGH = "Near 52-week high"
POSITION_NEAR_LOW = "Near 52-week low"
POSITION_MID = "Mid-range"


def _trend(t: StockTechnicals) -> Literal["bullish", "bearish", "neutral"]:
    price, sma50, sma200 = t.price, t.sma50, t.sma200
    if price is None or sma50 is None or sma200 is None:
        return "neutral"
    if price > sma50 > sma200:
        return "bullish"
    if price < sma50 < sma200:
        return "bearish"
    return "neutral"


def _momentum(rsi: Optional[float]) -> Literal["overbought", "oversold", "neutral"]:
    if rsi is None:
        return "neutral"
    if rsi > RSI_OVERBOUGHT:
        return "overbought"
    if rsi < RSI_OVERSOLD:
        return "oversold"
    return "neutral"


def _price_position(t: StockTechnicals) -> str:
    if t.price is None:
        return POSITION_UNKNOWN
    high, low = t.price_52w_high, t.price_52w_low
    if high is None or low is None:
        return POSITION_MID
    span = high - low
    if span <= 0:
        return POSITION_MID
    pct = (t.price - low) / span * 100
    if pct > NEAR_HIGH_PCT:
        return POSITION_NEAR_HIGH
    if pct < NEAR_LOW_PCT:
        return POSITION_NEAR_LOW
    return POSITION_MID


def analyze_technicals(stock: StockData) -> TechnicalRead:
    """Trend is bullish iff price > SMA50 > SMA200 (bearish mirrored).

    Every missing input degrades to the neutral/unknown branch.
    """
    t = stock.technicals if stock is not None else None
    if t is None:
        return TechnicalRead()
    return TechnicalRead(
        trend=_trend(t),
        momentum=_momentum(t.rsi14),
        price_position=_price_position(t),
    )
