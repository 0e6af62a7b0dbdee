"""Historical series analytics - returns, annualized volatility, trend detection.

All functions accept a :class:`HistoricalData` and normalize it first, so
callers may pass unsorted or partially invalid series.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from aurora.models.insights import HistoricalSummary, ReturnSummary, TrendDirection
from aurora.models.stock import HistoricalData
from aurora.utils.numbers import round_half_up

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
TRADING_DAYS_PER_YEAR = 252

PERIOD_MONTHS: dict[str, int] = {"1M": 1, "3M": 3, "6M": 6, "1Y": 12, "5Y": 60}
TREND_THRESHOLD_PCT: dict[str, float] = {"1M": 3, "3M": 5, "6M": 7, "1Y": 10, "5Y": 15}

UPTREND_BREADTH = 0.55
DOWNTREND_BREADTH = 0.45


def normalize_price_series(data: Optional[HistoricalData]) -> pd.Series:
    """Return a date-indexed price series, ascending, one point per date.

    Points without a parseable date or a finite price are dropped; when a
    date repeats, the later point wins.
    """
    if data is None or not data.data_points:
        return pd.Series(dtype=float)

    frame = pd.DataFrame(
        {
            "date": pd.to_datetime(
                [p.date for p in data.data_points],
                errors="coerce",
                utc=True,
                format="ISO8601",
            ),
            "price": [p.price for p in data.data_points],
        }
    )
    frame["price"] = pd.to_numeric(frame["price"], errors="coerce")
    frame = frame.replace([np.inf, -np.inf], np.nan).dropna(subset=["date", "price"])
    frame = frame.drop_duplicates(subset="date", keep="last")
    frame = frame.sort_values("date", kind="stable")
    return frame.set_index("date")["price"].astype(float)


def _endpoints(prices: pd.Series) -> Optional[tuple[float, float]]:
    if len(prices) < 2:
        return None
    start, end = float(prices.iloc[0]), float(prices.iloc[-1])
    if start <= 0 or end <= 0:
        return None
    return start, end


def calculate_returns(data: HistoricalData) -> ReturnSummary:
    """Simple period return and CAGR-annualized return, in percent."""
    endpoints = _endpoints(normalize_price_series(data))
    if endpoints is None:
        return ReturnSummary()

    start, end = endpoints
    period_pct = (end - start) / start * 100
    years = PERIOD_MONTHS.get(data.period, 6) / 12
    annualized_pct = ((end / start) ** (1 / years) - 1) * 100 if years > 0 else 0.0
    return ReturnSummary(
        period_pct=round_half_up(period_pct, 2),
        annualized_pct=round_half_up(annualized_pct, 2),
    )


def calculate_volatility(data: HistoricalData) -> float:
    """Population stdev of daily simple returns, annualized, in percent."""
    prices = normalize_price_series(data)
    if len(prices) < 2:
        return 0.0

    values = prices.to_numpy()
    prev, curr = values[:-1], values[1:]
    valid = (prev > 0) & (curr > 0)
    if not valid.any():
        return 0.0

    daily = (curr[valid] - prev[valid]) / prev[valid]
    annualized = float(np.std(daily, ddof=0)) * np.sqrt(TRADING_DAYS_PER_YEAR) * 100
    return round_half_up(annualized, 2)


def _ols_slope(values: np.ndarray) -> float:
    if len(values) < 2:
        return 0.0
    slope, _intercept = np.polyfit(np.arange(len(values), dtype=float), values, 1)
    return float(slope)


def _breadth(values: np.ndarray) -> float:
    moves = np.diff(values)
    advances = int((moves > 0).sum())
    declines = int((moves < 0).sum())
    if advances + declines == 0:
        return 0.5
    return advances / (advances + declines)


def detect_trend(data: HistoricalData) -> TrendDirection:
    """Uptrend needs change >= period threshold, positive slope and breadth >= 0.55.

    Downtrend mirrors it; everything else is sideways.
    """
    prices = normalize_price_series(data)
    endpoints = _endpoints(prices)
    if endpoints is None:
        return "sideways"

    start, end = endpoints
    change_pct = (end - start) / start * 100
    threshold = TREND_THRESHOLD_PCT.get(data.period, 5)
    values = prices.to_numpy()
    slope = _ols_slope(values)
    breadth = _breadth(values)

    if change_pct >= threshold and slope > 0 and breadth >= UPTREND_BREADTH:
        return "uptrend"
    if change_pct <= -threshold and slope < 0 and breadth <= DOWNTREND_BREADTH:
        return "downtrend"
    return "sideways"


def summarize_history(data: HistoricalData) -> HistoricalSummary:
    return HistoricalSummary(
        ticker=data.ticker,
        period=data.period,
        returns=calculate_returns(data),
        volatility_pct=calculate_volatility(data),
        trend=detect_trend(data),
    )
