"""Tests for aurora.analysis.historical -- normalization, returns, volatility, trend."""

import numpy as np
import pandas as pd
import pytest

from aurora.analysis.historical import (
    calculate_returns,
    calculate_volatility,
    detect_trend,
    normalize_price_series,
    summarize_history,
)
from aurora.models import HistoricalData, HistoricalDataPoint


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_history(prices, period="6M", start="2024-01-01"):
    dates = pd.bdate_range(start=start, periods=len(prices))
    points = [
        HistoricalDataPoint(date=d.strftime("%Y-%m-%d"), price=p)
        for d, p in zip(dates, prices)
    ]
    return HistoricalData(ticker="TEST", period=period, data_points=points)


# ---------------------------------------------------------------------------
# Tests for normalize_price_series
# ---------------------------------------------------------------------------

class TestNormalize:

    def test_sorts_ascending_and_keeps_last_duplicate(self):
        data = HistoricalData(
            ticker="TEST",
            data_points=[
                HistoricalDataPoint("2024-01-03", 105.0),
                HistoricalDataPoint("2024-01-01", 100.0),
                HistoricalDataPoint("2024-01-03", 107.0),
            ],
        )
        series = normalize_price_series(data)
        assert list(series.values) == [100.0, 107.0]
        assert series.index.is_monotonic_increasing

    def test_drops_invalid_points(self):
        data = HistoricalData(
            ticker="TEST",
            data_points=[
                HistoricalDataPoint("2024-01-01", 100.0),
                HistoricalDataPoint("not-a-date", 101.0),
                HistoricalDataPoint("2024-01-02", float("nan")),
                HistoricalDataPoint("2024-01-03", None),
                HistoricalDataPoint("2024-01-04", 104.0),
            ],
        )
        assert list(normalize_price_series(data).values) == [100.0, 104.0]

    def test_empty_input(self):
        assert normalize_price_series(HistoricalData(ticker="TEST")).empty
        assert normalize_price_series(None).empty


# ---------------------------------------------------------------------------
# Tests for calculate_returns
# ---------------------------------------------------------------------------

class TestReturns:

    def test_six_month_return_annualizes(self):
        returns = calculate_returns(_make_history([100.0, 104.0, 110.0], period="6M"))
        assert returns.period_pct == pytest.approx(10.0)
        assert returns.annualized_pct == pytest.approx(21.0)

    def test_one_year_return_equals_annualized(self):
        returns = calculate_returns(_make_history([80.0, 100.0], period="1Y"))
        assert returns.period_pct == pytest.approx(25.0)
        assert returns.annualized_pct == pytest.approx(25.0)

    def test_ties_round_half_up(self):
        # 97/800 -> exactly 12.125%
        returns = calculate_returns(_make_history([800.0, 897.0], period="1Y"))
        assert returns.period_pct == 12.13

    def test_fewer_than_two_points(self):
        returns = calculate_returns(_make_history([100.0]))
        assert (returns.period_pct, returns.annualized_pct) == (0.0, 0.0)


# ---------------------------------------------------------------------------
# Tests for calculate_volatility
# ---------------------------------------------------------------------------

class TestVolatility:

    def test_flat_series_has_zero_volatility(self):
        assert calculate_volatility(_make_history([100.0] * 10)) == 0.0

    def test_known_series(self):
        # daily returns +10% / -10% -> population stdev 0.1
        assert calculate_volatility(_make_history([100.0, 110.0, 99.0])) == pytest.approx(158.75)

    def test_matches_numpy_on_synthetic_history(self, sample_history, sample_ohlcv):
        close = sample_ohlcv["Close"].to_numpy()
        daily = np.diff(close) / close[:-1]
        expected = round(float(np.std(daily)) * np.sqrt(252) * 100, 2)
        assert calculate_volatility(sample_history) == pytest.approx(expected)
        assert 15 < calculate_volatility(sample_history) < 35

    def test_single_point(self):
        assert calculate_volatility(_make_history([100.0])) == 0.0


# ---------------------------------------------------------------------------
# Tests for detect_trend
# ---------------------------------------------------------------------------

class TestTrend:

    def test_steady_rise_is_uptrend(self):
        assert detect_trend(_make_history(np.linspace(100, 120, 30))) == "uptrend"

    def test_steady_fall_is_downtrend(self):
        assert detect_trend(_make_history(np.linspace(120, 100, 30))) == "downtrend"

    def test_rise_below_period_threshold_is_sideways(self):
        # +5% clears the 3M threshold but not the 1Y one
        prices = np.linspace(100, 105, 30)
        assert detect_trend(_make_history(prices, period="3M")) == "uptrend"
        assert detect_trend(_make_history(prices, period="1Y")) == "sideways"

    def test_choppy_series_is_sideways(self):
        prices = [100.0, 112.0, 95.0, 111.0, 96.0, 110.0, 97.0, 101.0]
        assert detect_trend(_make_history(prices, period="1M")) == "sideways"

    def test_fewer_than_two_points(self):
        assert detect_trend(_make_history([100.0])) == "sideways"

    def test_summarize_history(self):
        summary = summarize_history(_make_history(np.linspace(100, 120, 30), period="6M"))
        assert summary.ticker == "TEST"
        assert summary.period == "6M"
        assert summary.trend == "uptrend"
        assert summary.returns.period_pct == pytest.approx(20.0)
        assert summary.volatility_pct > 0
