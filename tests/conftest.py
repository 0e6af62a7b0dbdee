"""Shared pytest fixtures for the AuroraInvest test suite.

Provides synthetic stocks, profiles and price histories with a fixed random
seed for reproducibility. All fixtures are independent of external APIs.
"""

from datetime import datetime, timezone

import numpy as np
import pandas as pd
import pytest

from aurora.models import (
    HistoricalData,
    HistoricalDataPoint,
    Portfolio,
    PortfolioHolding,
    StockData,
    StockFundamentals,
    StockSentiment,
    StockTechnicals,
    UserProfile,
)

FROZEN_NOW = datetime(2024, 3, 15, 14, 30, 5, 123000, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# 1. Profiles
# ---------------------------------------------------------------------------

@pytest.fixture
def moderate_profile():
    return UserProfile(risk_tolerance="moderate", horizon="5-10", objective="balanced")


@pytest.fixture
def low_profile():
    return UserProfile(risk_tolerance="low", horizon="10+", objective="income")


@pytest.fixture
def high_profile():
    return UserProfile(risk_tolerance="high", horizon="1-3", objective="growth")


# ---------------------------------------------------------------------------
# 2. Stocks
# ---------------------------------------------------------------------------

@pytest.fixture
def strong_stock():
    """High-quality compounder trading at a discount, in a bullish trend."""
    return StockData(
        ticker="ACME",
        name="Acme Corp",
        currency="USD",
        fundamentals=StockFundamentals(
            trailing_pe=18.0,
            forward_pe=15.0,
            dividend_yield_pct=1.5,
            revenue_growth_yoy_pct=14.0,
            eps_growth_yoy_pct=25.0,
            net_margin_pct=28.0,
            free_cash_flow_yield_pct=6.0,
            debt_to_equity=0.3,
            roe=30.0,
        ),
        technicals=StockTechnicals(
            price=110.0,
            price_52w_high=120.0,
            price_52w_low=60.0,
            sma20=108.0,
            sma50=100.0,
            sma200=90.0,
            rsi14=55.0,
            volume=1_200_000,
            avg_volume=1_000_000,
        ),
        sentiment=StockSentiment(
            analyst_consensus="buy",
            analyst_target_mean=130.0,
            analyst_target_high=150.0,
            analyst_target_low=100.0,
            news_themes=("Record quarterly revenue", "New product launch"),
        ),
    )


@pytest.fixture
def bare_stock():
    """Ticker with no market data blocks at all."""
    return StockData(ticker="XYZ")


# ---------------------------------------------------------------------------
# 3. Clock
# ---------------------------------------------------------------------------

@pytest.fixture
def frozen_clock():
    return lambda: FROZEN_NOW


# ---------------------------------------------------------------------------
# 4. Price history
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_ohlcv():
    """Synthetic OHLCV DataFrame with 252 rows, seeded at 42.

    Geometric Brownian motion starting near 150, daily drift ~0.04%,
    daily vol ~1.5%.
    """
    np.random.seed(42)
    n = 252
    dates = pd.bdate_range(start="2023-01-02", periods=n)
    log_returns = np.random.normal(0.0004, 0.015, n)
    close = 150.0 * np.exp(np.cumsum(log_returns))
    volume = np.random.randint(1_000_000, 10_000_000, n).astype(float)
    return pd.DataFrame(
        {
            "Open": close * (1 + np.random.normal(0, 0.003, n)),
            "High": close * 1.01,
            "Low": close * 0.99,
            "Close": close,
            "Volume": volume,
        },
        index=dates,
    )


@pytest.fixture
def sample_history(sample_ohlcv):
    """``HistoricalData`` built from the synthetic OHLCV closes."""
    points = tuple(
        HistoricalDataPoint(date=ts.strftime("%Y-%m-%d"), price=close, volume=vol)
        for ts, close, vol in zip(sample_ohlcv.index, sample_ohlcv["Close"], sample_ohlcv["Volume"])
    )
    return HistoricalData(ticker="ACME", period="1Y", data_points=points)


# ---------------------------------------------------------------------------
# 5. Portfolio
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_portfolio():
    return Portfolio(
        id="p1",
        name="Core",
        holdings=(
            PortfolioHolding(ticker="AAPL", shares=10, average_cost_basis=100.0),
            PortfolioHolding(ticker="MSFT", shares=5, average_cost_basis=200.0),
            PortfolioHolding(ticker="TSLA", shares=2, average_cost_basis=250.0),
        ),
    )


@pytest.fixture
def sample_prices():
    # AAPL 1500 / MSFT 1100 / TSLA 400 -> total 3000
    return {"AAPL": 150.0, "MSFT": 220.0, "TSLA": 200.0}
