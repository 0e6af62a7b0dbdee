"""Market data client - maps yfinance quotes, history and news onto engine inputs.

Primary (and only) source: yfinance. Unknown numbers are left as ``None``,
never zero. Failures surface as :class:`MarketDataError`; retries and
caching belong to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

import pandas as pd
import yfinance as yf
from ta.momentum import RSIIndicator
from ta.trend import SMAIndicator

from aurora.models.stock import (
    HistoricalData,
    HistoricalDataPoint,
    StockData,
    StockFundamentals,
    StockSentiment,
    StockTechnicals,
)
from aurora.utils.logger import setup_logger
from aurora.utils.numbers import clean_number

logger = setup_logger("market_data")

# HistoricalData period -> yfinance period string
_PERIOD_MAP = {"1M": "1mo", "3M": "3mo", "6M": "6mo", "1Y": "1y", "5Y": "5y"}

# yfinance recommendationKey -> analyst consensus
_CONSENSUS_MAP = {
    "strong_buy": "strong_buy",
    "buy": "buy",
    "hold": "hold",
    "underperform": "sell",
    "sell": "sell",
    "strong_sell": "strong_sell",
}

_RSI_PERIOD = 14
_SMA_SHORT = 20
_MAX_NEWS_THEMES = 5


class MarketDataError(RuntimeError):
    """Raised when a ticker is unknown or the provider cannot be reached."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _pct(value: Any) -> Optional[float]:
    """yfinance fractions (0.25) -> percent (25.0)."""
    number = clean_number(value)
    return None if number is None else number * 100


def _ratio(numerator: Any, denominator: Any, scale: float = 1.0) -> Optional[float]:
    num, den = clean_number(numerator), clean_number(denominator)
    if num is None or not den:
        return None
    return num / den * scale


def _last(series: pd.Series) -> Optional[float]:
    series = series.dropna()
    if series.empty:
        return None
    return clean_number(series.iloc[-1])


def wilder_rsi(close: pd.Series, period: int = _RSI_PERIOD) -> pd.Series:
    """Relative strength index with Wilder's smoothing (alpha = 1/period)."""
    return RSIIndicator(close, window=period).rsi()


def _news_titles(news: Any) -> tuple[str, ...]:
    titles = []
    for item in news or []:
        if not isinstance(item, dict):
            continue
        # newer yfinance releases nest the article under "content"
        content = item.get("content") if isinstance(item.get("content"), dict) else item
        title = content.get("title")
        if title:
            titles.append(str(title).strip())
    return tuple(titles[:_MAX_NEWS_THEMES])


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class MarketDataClient:
    """Fetch ``StockData`` and ``HistoricalData`` from yfinance."""

    def _ticker(self, ticker: str) -> yf.Ticker:
        return yf.Ticker(ticker)

    def _info(self, handle: yf.Ticker, ticker: str) -> dict:
        try:
            info = handle.info or {}
        except Exception as e:
            raise MarketDataError(f"Failed to fetch quote for {ticker}: {e}") from e
        return info

    def _history(self, handle: yf.Ticker, ticker: str, period: str) -> pd.DataFrame:
        try:
            df = handle.history(period=period, interval="1d")
        except Exception as e:
            raise MarketDataError(f"Failed to fetch price history for {ticker}: {e}") from e
        return df if df is not None else pd.DataFrame()

    def _news(self, handle: yf.Ticker, ticker: str) -> tuple[str, ...]:
        try:
            return _news_titles(handle.news)
        except Exception as e:
            # news is optional context; a failed fetch leaves the themes empty
            logger.warning("News fetch failed for %s: %s", ticker, e)
            return ()

    # ------------------------------------------------------------------

    @staticmethod
    def _fundamentals(info: dict) -> StockFundamentals:
        debt_to_equity = clean_number(info.get("debtToEquity"))
        return StockFundamentals(
            trailing_pe=info.get("trailingPE"),
            forward_pe=info.get("forwardPE"),
            dividend_yield_pct=_pct(info.get("trailingAnnualDividendYield")),
            revenue_growth_yoy_pct=_pct(info.get("revenueGrowth")),
            eps_growth_yoy_pct=_pct(info.get("earningsGrowth")),
            net_margin_pct=_pct(info.get("profitMargins")),
            free_cash_flow_yield_pct=_ratio(info.get("freeCashflow"), info.get("marketCap"), 100),
            # yfinance reports debt/equity as a percentage (150 == 1.5x)
            debt_to_equity=None if debt_to_equity is None else debt_to_equity / 100,
            roe=_pct(info.get("returnOnEquity")),
        )

    @staticmethod
    def _technicals(info: dict, history: pd.DataFrame) -> StockTechnicals:
        close = history["Close"] if "Close" in history.columns else pd.Series(dtype=float)
        price = clean_number(info.get("currentPrice") or info.get("regularMarketPrice"))
        if price is None:
            price = _last(close)
        sma20 = (
            _last(SMAIndicator(close, window=_SMA_SHORT).sma_indicator())
            if len(close) >= _SMA_SHORT
            else None
        )
        rsi14 = _last(wilder_rsi(close)) if len(close) > _RSI_PERIOD else None
        return StockTechnicals(
            price=price,
            price_52w_high=info.get("fiftyTwoWeekHigh"),
            price_52w_low=info.get("fiftyTwoWeekLow"),
            sma20=sma20,
            sma50=info.get("fiftyDayAverage"),
            sma200=info.get("twoHundredDayAverage"),
            rsi14=rsi14,
            volume=info.get("volume"),
            avg_volume=info.get("averageVolume"),
        )

    @staticmethod
    def _sentiment(info: dict, themes: tuple[str, ...]) -> StockSentiment:
        key = str(info.get("recommendationKey") or "").lower()
        return StockSentiment(
            analyst_consensus=_CONSENSUS_MAP.get(key),
            analyst_target_mean=info.get("targetMeanPrice"),
            analyst_target_high=info.get("targetHighPrice"),
            analyst_target_low=info.get("targetLowPrice"),
            news_themes=themes,
        )

    def get_stock_data(self, ticker: str) -> StockData:
        """Fundamentals, technicals and sentiment for *ticker*.

        Raises:
            MarketDataError: the ticker is unknown or yfinance failed.
        """
        symbol = ticker.strip().upper()
        logger.info("Fetching stock data: %s", symbol)
        handle = self._ticker(symbol)
        info = self._info(handle, symbol)
        history = self._history(handle, symbol, "1y")

        if history.empty and not info.get("currentPrice") and not info.get("regularMarketPrice"):
            raise MarketDataError(f"Ticker not found: {symbol}")

        return StockData(
            ticker=symbol,
            name=info.get("longName") or info.get("shortName"),
            currency=info.get("currency"),
            fundamentals=self._fundamentals(info),
            technicals=self._technicals(info, history),
            sentiment=self._sentiment(info, self._news(handle, symbol)),
        )

    def get_historical_data(self, ticker: str, period: str = "6M") -> HistoricalData:
        """Daily closes for *ticker* over *period* (1M, 3M, 6M, 1Y or 5Y)."""
        if period not in _PERIOD_MAP:
            raise ValueError(f"Unsupported period {period!r}; expected one of {sorted(_PERIOD_MAP)}")

        symbol = ticker.strip().upper()
        logger.info("Fetching price history: %s (period=%s)", symbol, period)
        history = self._history(self._ticker(symbol), symbol, _PERIOD_MAP[period])
        if history.empty or "Close" not in history.columns:
            raise MarketDataError(f"No price history for {symbol}")

        if "Volume" in history.columns:
            volumes = history["Volume"]
        else:
            volumes = pd.Series(index=history.index, dtype=float)
        points = tuple(
            HistoricalDataPoint(date=pd.Timestamp(ts).strftime("%Y-%m-%d"), price=close, volume=volume)
            for ts, close, volume in zip(history.index, history["Close"], volumes)
        )
        return HistoricalData(ticker=symbol, period=period, data_points=points)

