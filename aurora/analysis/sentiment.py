"""Sentiment read: analyst consensus, target-vs-price gap and news highlight."""

from __future__ import annotations

from typing import Optional

from aurora.models.insights import SentimentRead
from aurora.models.stock import AnalystConsensus, StockData

SIGNIFICANT_GAP_PCT = 15.0
MAX_NEWS_THEMES = 3


def consensus_label(consensus: Optional[AnalystConsensus]) -> str:
    if consensus is None:
        return "No consensus"
    if consensus == "strong_buy":
        return "Strong Buy"
    if consensus == "buy":
        return "Buy"
    if consensus == "hold":
        return "Hold"
    if consensus == "sell":
        return "Sell"
    if consensus == "strong_sell":
        return "Strong Sell"
    raise ValueError(f"Unknown analyst consensus: {consensus!r}")


def _target_gap(target_mean: Optional[float], price: Optional[float]) -> tuple[str, Optional[float]]:
    if not target_mean or price is None or price <= 0:
        return "Unknown", None
    upside = (target_mean - price) / price * 100
    if upside > SIGNIFICANT_GAP_PCT:
        return f"Significant upside ({upside:.1f}%)", upside
    if upside < -SIGNIFICANT_GAP_PCT:
        return f"Downside risk ({upside:.1f}%)", upside
    return f"Limited upside/downside ({upside:.1f}%)", upside


def _news_highlight(themes: tuple[str, ...]) -> str:
    if not themes:
        return "No recent news themes available."
    return ". ".join(themes[:MAX_NEWS_THEMES]) + "."


def analyze_sentiment(stock: StockData) -> SentimentRead:
    s = stock.sentiment if stock is not None else None
    if s is None:
        return SentimentRead()

    price = stock.technicals.price if stock.technicals is not None else None
    target_text, upside = _target_gap(s.analyst_target_mean, price)
    return SentimentRead(
        consensus_text=consensus_label(s.analyst_consensus),
        target_vs_price=target_text,
        upside_pct=upside,
        news_highlight=_news_highlight(s.news_themes),
    )
