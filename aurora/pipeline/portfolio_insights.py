"""Portfolio insights pipeline: analyze every holding of a book in one pass.

Data fetches fan out over a ``ThreadPoolExecutor``; the per-holding analysis
is the same pure engine code used for single-stock requests. A failed fetch
is logged and recorded in ``errors`` without aborting the run.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Optional, Protocol

from aurora.analysis.active_manager import build_active_manager_recommendation
from aurora.analysis.composer import Clock, analyze_stock
from aurora.analysis.portfolio import (
    build_portfolio_context,
    calculate_allocation,
    calculate_portfolio_metrics,
    calculate_portfolio_stress_test,
    detect_concentration_risk,
)
from aurora.config import ActiveManagerConfig, load_settings
from aurora.data_sources.market_data import MarketDataClient
from aurora.models.base import Serializable, freeze_list
from aurora.models.insights import AnalysisResult
from aurora.models.portfolio import (
    ConcentrationRisk,
    HoldingScenarioSnapshot,
    Portfolio,
    PortfolioAllocation,
    PortfolioContext,
    PortfolioMetrics,
    PortfolioStressTestResult,
)
from aurora.models.profile import UserProfile
from aurora.models.recommendation import ActiveManagerRecommendation
from aurora.models.stock import StockData
from aurora.utils.logger import setup_logger

logger = setup_logger("pipeline")

DEFAULT_PROFILE = UserProfile(risk_tolerance="moderate", horizon="5-10", objective="balanced")
DEFAULT_MAX_WORKERS = 4


class StockDataProvider(Protocol):
    def get_stock_data(self, ticker: str) -> StockData: ...


@dataclass(frozen=True)
class HoldingInsight(Serializable):
    ticker: str
    analysis: AnalysisResult
    context: PortfolioContext
    recommendation: Optional[ActiveManagerRecommendation] = None


@dataclass(frozen=True)
class PipelineError(Serializable):
    ticker: str
    error: str


@dataclass(frozen=True)
class PortfolioInsightsBundle(Serializable):
    insights: tuple[HoldingInsight, ...] = ()
    allocations: tuple[PortfolioAllocation, ...] = ()
    metrics: PortfolioMetrics = field(default_factory=PortfolioMetrics)
    concentration: ConcentrationRisk = field(default_factory=ConcentrationRisk)
    stress_test: PortfolioStressTestResult = field(default_factory=PortfolioStressTestResult)
    errors: tuple[PipelineError, ...] = ()

    def __post_init__(self) -> None:
        for name in ("insights", "allocations", "errors"):
            freeze_list(self, name)


def _configured_workers() -> int:
    return int(load_settings().get("pipeline", {}).get("max_workers", DEFAULT_MAX_WORKERS))


def _fetch_all(
    provider: StockDataProvider,
    tickers: list[str],
    max_workers: int,
) -> tuple[dict[str, StockData], list[PipelineError]]:
    """Fetch ``StockData`` for every ticker concurrently."""
    fetched: dict[str, StockData] = {}
    errors: list[PipelineError] = []

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(provider.get_stock_data, t): t for t in tickers}
        for future in as_completed(futures):
            ticker = futures[future]
            try:
                fetched[ticker] = future.result()
            except Exception as e:
                logger.warning("Skipping %s: %s", ticker, e)
                errors.append(PipelineError(ticker=ticker, error=str(e)))

    # as_completed order is nondeterministic
    errors.sort(key=lambda err: tickers.index(err.ticker))
    return fetched, errors


def build_portfolio_insights(
    portfolio: Portfolio,
    profile: Optional[UserProfile] = None,
    provider: Optional[StockDataProvider] = None,
    config: Optional[ActiveManagerConfig] = None,
    max_workers: Optional[int] = None,
    clock: Optional[Clock] = None,
) -> PortfolioInsightsBundle:
    """Analyze every holding in *portfolio* and aggregate book-level views.

    Args:
        portfolio: The investor's holdings.
        profile: Investor profile; defaults to moderate / 5-10 / balanced.
        provider: Object with ``get_stock_data(ticker)``; defaults to the
            yfinance-backed :class:`~aurora.data_sources.MarketDataClient`.
        config: Recommendation thresholds (portfolio thresholds included).
        max_workers: Fetch concurrency; defaults to ``pipeline.max_workers``.
        clock: Passed through to :func:`analyze_stock`.
    """
    if portfolio is None or not portfolio.holdings:
        return PortfolioInsightsBundle()

    profile = profile or DEFAULT_PROFILE
    config = config or ActiveManagerConfig()
    provider = provider or MarketDataClient()
    workers = max_workers or _configured_workers()

    tickers = list(dict.fromkeys(h.ticker.upper() for h in portfolio.holdings))
    logger.info("Portfolio insights started: %s (%d tickers)", portfolio.name, len(tickers))
    stocks, errors = _fetch_all(provider, tickers, workers)

    prices = {
        t: s.technicals.price
        for t, s in stocks.items()
        if s.technicals is not None and s.technicals.price is not None
    }
    allocations = calculate_allocation(portfolio, prices)

    insights: list[HoldingInsight] = []
    analyses: dict[str, AnalysisResult] = {}
    for ticker in tickers:
        stock = stocks.get(ticker)
        if stock is None:
            continue
        analysis = analyze_stock(profile, stock, clock=clock)
        analyses[ticker] = analysis
        context = build_portfolio_context(
            ticker,
            portfolio,
            prices,
            conviction_score=analysis.summary.conviction_score_3m,
            config=config.portfolio,
        )
        insights.append(
            HoldingInsight(
                ticker=ticker,
                analysis=analysis,
                context=context,
                recommendation=build_active_manager_recommendation(
                    analysis, profile, context, config
                ),
            )
        )

    snapshots = [
        HoldingScenarioSnapshot(
            ticker=h.ticker.upper(),
            shares=h.shares,
            current_price=prices.get(h.ticker.upper(), h.average_cost_basis),
            scenarios=analyses[h.ticker.upper()].scenarios,
        )
        for h in portfolio.holdings
        if h.ticker.upper() in analyses
    ]

    logger.info("Portfolio insights finished: %d analyzed, %d errors", len(insights), len(errors))
    return PortfolioInsightsBundle(
        insights=tuple(insights),
        allocations=tuple(allocations),
        metrics=calculate_portfolio_metrics(portfolio, prices),
        concentration=detect_concentration_risk(allocations, config.portfolio),
        stress_test=calculate_portfolio_stress_test(snapshots),
        errors=tuple(errors),
    )
