"""Tests for aurora.pipeline.portfolio_insights -- whole-book analysis run."""

from dataclasses import replace
from unittest.mock import patch

import pytest

from aurora.data_sources.market_data import MarketDataError
from aurora.models import Portfolio, PortfolioHolding, StockTechnicals
from aurora.pipeline import PortfolioInsightsBundle, build_portfolio_insights


class FakeProvider:
    """In-memory stand-in for ``MarketDataClient``."""

    def __init__(self, stocks):
        self.stocks = stocks
        self.calls = []

    def get_stock_data(self, ticker):
        self.calls.append(ticker)
        if ticker not in self.stocks:
            raise MarketDataError(f"Ticker not found: {ticker}")
        return self.stocks[ticker]


def _priced(stock, ticker, price):
    return replace(stock, ticker=ticker, technicals=replace(stock.technicals, price=price))


@pytest.fixture
def provider(strong_stock):
    return FakeProvider(
        {
            "AAPL": _priced(strong_stock, "AAPL", 150.0),
            "MSFT": _priced(strong_stock, "MSFT", 220.0),
        }
    )


@pytest.fixture
def book():
    return Portfolio(
        id="p1",
        name="Core",
        holdings=(
            PortfolioHolding(ticker="AAPL", shares=10, average_cost_basis=100.0),
            PortfolioHolding(ticker="msft", shares=5, average_cost_basis=200.0),
            PortfolioHolding(ticker="BAD", shares=2, average_cost_basis=250.0),
        ),
    )


class TestBuildPortfolioInsights:

    def test_analyzes_each_holding(self, book, provider, moderate_profile, frozen_clock):
        bundle = build_portfolio_insights(
            book, moderate_profile, provider=provider, max_workers=2, clock=frozen_clock
        )
        assert [i.ticker for i in bundle.insights] == ["AAPL", "MSFT"]
        assert sorted(provider.calls) == ["AAPL", "BAD", "MSFT"]
        for insight in bundle.insights:
            assert insight.analysis.generated_at == "2024-03-15T14:30:05.123Z"
            assert insight.recommendation.ticker == insight.ticker
            assert insight.context.existing_holding is not None

    def test_failed_fetch_is_recorded_not_raised(self, book, provider, moderate_profile):
        bundle = build_portfolio_insights(book, moderate_profile, provider=provider, max_workers=2)
        assert len(bundle.errors) == 1
        assert bundle.errors[0].ticker == "BAD"
        assert "Ticker not found" in bundle.errors[0].error

    def test_allocations_use_fetched_prices(self, book, provider, moderate_profile):
        bundle = build_portfolio_insights(book, moderate_profile, provider=provider, max_workers=2)
        by_ticker = {a.ticker: a for a in bundle.allocations}
        # BAD has no quote, so it is valued at cost
        assert by_ticker["AAPL"].value == 1500.0
        assert by_ticker["MSFT"].value == 1100.0
        assert by_ticker["BAD"].value == 500.0
        assert bundle.metrics.total_value == 3100.0

    def test_concentration_and_stress_test(self, book, provider, moderate_profile):
        bundle = build_portfolio_insights(book, moderate_profile, provider=provider, max_workers=2)
        assert bundle.concentration.level == "high"
        assert [e.ticker for e in bundle.stress_test.entries] == ["AAPL", "MSFT"]
        assert bundle.stress_test.current_value == 2600.0
        assert bundle.stress_test.bull_value > bundle.stress_test.current_value > bundle.stress_test.bear_value

    def test_oversized_holding_is_not_a_buy(self, book, provider, moderate_profile):
        bundle = build_portfolio_insights(book, moderate_profile, provider=provider, max_workers=2)
        aapl = next(i for i in bundle.insights if i.ticker == "AAPL")
        assert aapl.context.position_weight_pct > 25
        assert aapl.recommendation.primary_action in ("trim", "sell")

    def test_missing_price_uses_cost_basis(self, strong_stock, moderate_profile):
        stocks = {"AAPL": replace(strong_stock, ticker="AAPL", technicals=StockTechnicals())}
        book = Portfolio(
            id="p", name="One", holdings=(PortfolioHolding(ticker="AAPL", shares=4, average_cost_basis=50.0),)
        )
        bundle = build_portfolio_insights(book, moderate_profile, provider=FakeProvider(stocks), max_workers=1)
        assert bundle.stress_test.current_value == 200.0
        assert bundle.allocations[0].weight_pct == 100.0

    def test_empty_portfolio(self, moderate_profile):
        bundle = build_portfolio_insights(Portfolio(id="p", name="Empty"), moderate_profile)
        assert bundle == PortfolioInsightsBundle()
        assert bundle.to_dict()["insights"] == []

    def test_defaults_to_market_data_client(self, book, provider):
        with patch("aurora.pipeline.portfolio_insights.MarketDataClient", return_value=provider) as mock_cls:
            bundle = build_portfolio_insights(book, max_workers=2)
        mock_cls.assert_called_once_with()
        assert len(bundle.insights) == 2
        assert bundle.insights[0].recommendation.horizon == "medium_term"

    def test_reads_worker_count_from_settings(self, book, provider, moderate_profile):
        with patch(
            "aurora.pipeline.portfolio_insights.load_settings",
            return_value={"pipeline": {"max_workers": 1}},
        ) as mock_settings:
            bundle = build_portfolio_insights(book, moderate_profile, provider=provider)
        mock_settings.assert_called_once()
        assert len(bundle.insights) == 2
