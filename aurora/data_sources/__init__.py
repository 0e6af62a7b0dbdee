"""Market data providers."""

from .market_data import MarketDataClient, MarketDataError
