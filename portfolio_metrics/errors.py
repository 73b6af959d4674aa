# portfolio_metrics/errors.py
from __future__ import annotations


class PortfolioMetricsError(Exception):
    """Base class for everything this service raises on purpose."""


class ConfigError(PortfolioMetricsError):
    """Configuration could not be loaded. Fatal at startup."""


class DuplicateAssetError(ConfigError):
    """The same asset symbol was prepared twice."""

    def __init__(self, symbol: str):
        super().__init__(f"asset {symbol!r} is configured more than once")
        self.symbol = symbol


class PriceFetchError(PortfolioMetricsError):
    """A single price fetch failed. The current cycle is skipped."""
