import pytest
from prometheus_client import CollectorRegistry

from portfolio_metrics.config import PortfolioConfig


@pytest.fixture
def portfolio():
    """BTC 2.0 + ETH 10.0 valued in USD."""
    return PortfolioConfig(
        bind_address=":8080",
        currency="USD",
        coins=[{"name": "BTC", "amount": 2.0}, {"name": "ETH", "amount": 10.0}],
    )


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def price_table():
    return {"BTC": {"USD": 50000.0}, "ETH": {"USD": 3000.0}}


class FakeFetcher:
    """Stands in for fetch_prices; returns a fixed table or raises."""

    def __init__(self, table=None, error=None):
        self.table = table
        self.error = error
        self.calls = []

    async def __call__(self, symbols, currency):
        self.calls.append((list(symbols), currency))
        if self.error is not None:
            raise self.error
        return self.table


@pytest.fixture
def fake_fetcher(price_table):
    return FakeFetcher(table=price_table)
