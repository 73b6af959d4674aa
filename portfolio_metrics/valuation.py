# portfolio_metrics/valuation.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from .config import PortfolioConfig
from .errors import PriceFetchError
from .gauges import GaugeSet
from .prices import PriceTable, fetch_prices

logger = logging.getLogger(__name__)

Fetcher = Callable[[list[str], str], Awaitable[PriceTable]]


class TotalCell:
    """Latest portfolio total. One writer (the engine), any number of readers."""

    def __init__(self) -> None:
        self._value: Optional[float] = None

    def store(self, value: float) -> None:
        self._value = float(value)

    def load(self) -> Optional[float]:
        return self._value


def value_holdings(prices: PriceTable, config: PortfolioConfig, currency: str) -> tuple[dict[str, float], float]:
    """
    Price every base symbol of `prices` in `currency`.
    Returns (contribution per lowercased symbol, grand total). Quote currencies
    are matched case-insensitively; symbols not held count as 0.
    """
    quote = currency.lower()
    contributions: dict[str, float] = {}
    total = 0.0
    for base, quotes in prices.items():
        for name, price in quotes.items():
            if name.lower() != quote:
                continue
            subtotal = price * config.amount_of(base)
            contributions[base.lower()] = subtotal
            total += subtotal
    return contributions, total


class PortfolioValuation:
    def __init__(
        self,
        config: PortfolioConfig,
        gauges: GaugeSet,
        total: Optional[TotalCell] = None,
        fetch: Optional[Fetcher] = None,
    ):
        self.config = config
        self.currency = config.currency
        self.symbols = config.symbols
        self.gauges = gauges
        self.total = total if total is not None else TotalCell()
        self._fetch = fetch or fetch_prices
        self._lock = asyncio.Lock()
        self.last_success: Optional[datetime] = None
        self.last_error: Optional[str] = None

    async def update(self) -> bool:
        """Run one cycle. Returns True when new values were published."""
        async with self._lock:
            logger.info("Updating portfolio...")
            try:
                prices = await self._fetch(list(self.symbols), self.currency)
                contributions, total = value_holdings(prices, self.config, self.currency)
            except PriceFetchError as e:
                self.last_error = str(e)
                logger.error("price fetch failed, keeping previous values: %s", e)
                return False
            except Exception as e:
                self.last_error = repr(e)
                logger.exception("portfolio update failed, keeping previous values")
                return False

            for symbol, subtotal in contributions.items():
                gauge = self.gauges.get(symbol)
                if gauge is None:
                    logger.debug("no gauge for %s, skipped", symbol)
                    continue
                gauge.set(subtotal)
            self.total.store(total)

            self.last_success = datetime.now(timezone.utc)
            self.last_error = None
            logger.info("portfolio total %.2f %s", total, self.currency)
            return True
