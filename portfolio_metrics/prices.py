# portfolio_metrics/prices.py
from __future__ import annotations

import logging
from typing import Iterable, Optional

import httpx
from pydantic import FiniteFloat, TypeAdapter, ValidationError

from .config import settings
from .errors import PriceFetchError

logger = logging.getLogger(__name__)

# {"BTC": {"USD": 50000.0, "EUR": 46000.0}, ...}
PriceTable = dict[str, dict[str, float]]

# strict: no numeric strings, no booleans, no NaN/Infinity
_price_table = TypeAdapter(dict[str, dict[str, FiniteFloat]])


def build_params(symbols: Iterable[str], currency: str) -> dict[str, str]:
    return {"fsyms": ",".join(symbols), "tsyms": currency}


def parse_price_table(body: bytes) -> PriceTable:
    """Decode a pricemulti response body. Anything not shaped {base: {quote: number}} is rejected."""
    try:
        return _price_table.validate_json(body, strict=True)
    except ValidationError as e:
        first = e.errors()[0]
        if first["type"] == "json_invalid":
            raise PriceFetchError(f"malformed JSON from price API: {first['msg']}") from e
        raise PriceFetchError(f"unexpected price API payload: {e.error_count()} error(s), first: {first['msg']}") from e


async def fetch_prices(
    symbols: Iterable[str],
    currency: str,
    *,
    url: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> PriceTable:
    """Single-attempt fetch of `currency` prices for `symbols`."""
    params = build_params(symbols, currency)
    target = url or settings.price_api_url
    try:
        if client is None:
            async with httpx.AsyncClient() as own:
                r = await own.get(target, params=params)
        else:
            r = await client.get(target, params=params)
    except httpx.HTTPError as e:
        raise PriceFetchError(f"price API request failed: {e!r}") from e

    if r.status_code > 299:
        raise PriceFetchError(f"Bad status: {r.status_code} {r.reason_phrase}")

    logger.debug("price API answered %s for %s", r.status_code, params["fsyms"])
    return parse_price_table(r.content)
