# portfolio_metrics/gauges.py
from __future__ import annotations

import logging
from typing import Iterable, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Gauge

from .errors import ConfigError, DuplicateAssetError

logger = logging.getLogger(__name__)

GaugeSet = dict[str, Gauge]


def prepare_gauges(
    symbols: Iterable[str],
    currency: str,
    *,
    namespace: str = "portfolio_metrics",
    registry: Optional[CollectorRegistry] = None,
) -> GaugeSet:
    """
    Register one gauge per asset, exposed as <namespace>_<symbol>_<currency>.
    Keys of the returned mapping are the lowercased symbols.
    Fails on the first repeated symbol instead of overwriting.
    """
    reg = REGISTRY if registry is None else registry
    quote = currency.lower()
    gauges: GaugeSet = {}
    for coin in symbols:
        symbol = coin.lower()
        if symbol in gauges:
            raise DuplicateAssetError(coin)
        name = "_".join(p for p in (namespace, symbol, quote) if p)
        if name in reg._names_to_collectors:
            raise DuplicateAssetError(coin)
        try:
            gauge = Gauge(
                quote,
                "Ticker for a specific crypto",
                namespace=namespace,
                subsystem=symbol,
                registry=reg,
            )
        except ValueError as e:
            raise ConfigError(f"cannot export a gauge for {coin!r}: {e}") from e
        gauges[symbol] = gauge
        logger.debug("registered gauge %s", name)
    return gauges
