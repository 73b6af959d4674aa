import pytest
from prometheus_client import Gauge

from portfolio_metrics.errors import ConfigError, DuplicateAssetError
from portfolio_metrics.gauges import prepare_gauges


def test_one_gauge_per_symbol_keyed_lowercase(registry):
    gauges = prepare_gauges(["BTC", "Eth"], "USD", registry=registry)
    assert set(gauges) == {"btc", "eth"}
    assert registry.get_sample_value("portfolio_metrics_btc_usd") == 0.0
    assert registry.get_sample_value("portfolio_metrics_eth_usd") == 0.0


def test_namespace_is_configurable(registry):
    gauges = prepare_gauges(["BTC"], "eur", namespace="wallet", registry=registry)
    gauges["btc"].set(12.5)
    assert registry.get_sample_value("wallet_btc_eur") == 12.5


def test_duplicate_symbol_fails_fast(registry):
    with pytest.raises(DuplicateAssetError) as exc:
        prepare_gauges(["BTC", "ETH", "BTC"], "USD", registry=registry)
    assert exc.value.symbol == "BTC"
    assert isinstance(exc.value, ConfigError)


def test_duplicate_ignores_case(registry):
    with pytest.raises(DuplicateAssetError):
        prepare_gauges(["btc", "BTC"], "USD", registry=registry)


def test_second_registration_in_same_registry_fails(registry):
    prepare_gauges(["BTC"], "USD", registry=registry)
    with pytest.raises(DuplicateAssetError):
        prepare_gauges(["BTC"], "USD", registry=registry)


def test_name_already_taken_by_other_collector(registry):
    Gauge("portfolio_metrics_btc_usd", "registered elsewhere", registry=registry)
    with pytest.raises(DuplicateAssetError) as exc:
        prepare_gauges(["ETH", "BTC"], "USD", registry=registry)
    assert exc.value.symbol == "BTC"
