# portfolio_metrics/config.py
from __future__ import annotations

import os
import tomllib
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

load_dotenv()

# process settings
#   CONFIG_PATH: TOML file with BindAddress / Currency / [[Coins]]
#   PRICE_API_URL: pricemulti-compatible endpoint
#   UPDATE_INTERVAL_SECONDS: delay between refresh cycles
#   METRICS_NAMESPACE: prefix of every exported gauge

class Settings(BaseModel):
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    config_path: str = os.getenv("CONFIG_PATH", "config.toml")
    price_api_url: str = os.getenv("PRICE_API_URL", "https://min-api.cryptocompare.com/data/pricemulti")
    update_interval_seconds: float = float(os.getenv("UPDATE_INTERVAL_SECONDS", "60"))
    metrics_namespace: str = os.getenv("METRICS_NAMESPACE", "portfolio_metrics")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def check(self) -> None:
        if self.update_interval_seconds <= 0:
            raise ConfigError(f"UPDATE_INTERVAL_SECONDS must be > 0, got {self.update_interval_seconds:g}")


class CoinConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name", min_length=1)
    amount: float = Field(alias="Amount", default=0.0)


class PortfolioConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bind_address: str = Field(alias="BindAddress")
    currency: str = Field(alias="Currency", min_length=1)
    coins: list[CoinConfig] = Field(alias="Coins", default_factory=list)

    @field_validator("coins")
    @classmethod
    def _unique_symbols(cls, coins: list[CoinConfig]) -> list[CoinConfig]:
        seen: set[str] = set()
        for coin in coins:
            key = coin.name.lower()
            if key in seen:
                raise ValueError(f"duplicate coin {coin.name!r}")
            seen.add(key)
        return coins

    @property
    def symbols(self) -> list[str]:
        return [c.name for c in self.coins]

    def amount_of(self, symbol: str) -> float:
        """Configured amount for `symbol` (case-insensitive), 0.0 when not held."""
        wanted = symbol.lower()
        for coin in self.coins:
            if coin.name.lower() == wanted:
                return coin.amount
        return 0.0

    def listen_on(self) -> tuple[str, int]:
        """Split BindAddress into (host, port). An empty host means all interfaces."""
        host, sep, port = self.bind_address.rpartition(":")
        if not sep or not port.isdigit():
            raise ConfigError(f"invalid BindAddress {self.bind_address!r}, expected host:port")
        return (host.strip("[]") or "0.0.0.0"), int(port)


def load_config(path: str | os.PathLike[str]) -> PortfolioConfig:
    p = Path(path)
    try:
        with p.open("rb") as f:
            raw = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {p}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {p}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"config file {p} is not UTF-8: {e}") from e
    except OSError as e:
        raise ConfigError(f"cannot read config file {p}: {e}") from e

    try:
        cfg = PortfolioConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid config {p}: {e}") from e
    cfg.listen_on()
    return cfg


settings = Settings()
