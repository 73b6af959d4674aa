# portfolio_metrics/main.py
from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import FastAPI, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest
from pydantic import BaseModel
from rich.console import Console
from rich.logging import RichHandler

from .config import PortfolioConfig, Settings, load_config, settings
from .errors import ConfigError
from .gauges import prepare_gauges
from .valuation import Fetcher, PortfolioValuation
from .worker import PortfolioWorker

logger = logging.getLogger(__name__)
console = Console(stderr=True)


class StatusResponse(BaseModel):
    running: bool
    version: str
    currency: str
    last_success: Optional[datetime]
    last_error: Optional[str]


def format_total(total: Optional[float]) -> str:
    # nothing published yet reads as zero
    return "%.2f" % (total or 0.0)


def create_app(
    config: PortfolioConfig,
    *,
    registry: Optional[CollectorRegistry] = None,
    fetch: Optional[Fetcher] = None,
    opts: Settings = settings,
) -> FastAPI:
    """Wire gauges, engine and worker for `config` into a FastAPI app."""
    opts.check()
    reg = REGISTRY if registry is None else registry
    gauges = prepare_gauges(config.symbols, config.currency, namespace=opts.metrics_namespace, registry=reg)
    engine = PortfolioValuation(config, gauges, fetch=fetch)
    worker = PortfolioWorker(engine, opts.update_interval_seconds)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        await worker.start()
        try:
            yield
        finally:
            await worker.stop()

    app = FastAPI(title="Portfolio Metrics", version=opts.app_version, lifespan=lifespan)
    app.state.engine = engine
    app.state.worker = worker

    @app.get("/", response_class=PlainTextResponse)
    async def portfolio_total():
        return format_total(engine.total.load())

    @app.get("/metrics")
    async def metrics():
        return Response(content=generate_latest(reg), media_type=CONTENT_TYPE_LATEST)

    @app.get("/status", response_model=StatusResponse)
    async def status():
        return StatusResponse(
            running=worker.running,
            version=opts.app_version,
            currency=config.currency,
            last_success=engine.last_success,
            last_error=engine.last_error,
        )

    @app.get("/logs")
    async def logs():
        return worker.logs()

    return app


def run():
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    try:
        config = load_config(settings.config_path)
        app = create_app(config)
        host, port = config.listen_on()
    except ConfigError as e:
        console.print("config error:", str(e), style="bold red", markup=False)
        sys.exit(1)

    console.print("Starting on", config.bind_address, markup=False)
    # uvicorn exits non-zero by itself when the socket cannot be bound
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    run()
