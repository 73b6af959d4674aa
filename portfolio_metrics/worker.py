# portfolio_metrics/worker.py
from __future__ import annotations

import asyncio
import contextlib
from collections import deque
from typing import Optional

from rich.console import Console

from .valuation import PortfolioValuation

console = Console()


class PortfolioWorker:
    def __init__(self, engine: PortfolioValuation, interval: float):
        self.engine = engine
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._log_buffer: deque[dict] = deque(maxlen=250)  # in-memory only, lost on restart

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def logs(self) -> list[dict]:
        return list(self._log_buffer)

    async def run_once(self) -> bool:
        ok = await self.engine.update()
        if ok:
            event = {"ok": True, "total": self.engine.total.load()}
        else:
            event = {"ok": False, "error": self.engine.last_error}
        self._log_buffer.append(event)
        console.log(event)
        return ok

    async def _loop(self):
        console.log(f"Worker loop started (every {self.interval:g}s)")
        try:
            while True:
                await asyncio.sleep(self.interval)
                await self.run_once()
        finally:
            console.log("Worker loop stopped")

    async def start(self):
        """First cycle runs inline so the total is populated before the first tick."""
        if self.running:
            return
        await self.run_once()
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        if not self.running:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
