"""MonitorContext: the process-scoped object graph with an explicit lifecycle.

Wires client -> store -> scheduler -> controller once, and exposes
``start()`` / ``stop()`` so the app lifespan (or a test) mounts and tears it
down deterministically instead of relying on module-level globals.
"""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx

from config.settings import Settings, settings as default_settings
from src.om_client.infrastructure.http_client import MatchingEngineClient
from src.om_common.errors import AppError
from src.om_order.application.controller import OrderSubmissionController
from src.om_sync.application.scheduler import PollScheduler, SleepFn
from src.om_sync.domain.store import SyncStore

logger = logging.getLogger(__name__)


class MonitorContext:
    def __init__(
        self,
        config: Settings | None = None,
        http: httpx.AsyncClient | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        cfg = config or default_settings
        self.config = cfg
        self.client = MatchingEngineClient(
            cfg.ENGINE_BASE_URL,
            timeout_seconds=cfg.ENGINE_TIMEOUT_SECONDS,
            http=http,
            health_timeout_seconds=cfg.ENGINE_HEALTH_TIMEOUT_SECONDS,
        )
        self.store = SyncStore(trade_window=cfg.TRADE_WINDOW, dedupe_trades=cfg.DEDUPE_TRADES)
        scheduler_kwargs = {"sleep": sleep} if sleep is not None else {}
        self.scheduler = PollScheduler(
            self.client,
            self.store,
            interval_ms=cfg.POLL_INTERVAL_MS,
            max_in_flight=cfg.POLL_MAX_IN_FLIGHT,
            **scheduler_kwargs,
        )
        self.controller = OrderSubmissionController(self.client, refresh=self.scheduler.refresh)

    async def start(self) -> None:
        # Polling first; the health probe never delays the first refresh
        self.scheduler.start()
        try:
            banner = await self.client.health()
            logger.info("Engine at %s: %s", self.config.ENGINE_BASE_URL, banner.strip())
        except AppError as e:
            # Not fatal: the poll loop keeps retrying and shows the last good view
            logger.warning("Engine health check failed: %s", e.message)

    async def stop(self) -> None:
        await self.scheduler.stop()
        await self.client.aclose()

    async def engine_status(self) -> str:
        try:
            await self.client.health()
        except AppError:
            return "unreachable"
        return "ok"


@asynccontextmanager
async def running_context(context: MonitorContext) -> AsyncGenerator[MonitorContext, None]:
    await context.start()
    try:
        yield context
    finally:
        await context.stop()
