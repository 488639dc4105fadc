"""Shared test fixtures."""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.context import MonitorContext
from src.main import app
from tests.fakes import ENGINE_URL, FakeClock, FakeEngine, StubClient


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def stub() -> StubClient:
    return StubClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENGINE_BASE_URL=ENGINE_URL,
        ENGINE_HEALTH_TIMEOUT_SECONDS=0.05,
        POLL_INTERVAL_MS=1000,
        TRADE_WINDOW=10,
    )


@pytest.fixture
async def context(engine: FakeEngine, clock: FakeClock, test_settings: Settings) -> MonitorContext:
    """Monitor context wired to the in-memory engine. Not started: tests drive refresh."""
    http: httpx.AsyncClient = engine.http()
    ctx = MonitorContext(test_settings, http=http, sleep=clock.sleep)
    yield ctx
    await ctx.stop()
    await http.aclose()


@pytest.fixture
async def client(context: MonitorContext) -> AsyncClient:
    """Async HTTP client for testing the monitor endpoints."""
    app.state.context = context
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
