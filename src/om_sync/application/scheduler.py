"""PollScheduler: fixed-rate refresh of the SyncStore from the engine.

One refresh cycle = fetch_book + fetch_trades + fetch_best_prices issued
concurrently, then a single ``store.apply``. Every cycle takes a number from
one monotonic counter; the store drops any result older than what it already
shows, so a slow cycle can never overwrite a newer one.

Each timer tick spawns its cycle as a separate task, so a hung request never
delays the next tick. Once a cycle is applied, timer cycles with a lower
number are cancelled, and a tick is skipped while ``max_in_flight`` cycles
are still pending, so a stalled engine cannot pile up connections.
``stop()`` cancels the timer and all in-flight cycles, and any cycle that
still completes afterwards is discarded.

Read failures are logged and swallowed here: the last good snapshot stays
visible and the next tick is the retry.
"""
import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable

from src.om_client.domain.protocol import EngineClientProtocol
from src.om_common.errors import AppError
from src.om_sync.domain.store import SyncStore

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_INTERVAL_MS = 1000
DEFAULT_MAX_IN_FLIGHT = 8


class PollScheduler:
    def __init__(
        self,
        client: EngineClientProtocol,
        store: SyncStore,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        sleep: SleepFn = asyncio.sleep,
        max_in_flight: int = DEFAULT_MAX_IN_FLIGHT,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        if max_in_flight < 1:
            raise ValueError(f"max_in_flight must be >= 1, got {max_in_flight}")
        self._client = client
        self._store = store
        self._interval_ms = interval_ms
        self._sleep = sleep
        self._max_in_flight = max_in_flight
        self._seq = itertools.count(1)
        self._timer: asyncio.Task[None] | None = None
        # timer-owned cycle task -> its sequence number
        self._cycles: dict[asyncio.Task[bool], int] = {}
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> int:
        return len(self._cycles)

    def start(self) -> None:
        """Refresh immediately, then every interval until ``stop()``. Idempotent."""
        if self.is_running:
            return
        self._stopped = False
        self._timer = asyncio.create_task(self._run(), name="poll-timer")
        logger.info("Polling engine every %dms", self._interval_ms)

    async def stop(self) -> None:
        self._stopped = True
        tasks = [t for t in (self._timer, *self._cycles) if t is not None]
        self._timer = None
        for task in tasks:
            task.cancel()
        # Wait for cancellation to land so teardown is deterministic
        await asyncio.gather(*tasks, return_exceptions=True)
        self._cycles.clear()
        logger.info("Polling stopped (%d task(s) cancelled)", len(tasks))

    async def refresh(self) -> bool:
        """Run one cycle. Returns True if the store was updated."""
        if self._stopped:
            return False
        return await self._cycle(next(self._seq))

    async def _cycle(self, seq: int) -> bool:
        results = await asyncio.gather(
            self._client.fetch_book(),
            self._client.fetch_trades(),
            self._client.fetch_best_prices(),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for exc in failures:
                logger.warning("Poll cycle %d failed: %s", seq, _describe(exc))
            return False

        if self._stopped:
            logger.debug("Discarding poll cycle %d: scheduler stopped", seq)
            return False

        book, trades, prices = results
        applied = self._store.apply(book, trades, prices, seq=seq)  # type: ignore[arg-type]
        if applied:
            self._cancel_superseded(seq)
        return applied

    async def _run(self) -> None:
        while True:
            if len(self._cycles) >= self._max_in_flight:
                logger.warning(
                    "Skipping poll tick: %d cycle(s) still waiting on the engine", len(self._cycles)
                )
            else:
                self._spawn_cycle()
            await self._sleep(self._interval_ms / 1000)

    def _spawn_cycle(self) -> None:
        if self._stopped:
            return
        seq = next(self._seq)
        task = asyncio.create_task(self._cycle(seq), name=f"poll-cycle-{seq}")
        self._cycles[task] = seq
        task.add_done_callback(lambda t: self._cycles.pop(t, None))

    def _cancel_superseded(self, applied_seq: int) -> None:
        # Their results would be dropped as stale anyway
        for task, seq in list(self._cycles.items()):
            if seq < applied_seq and not task.done():
                logger.debug("Cancelling poll cycle %d: superseded by %d", seq, applied_seq)
                task.cancel()


def _describe(exc: BaseException) -> str:
    if isinstance(exc, AppError):
        return exc.message
    return repr(exc)
