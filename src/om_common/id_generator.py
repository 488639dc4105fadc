"""Snowflake-style ID generator for client order IDs.

Generates monotonically increasing, unique string IDs, so two submissions
landing in the same millisecond still get distinct orderIds.
"""

import threading
import time
from collections.abc import Callable


class SnowflakeIdGenerator:
    """Simple snowflake ID generator.

    Layout (64 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: machine_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_700_000_000_000  # 2023-11-14 approx
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(
        self,
        machine_id: int = 0,
        prefix: str = "",
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._prefix = prefix
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))
        self._sequence = 0
        self._last_timestamp_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            ts = self._clock_ms()
            if ts <= self._last_timestamp_ms:
                # Same millisecond, or clock stepped backwards: stay on the last tick
                ts = self._last_timestamp_ms
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    ts = self._wait_next_ms(ts)
            else:
                self._sequence = 0

            self._last_timestamp_ms = ts
            id_int = (
                ((ts - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return f"{self._prefix}{id_int}"

    def _wait_next_ms(self, last_ts: int) -> int:
        ts = self._clock_ms()
        while ts <= last_ts:
            ts = self._clock_ms()
        return ts


_order_id_generator = SnowflakeIdGenerator(prefix="order_")


def generate_order_id() -> str:
    """Generate a unique client orderId ("order_<snowflake>") from the module-level generator."""
    return _order_id_generator.next_id()
