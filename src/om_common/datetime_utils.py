"""UTC datetime utilities."""

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def epoch_ms() -> int:
    """Milliseconds since the Unix epoch, as the engine expects in order timestamps."""
    return int(time.time() * 1000)


def ms_to_clock(ms: int) -> str:
    """Render an epoch-ms timestamp as a local HH:MM:SS string."""
    return datetime.fromtimestamp(ms / 1000).strftime("%H:%M:%S")
