"""SyncStore: latest known book, recent trades and best prices.

``apply`` is the single writer. It builds a complete MarketSnapshot and
swaps it in with one assignment, so any reader holding ``snapshot`` sees
either the old triple or the new one, never a mix.

Trade window: last N trades by arrival order, reversed so index 0 is the
most recent. Duplicates across polls are not filtered; ``dedupe_trades``
only collapses repeated tradeIds inside a single response.
"""
import logging
from collections.abc import Sequence

from src.om_client.application.schemas import BestPrices, OrderBook, Trade
from src.om_common.datetime_utils import utc_now
from src.om_sync.domain.models import MarketSnapshot

logger = logging.getLogger(__name__)

DEFAULT_TRADE_WINDOW = 10


def recent_trades(
    trades: Sequence[Trade], window: int, dedupe: bool = False
) -> tuple[Trade, ...]:
    """Last ``window`` trades, newest first."""
    newest_first = list(reversed(trades))
    if dedupe:
        seen: set[str] = set()
        unique: list[Trade] = []
        for t in newest_first:
            if t.trade_id not in seen:
                seen.add(t.trade_id)
                unique.append(t)
        newest_first = unique
    return tuple(newest_first[:window])


class SyncStore:
    def __init__(
        self, trade_window: int = DEFAULT_TRADE_WINDOW, dedupe_trades: bool = False
    ) -> None:
        if trade_window < 1:
            raise ValueError(f"trade_window must be >= 1, got {trade_window}")
        self._trade_window = trade_window
        self._dedupe_trades = dedupe_trades
        self._snapshot = MarketSnapshot()

    @property
    def snapshot(self) -> MarketSnapshot:
        return self._snapshot

    @property
    def last_applied_seq(self) -> int:
        return self._snapshot.seq

    def apply(
        self,
        book: OrderBook,
        trades: Sequence[Trade],
        prices: BestPrices,
        seq: int | None = None,
    ) -> bool:
        """Replace book, trade window and best prices wholesale.

        With ``seq``, results not newer than the last applied cycle are
        dropped and ``False`` is returned. Without it the triple always wins
        and keeps the current sequence number.
        """
        current = self._snapshot
        if seq is not None and seq <= current.seq:
            logger.debug("Dropping stale poll result seq=%d (last applied %d)", seq, current.seq)
            return False

        self._snapshot = MarketSnapshot(
            book=book,
            trades=recent_trades(trades, self._trade_window, self._dedupe_trades),
            prices=prices,
            seq=current.seq if seq is None else seq,
            updated_at=utc_now(),
        )
        return True
