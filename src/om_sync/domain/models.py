"""Synchronization domain model: one immutable view of the engine's state."""
from dataclasses import dataclass, field
from datetime import datetime

from src.om_client.application.schemas import BestPrices, OrderBook, Trade


@dataclass(frozen=True)
class MarketSnapshot:
    book: OrderBook = field(default_factory=OrderBook)
    trades: tuple[Trade, ...] = ()  # most recent first
    prices: BestPrices = field(default_factory=BestPrices)
    # Sequence number of the poll cycle that produced this snapshot (0 = never polled)
    seq: int = 0
    updated_at: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return self.updated_at is None
