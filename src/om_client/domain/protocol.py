# src/om_client/domain/protocol.py
"""Engine client Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
The infrastructure layer provides the real httpx implementation.
"""

from typing import Protocol

from src.om_client.application.schemas import (
    BestPrices,
    CancelOrderResponse,
    OrderBook,
    OrderRequest,
    SubmitOrderResponse,
    Trade,
)


class EngineClientProtocol(Protocol):
    async def fetch_book(self) -> OrderBook: ...

    async def fetch_trades(self) -> list[Trade]: ...

    async def fetch_best_prices(self) -> BestPrices: ...

    async def submit_order(self, order: OrderRequest) -> SubmitOrderResponse: ...

    async def cancel_order(self, order_id: str) -> CancelOrderResponse: ...
