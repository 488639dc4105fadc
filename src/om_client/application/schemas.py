"""Pydantic wire schemas for the matching engine's HTTP/JSON API.

The engine speaks camelCase; Python code uses snake_case. Every model
accepts either on input and dumps camelCase via ``to_wire()``.

Ordering contract (enforced by the engine, never re-sorted here):
  OrderBook.bids descending by price, best first
  OrderBook.asks ascending by price, best first
"""

import math

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from src.om_common.enums import Side


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


class OrderBookLevel(WireModel):
    """All resting orders at one price, collapsed to (price, total quantity, order count)."""

    price: float
    quantity: int
    orders: int


class OrderBook(WireModel):
    bids: list[OrderBookLevel] = Field(default_factory=list)
    asks: list[OrderBookLevel] = Field(default_factory=list)


class Trade(WireModel):
    trade_id: str
    buy_order_id: str
    sell_order_id: str
    price: float
    quantity: int
    timestamp: int


class BestPrices(WireModel):
    best_bid: float | None = None
    best_ask: float | None = None


TradeList = TypeAdapter(list[Trade])


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


class OrderRequest(WireModel):
    order_id: str
    side: Side
    price: float = Field(gt=0)
    quantity: int = Field(gt=0)
    timestamp: int

    @field_validator("price")
    @classmethod
    def finite_price(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v

    @field_validator("order_id")
    @classmethod
    def no_whitespace(cls, v: str) -> str:
        if not v or v != v.strip() or " " in v:
            raise ValueError("orderId must not contain whitespace")
        return v


class SubmitOrderResponse(WireModel):
    trades_executed: int
    trades: list[Trade] = Field(default_factory=list)


class CancelOrderResponse(WireModel):
    order_id: str
    cancelled: bool
    message: str = ""
