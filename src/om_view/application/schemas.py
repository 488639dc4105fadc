"""Pydantic view schemas for the monitor page.

Pure projections of (MarketSnapshot, controller form state). No logic here
beyond display formatting; bids/asks/trades keep the order they arrived in.
"""
from typing import Literal

from pydantic import BaseModel

from src.om_client.application.schemas import BestPrices, OrderBookLevel, Trade
from src.om_common.datetime_utils import ms_to_clock
from src.om_common.formatting import fill_to_display, price_to_display
from src.om_order.application.controller import OrderSubmissionController
from src.om_order.domain.models import SubmissionOutcome
from src.om_sync.domain.models import MarketSnapshot

# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------


class LevelOut(BaseModel):
    price: float
    price_display: str
    quantity: int
    orders: int

    @classmethod
    def from_level(cls, lv: OrderBookLevel) -> "LevelOut":
        return cls(
            price=lv.price,
            price_display=price_to_display(lv.price),
            quantity=lv.quantity,
            orders=lv.orders,
        )


class TradeOut(BaseModel):
    trade_id: str
    price: float
    quantity: int
    fill_display: str
    time: str

    @classmethod
    def from_trade(cls, t: Trade) -> "TradeOut":
        return cls(
            trade_id=t.trade_id,
            price=t.price,
            quantity=t.quantity,
            fill_display=fill_to_display(t.quantity, t.price),
            time=ms_to_clock(t.timestamp),
        )


class BestPricesOut(BaseModel):
    best_bid: float | None
    best_ask: float | None
    best_bid_display: str
    best_ask_display: str

    @classmethod
    def from_prices(cls, p: BestPrices) -> "BestPricesOut":
        return cls(
            best_bid=p.best_bid,
            best_ask=p.best_ask,
            best_bid_display=price_to_display(p.best_bid),
            best_ask_display=price_to_display(p.best_ask),
        )


# ---------------------------------------------------------------------------
# Order form
# ---------------------------------------------------------------------------


class FormOut(BaseModel):
    side: str
    price: str
    quantity: str
    state: str
    message: str
    last_trades_executed: int | None

    @classmethod
    def from_controller(cls, c: OrderSubmissionController) -> "FormOut":
        last = c.last_outcome
        return cls(
            side=c.draft.side.value,
            price=c.draft.price,
            quantity=c.draft.quantity,
            state=c.state.value,
            message=c.message,
            last_trades_executed=last.trades_executed if last else None,
        )


class DraftUpdate(BaseModel):
    side: Literal["BUY", "SELL"] | None = None
    price: str | None = None
    quantity: str | None = None


class SubmitResult(BaseModel):
    state: str
    message: str
    order_id: str | None
    trades_executed: int | None

    @classmethod
    def from_outcome(cls, o: SubmissionOutcome) -> "SubmitResult":
        return cls(
            state=o.state.value,
            message=o.message,
            order_id=o.order_id,
            trades_executed=o.trades_executed,
        )


# ---------------------------------------------------------------------------
# Whole page
# ---------------------------------------------------------------------------


class MonitorView(BaseModel):
    best_prices: BestPricesOut
    bids: list[LevelOut]
    asks: list[LevelOut]
    trades: list[TradeOut]
    form: FormOut
    seq: int
    updated_at: str | None

    @classmethod
    def render(
        cls, snapshot: MarketSnapshot, controller: OrderSubmissionController
    ) -> "MonitorView":
        return cls(
            best_prices=BestPricesOut.from_prices(snapshot.prices),
            bids=[LevelOut.from_level(lv) for lv in snapshot.book.bids],
            asks=[LevelOut.from_level(lv) for lv in snapshot.book.asks],
            trades=[TradeOut.from_trade(t) for t in snapshot.trades],
            form=FormOut.from_controller(controller),
            seq=snapshot.seq,
            updated_at=snapshot.updated_at.isoformat() if snapshot.updated_at else None,
        )
