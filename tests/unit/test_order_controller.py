"""Unit tests for OrderSubmissionController using a stub engine client."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from src.om_client.application.schemas import CancelOrderResponse, SubmitOrderResponse
from src.om_common.enums import Side, SubmissionState
from src.om_common.errors import (
    NetworkError,
    ProtocolError,
    SubmissionInProgressError,
    SubmissionRejected,
    ValidationError,
)
from src.om_order.application.controller import (
    SUBMIT_FAILED_MESSAGE,
    OrderSubmissionController,
    parse_price,
    parse_quantity,
)
from tests.fakes import StubClient, drain


@pytest.fixture
def refresh() -> AsyncMock:
    return AsyncMock(return_value=True)


@pytest.fixture
def controller(stub: StubClient, refresh: AsyncMock) -> OrderSubmissionController:
    return OrderSubmissionController(
        stub, refresh=refresh, id_factory=lambda: "order_42", clock_ms=lambda: 1_700_000_000_000
    )


class TestDraft:
    def test_defaults(self, controller: OrderSubmissionController) -> None:
        assert controller.draft.side is Side.BUY
        assert controller.draft.price == ""
        assert controller.draft.quantity == ""
        assert controller.state == SubmissionState.EDITING

    def test_edit_is_not_validated(self, controller: OrderSubmissionController) -> None:
        controller.edit(side="SELL", price="abc", quantity="")
        assert controller.draft.side is Side.SELL
        assert controller.draft.price == "abc"

    def test_edit_partial(self, controller: OrderSubmissionController) -> None:
        controller.edit(price="10")
        controller.edit(quantity="3")
        assert (controller.draft.price, controller.draft.quantity) == ("10", "3")

    def test_unknown_side(self, controller: OrderSubmissionController) -> None:
        with pytest.raises(ValidationError):
            controller.edit(side="HOLD")


class TestParsing:
    def test_price(self) -> None:
        assert parse_price(" 100.50 ") == 100.5

    @pytest.mark.parametrize("text", ["", "   ", "abc", "nan", "inf", "-5", "0"])
    def test_bad_price(self, text: str) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_price(text)
        assert exc.value.field == "price"

    def test_quantity(self) -> None:
        assert parse_quantity("10") == 10

    @pytest.mark.parametrize("text", ["", "10.5", "ten", "0", "-1"])
    def test_bad_quantity(self, text: str) -> None:
        with pytest.raises(ValidationError) as exc:
            parse_quantity(text)
        assert exc.value.field == "quantity"


class TestSubmit:
    async def test_round_trip(
        self, stub: StubClient, refresh: AsyncMock, controller: OrderSubmissionController
    ) -> None:
        stub.submit_result = SubmitOrderResponse(trades_executed=2)
        controller.edit(side="BUY", price="100.50", quantity="10")

        outcome = await controller.submit()

        assert outcome.state == SubmissionState.CONFIRMED
        assert outcome.trades_executed == 2
        assert "2" in outcome.message
        assert controller.message == "Order submitted! 2 trades executed."
        assert controller.draft.price == ""
        assert controller.draft.quantity == ""
        assert controller.draft.side is Side.BUY
        refresh.assert_awaited_once()

        sent = stub.submitted[0]
        assert sent.order_id == "order_42"
        assert sent.side is Side.BUY
        assert sent.price == 100.5
        assert sent.quantity == 10
        assert sent.timestamp == 1_700_000_000_000

    async def test_returns_to_editing(
        self, stub: StubClient, controller: OrderSubmissionController
    ) -> None:
        controller.edit(price="1", quantity="1")
        await controller.submit()
        assert controller.state == SubmissionState.EDITING
        assert controller.last_outcome is not None
        assert controller.last_outcome.confirmed

    async def test_empty_price_never_reaches_client(
        self, stub: StubClient, refresh: AsyncMock, controller: OrderSubmissionController
    ) -> None:
        controller.edit(price="", quantity="10")

        outcome = await controller.submit()

        assert outcome.state == SubmissionState.FAILED
        assert outcome.error_code == 2001
        assert stub.submitted == []
        refresh.assert_not_awaited()
        assert controller.draft.quantity == "10"

    @pytest.mark.parametrize(
        "error",
        [
            SubmissionRejected(400, {"error": "Invalid order"}),
            NetworkError("POST /api/order: ConnectError"),
            ProtocolError("/api/order body is not JSON"),
        ],
    )
    async def test_failure_keeps_fields(
        self,
        stub: StubClient,
        refresh: AsyncMock,
        controller: OrderSubmissionController,
        error: Exception,
    ) -> None:
        stub.submit_error = error
        controller.edit(side="SELL", price="99.5", quantity="4")

        outcome = await controller.submit()

        assert outcome.state == SubmissionState.FAILED
        assert outcome.message == SUBMIT_FAILED_MESSAGE
        assert outcome.order_id == "order_42"
        assert (controller.draft.price, controller.draft.quantity) == ("99.5", "4")
        assert controller.state == SubmissionState.EDITING
        refresh.assert_not_awaited()

    async def test_unexpected_error_propagates_and_unlocks(
        self, stub: StubClient, controller: OrderSubmissionController
    ) -> None:
        stub.submit_error = RuntimeError("bug")
        controller.edit(price="1", quantity="1")
        with pytest.raises(RuntimeError):
            await controller.submit()
        assert controller.state == SubmissionState.EDITING

    async def test_second_submit_while_in_flight_is_refused(
        self, stub: StubClient, controller: OrderSubmissionController
    ) -> None:
        gate = asyncio.Event()
        stub.submit_hold = gate
        controller.edit(price="100", quantity="1")

        first = asyncio.create_task(controller.submit())
        await drain()
        assert controller.state == SubmissionState.SUBMITTING

        with pytest.raises(SubmissionInProgressError):
            await controller.submit()

        gate.set()
        outcome = await first
        assert outcome.confirmed
        assert len(stub.submitted) == 1

    async def test_each_submission_gets_fresh_order_id(
        self, stub: StubClient, refresh: AsyncMock
    ) -> None:
        controller = OrderSubmissionController(stub, refresh=refresh)
        for _ in range(2):
            controller.edit(price="100", quantity="1")
            await controller.submit()
        ids = [o.order_id for o in stub.submitted]
        assert len(set(ids)) == 2
        assert all(i.startswith("order_") for i in ids)


class TestCancel:
    async def test_cancel_refreshes(
        self, stub: StubClient, refresh: AsyncMock, controller: OrderSubmissionController
    ) -> None:
        stub.cancel_result = CancelOrderResponse(order_id="order_7", cancelled=True)
        result = await controller.cancel("order_7")
        assert result.cancelled
        assert stub.cancelled == ["order_7"]
        assert controller.message == "Order order_7 cancelled"
        refresh.assert_awaited_once()

    async def test_cancel_not_found(
        self, stub: StubClient, controller: OrderSubmissionController
    ) -> None:
        stub.cancel_result = CancelOrderResponse(
            order_id="x", cancelled=False, message="Order not found"
        )
        await controller.cancel("x")
        assert controller.message == "Order not found"

    async def test_cancel_blank_id(
        self, stub: StubClient, controller: OrderSubmissionController
    ) -> None:
        with pytest.raises(ValidationError):
            await controller.cancel("  ")
        assert stub.cancelled == []

    async def test_cancel_failure_sets_message(
        self, refresh: AsyncMock, controller: OrderSubmissionController
    ) -> None:
        controller._client.cancel_order = AsyncMock(side_effect=NetworkError("down"))  # type: ignore[method-assign]
        with pytest.raises(NetworkError):
            await controller.cancel("order_7")
        assert controller.message == "Error cancelling order order_7"
        refresh.assert_not_awaited()
