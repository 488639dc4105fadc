"""OrderSubmissionController: draft form state -> OrderRequest -> engine.

State machine:
    EDITING -> SUBMITTING -> (CONFIRMED | FAILED) -> EDITING

Input is parsed before any network call; unparseable input ends in FAILED
with a ValidationError message and never reaches the client. On success the
price/quantity fields are cleared and the store is refreshed straight away
instead of waiting for the next poll tick. On failure the fields are kept so
the user can retry without retyping.

Submissions are serialized per controller: calling submit() while one is in
flight raises SubmissionInProgressError.
"""
import logging
import math
from collections.abc import Awaitable, Callable

from pydantic import ValidationError as SchemaError

from src.om_client.application.schemas import CancelOrderResponse, OrderRequest
from src.om_client.domain.protocol import EngineClientProtocol
from src.om_common.datetime_utils import epoch_ms
from src.om_common.enums import Side, SubmissionState
from src.om_common.errors import AppError, SubmissionInProgressError, ValidationError
from src.om_common.id_generator import generate_order_id
from src.om_order.domain.models import OrderDraft, SubmissionOutcome

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "Error submitting order"

RefreshFn = Callable[[], Awaitable[bool]]


class OrderSubmissionController:
    def __init__(
        self,
        client: EngineClientProtocol,
        refresh: RefreshFn,
        id_factory: Callable[[], str] = generate_order_id,
        clock_ms: Callable[[], int] = epoch_ms,
    ) -> None:
        self._client = client
        self._refresh = refresh
        self._new_order_id = id_factory
        self._clock_ms = clock_ms
        self.draft = OrderDraft()
        self.state = SubmissionState.EDITING
        self.message = ""
        self.last_outcome: SubmissionOutcome | None = None

    @property
    def is_submitting(self) -> bool:
        return self.state == SubmissionState.SUBMITTING

    # ------------------------------------------------------------------
    # Editing (never blocked, never validated)
    # ------------------------------------------------------------------

    def edit(
        self,
        side: Side | str | None = None,
        price: str | None = None,
        quantity: str | None = None,
    ) -> OrderDraft:
        if side is not None:
            try:
                self.draft.side = Side(side)
            except ValueError as e:
                raise ValidationError("side", f"{side!r} is not BUY or SELL") from e
        if price is not None:
            self.draft.price = price
        if quantity is not None:
            self.draft.quantity = quantity
        return self.draft

    def build_order(self) -> OrderRequest:
        """Parse the draft into a fresh OrderRequest. Raises ValidationError."""
        price = parse_price(self.draft.price)
        quantity = parse_quantity(self.draft.quantity)
        try:
            return OrderRequest(
                order_id=self._new_order_id(),
                side=self.draft.side,
                price=price,
                quantity=quantity,
                timestamp=self._clock_ms(),
            )
        except SchemaError as e:
            raise ValidationError("order", str(e.errors()[0]["msg"])) from e

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self) -> SubmissionOutcome:
        if self.is_submitting:
            raise SubmissionInProgressError()

        try:
            order = self.build_order()
        except ValidationError as e:
            logger.info("Order not sent: %s", e.message)
            return self._finish(
                SubmissionOutcome(SubmissionState.FAILED, e.message, error_code=e.code)
            )

        self.state = SubmissionState.SUBMITTING
        logger.info(
            "Submitting %s %d @ %s (orderId=%s)",
            order.side.value, order.quantity, order.price, order.order_id,
        )
        try:
            result = await self._client.submit_order(order)
        except AppError as e:
            logger.warning("Order %s failed: %s", order.order_id, e.message)
            return self._finish(
                SubmissionOutcome(
                    SubmissionState.FAILED,
                    SUBMIT_FAILED_MESSAGE,
                    order_id=order.order_id,
                    error_code=e.code,
                )
            )
        finally:
            if self.is_submitting:
                self.state = SubmissionState.EDITING

        self.draft.clear_amounts()
        outcome = self._finish(
            SubmissionOutcome(
                SubmissionState.CONFIRMED,
                f"Order submitted! {result.trades_executed} trades executed.",
                order_id=order.order_id,
                trades_executed=result.trades_executed,
            )
        )
        await self._refresh()
        return outcome

    async def cancel(self, order_id: str) -> CancelOrderResponse:
        order_id = order_id.strip()
        if not order_id:
            raise ValidationError("orderId", "must not be empty")
        try:
            result = await self._client.cancel_order(order_id)
        except AppError as e:
            logger.warning("Cancel %s failed: %s", order_id, e.message)
            self.message = f"Error cancelling order {order_id}"
            raise

        if result.cancelled:
            self.message = f"Order {order_id} cancelled"
        else:
            self.message = result.message or f"Order {order_id} not found"
        await self._refresh()
        return result

    def _finish(self, outcome: SubmissionOutcome) -> SubmissionOutcome:
        # Terminal state is recorded on the outcome; the form itself is editable again
        self.last_outcome = outcome
        self.message = outcome.message
        self.state = SubmissionState.EDITING
        return outcome


def parse_price(text: str) -> float:
    raw = text.strip()
    if not raw:
        raise ValidationError("price", "is required")
    try:
        price = float(raw)
    except ValueError as e:
        raise ValidationError("price", f"{raw!r} is not a number") from e
    if not math.isfinite(price):
        raise ValidationError("price", "must be a finite number")
    if price <= 0:
        raise ValidationError("price", "must be positive")
    return price


def parse_quantity(text: str) -> int:
    raw = text.strip()
    if not raw:
        raise ValidationError("quantity", "is required")
    try:
        quantity = int(raw)
    except ValueError as e:
        raise ValidationError("quantity", f"{raw!r} is not a whole number") from e
    if quantity <= 0:
        raise ValidationError("quantity", "must be positive")
    return quantity
