"""HTTP client for the remote matching engine.

Thin typed wrapper over ``httpx.AsyncClient``. Owns request/response shape
validation and maps every failure onto the AppError taxonomy:

  transport failure (connect, read, timeout)  -> NetworkError
  body is not JSON / does not match the shape -> ProtocolError
  non-2xx on a read endpoint                  -> ProtocolError
  non-2xx on an order endpoint                -> SubmissionRejected

No retries here. The poll timer is the retry mechanism for reads; writes
are fire-and-confirm.
"""

import asyncio
import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from src.om_client.application.schemas import (
    BestPrices,
    CancelOrderResponse,
    OrderBook,
    OrderRequest,
    SubmitOrderResponse,
    Trade,
    TradeList,
)
from src.om_common.errors import NetworkError, ProtocolError, SubmissionRejected

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

BOOK_PATH = "/api/book"
TRADES_PATH = "/api/trades"
PRICES_PATH = "/api/prices"
ORDER_PATH = "/api/order"
HEALTH_PATH = "/api/health"

DEFAULT_HEALTH_TIMEOUT_SECONDS = 5.0


class MatchingEngineClient:
    """Async client for the engine's four core calls plus cancel and health.

    Example:
        >>> client = MatchingEngineClient("http://localhost:8080")
        >>> book = await client.fetch_book()
        >>> book.bids[0].price
        100.5
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float | None = None,
        http: httpx.AsyncClient | None = None,
        health_timeout_seconds: float = DEFAULT_HEALTH_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the engine client.

        Args:
            base_url: Engine root, e.g. ``http://localhost:8080``
            timeout_seconds: Per-request timeout; ``None`` disables timeouts
            http: Pre-built client (tests pass one with a MockTransport).
                When given, the caller owns its lifecycle.
            health_timeout_seconds: Upper bound for ``health()``, applied even
                when ``timeout_seconds`` is None
        """
        self._owns_http = http is None
        self._health_timeout = health_timeout_seconds
        self._http = http or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def fetch_book(self) -> OrderBook:
        resp = await self._send("GET", BOOK_PATH)
        return _parse(OrderBook, self._read_json(resp), BOOK_PATH)

    async def fetch_trades(self) -> list[Trade]:
        resp = await self._send("GET", TRADES_PATH)
        return _parse_list(TradeList, self._read_json(resp), TRADES_PATH)

    async def fetch_best_prices(self) -> BestPrices:
        resp = await self._send("GET", PRICES_PATH)
        return _parse(BestPrices, self._read_json(resp), PRICES_PATH)

    async def health(self) -> str:
        try:
            resp = await asyncio.wait_for(
                self._send("GET", HEALTH_PATH, timeout=self._health_timeout),
                self._health_timeout,
            )
        except TimeoutError as e:
            raise NetworkError(
                f"GET {HEALTH_PATH}: no answer within {self._health_timeout:g}s"
            ) from e
        if not resp.is_success:
            raise ProtocolError(f"{HEALTH_PATH} returned HTTP {resp.status_code}")
        return resp.text

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def submit_order(self, order: OrderRequest) -> SubmitOrderResponse:
        resp = await self._send("POST", ORDER_PATH, json=order.to_wire())
        if not resp.is_success:
            raise SubmissionRejected(resp.status_code, _body_or_none(resp))
        return _parse(SubmitOrderResponse, _json(resp, ORDER_PATH), ORDER_PATH)

    async def cancel_order(self, order_id: str) -> CancelOrderResponse:
        path = f"{ORDER_PATH}/{quote(order_id, safe='')}"
        resp = await self._send("DELETE", path)
        if not resp.is_success:
            raise SubmissionRejected(resp.status_code, _body_or_none(resp))
        return _parse(CancelOrderResponse, _json(resp, path), path)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._http.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.debug("%s %s failed: %r", method, path, e)
            raise NetworkError(f"{method} {path}: {e.__class__.__name__}") from e

    def _read_json(self, resp: httpx.Response) -> Any:
        path = resp.request.url.path
        if not resp.is_success:
            raise ProtocolError(f"{path} returned HTTP {resp.status_code}")
        return _json(resp, path)


def _json(resp: httpx.Response, path: str) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise ProtocolError(f"{path} body is not JSON") from e


def _parse(model: type[ModelT], data: Any, path: str) -> ModelT:
    try:
        return model.model_validate(data)
    except SchemaError as e:
        raise ProtocolError(
            f"{path} body does not match {model.__name__}: {e.error_count()} error(s)"
        ) from e


def _parse_list(adapter: TypeAdapter[list[Trade]], data: Any, path: str) -> list[Trade]:
    try:
        return adapter.validate_python(data)
    except SchemaError as e:
        raise ProtocolError(
            f"{path} body is not a list of Trade: {e.error_count()} error(s)"
        ) from e


def _body_or_none(resp: httpx.Response) -> Any:
    """Rejection body for SubmissionRejected: parsed JSON, raw text, or None."""
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
