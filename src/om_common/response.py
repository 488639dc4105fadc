"""Envelope for every /api/v1 response.

    {"code": 0, "message": "...", "data": {...}, "timestamp": "...", "request_id": "req_..."}

``code`` is 0 on success, otherwise an AppError code. ``request_id`` is the
id the request log middleware bound for the current request, so the body,
the X-Request-ID header and the log line all carry the same value.
"""

import uuid
from contextvars import ContextVar
from typing import Any

from pydantic import BaseModel, Field

from src.om_common.datetime_utils import utc_now
from src.om_common.errors import AppError, ValidationError

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def current_request_id() -> str:
    """Id bound by the middleware, or a fresh one outside a request."""
    return request_id_var.get() or new_request_id()


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=current_request_id)


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(data=data, message=message)


def error_response(exc: AppError) -> ApiResponse:
    # Invalid input names the offending form field so the client can mark it
    data = {"field": exc.field} if isinstance(exc, ValidationError) else None
    return ApiResponse(code=exc.code, message=exc.message, data=data)
