"""Per-request id binding and access logging.

Reuses a caller-supplied X-Request-ID when it looks sane, otherwise mints
one, and binds it for the envelope before the endpoint runs. Monitor GETs
are polled by the page and log at DEBUG; everything that changes state
(draft edits, submits, cancels) logs at INFO.
"""

import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.om_common.response import REQUEST_ID_HEADER, new_request_id, request_id_var

logger = logging.getLogger("om.request")

_CALLER_ID = re.compile(r"[A-Za-z0-9_.:-]{1,64}")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        supplied = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = supplied if _CALLER_ID.fullmatch(supplied) else new_request_id()
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        logger.log(
            logging.DEBUG if request.method == "GET" else logging.INFO,
            "%s %s %d %.1fms id=%s",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
