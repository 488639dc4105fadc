"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Engine transport / protocol (read and write path)
  2xxx: Order entry (write path only)
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Engine transport / protocol ---

class NetworkError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1001, f"Matching engine unreachable: {detail}", 502)


class ProtocolError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1002, f"Unexpected engine response: {detail}", 502)


# --- 2xxx: Order entry ---

class ValidationError(AppError):
    """Local form input could not be parsed into an order."""

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        super().__init__(2001, f"Invalid {field}: {detail}", 422)


class SubmissionRejected(AppError):
    """The engine answered an order request with a non-2xx status."""

    def __init__(self, status_code: int, body: object = None) -> None:
        self.status_code = status_code
        self.body = body
        detail = f"Order rejected by engine (HTTP {status_code})"
        if body:
            detail = f"{detail}: {body}"
        super().__init__(2002, detail, 422)


class SubmissionInProgressError(AppError):
    def __init__(self) -> None:
        super().__init__(2003, "A previous order is still being submitted", 409)

