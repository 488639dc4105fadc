"""Global enums. Values must match the engine's wire contract exactly."""

from enum import Enum


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class SubmissionState(str, Enum):
    """Order form lifecycle: EDITING -> SUBMITTING -> (CONFIRMED | FAILED) -> EDITING"""
    EDITING = "EDITING"
    SUBMITTING = "SUBMITTING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
