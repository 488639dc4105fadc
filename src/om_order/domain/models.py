"""Order form domain models: pure dataclasses, no I/O."""
from dataclasses import dataclass

from src.om_common.enums import Side, SubmissionState


@dataclass
class OrderDraft:
    """Free-text form fields exactly as the user typed them."""

    side: Side = Side.BUY
    price: str = ""
    quantity: str = ""

    def clear_amounts(self) -> None:
        self.price = ""
        self.quantity = ""


@dataclass(frozen=True)
class SubmissionOutcome:
    state: SubmissionState  # CONFIRMED or FAILED
    message: str
    order_id: str | None = None
    trades_executed: int | None = None
    error_code: int | None = None

    @property
    def confirmed(self) -> bool:
        return self.state == SubmissionState.CONFIRMED
