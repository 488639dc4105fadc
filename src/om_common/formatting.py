"""Display helpers for prices coming off the engine.

The engine quotes prices as floats (dollars). Missing best prices render as
an em placeholder rather than "$0.00" so an empty side is obvious.
"""

EMPTY_PRICE = "—"


def price_to_display(price: float | None) -> str:
    """Convert a price to display string: 100.5 -> '$100.50', None -> '—'."""
    if price is None:
        return EMPTY_PRICE
    if price < 0:
        return f"-${-price:,.2f}"
    return f"${price:,.2f}"


def fill_to_display(quantity: int, price: float) -> str:
    """'10 @ $100.50' style fill summary for a trade row."""
    return f"{quantity} @ {price_to_display(price)}"
