from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def to_cents(value: Decimal | float | int | str) -> int:
    """Convert a currency amount to minor units: '33.335' -> 3334.

    Raises ValueError on values that are not numbers.
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(cents: int, currency: str = "") -> str:
    """Format minor units for display: 333400 -> '3,334.00 USDC'"""
    sign = "-" if cents < 0 else ""
    units, minor = divmod(abs(cents), 100)
    formatted = f"{sign}{units:,}.{minor:02d}"
    return f"{formatted} {currency}".strip()


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))
