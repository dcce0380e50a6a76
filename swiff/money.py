"""
Money Helpers

All monetary values in Swiff are decimals with exactly two fractional
digits. Rounding is ROUND_HALF_UP (half away from zero) everywhere.

DESIGN DECISION: Engines that need exact distribution (equal split, cent
remainders) work in integer cents and convert back at the boundary.
Everything else works on quantized Decimals, never floats.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional


CENT = Decimal("0.01")
ZERO = Decimal("0.00")

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
}


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a raw amount (number or string) into a Decimal.

    Returns None for missing, blank, non-numeric, NaN or infinite input.
    The value is NOT rounded; use to_money for that.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None

    if not amount.is_finite():
        return None

    return amount


def to_money(value: Any) -> Decimal:
    """
    Round a numeric value to the cent.

    Raises TypeError for values that are not numbers; callers holding raw
    user input should go through parse_amount first.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        amount = parse_amount(value)
        if amount is None:
            raise TypeError(f"Not a numeric amount: {value!r}")
    else:
        raise TypeError(f"Not a numeric amount: {value!r}")

    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> int:
    """Convert an amount to integer cents (rounded half-up)."""
    return int(to_money(value) * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a 2-decimal amount."""
    return (Decimal(cents) / 100).quantize(CENT)


def format_money(amount: Any, currency: str = "USD") -> str:
    """
    Format an amount for display, e.g. ``$1,234.50`` or ``-€3.00``.

    Unknown currency codes are used as the prefix (``CHF 10.00``).
    """
    value = parse_amount(amount)
    if value is None:
        value = ZERO
    value = to_money(value)

    code = (currency or "USD").upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = "-" if value < 0 else ""

    return f"{sign}{symbol}{abs(value):,.2f}"
