"""
Display formatting for computed amounts.

These helpers are the only place amounts are rounded to display precision
(2 digits for USD and other currencies, whole units for VND). They run after
all arithmetic and never feed back into it.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from tax_engine.domain.fixed_decimal import DISPLAY_PLACES, Numeric, to_decimal

VND_SYMBOL = "₫"

# (threshold, divisor, suffix, digits) from largest to smallest
_COMPACT_VND = [
    (Decimal(10) ** 9, Decimal(10) ** 9, " tỷ ₫", 1),
    (Decimal(10) ** 6, Decimal(10) ** 6, " tr ₫", 1),
    (Decimal(10) ** 3, Decimal(10) ** 3, "K ₫", 0),
]
_COMPACT_USD = [
    (Decimal(10) ** 9, Decimal(10) ** 9, "B", 1),
    (Decimal(10) ** 6, Decimal(10) ** 6, "M", 1),
    (Decimal(10) ** 3, Decimal(10) ** 3, "K", 0),
]


def _round(value: Decimal, places: int) -> Optional[Decimal]:
    """None when the rounded value has more digits than the default context holds."""
    try:
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def _sign(value: Decimal) -> str:
    return "-" if value < 0 else ""


def format_usd(amount: Numeric) -> str:
    """``1234.567`` -> ``"$1,234.57"``; ``"$0.00"`` for unparseable input."""
    value = to_decimal(amount)
    value = _round(value, DISPLAY_PLACES) if value is not None else None
    if value is None:
        return "$0.00"
    return f"{_sign(value)}${abs(value):,.2f}"


def format_vnd(amount: Numeric) -> str:
    """``1234567.5`` -> ``"1.234.568 ₫"``; VND has no fractional digits."""
    value = to_decimal(amount)
    value = _round(value, 0) if value is not None else None
    if value is None:
        return f"0 {VND_SYMBOL}"
    grouped = f"{abs(value):,.0f}".replace(",", ".")
    return f"{_sign(value)}{grouped} {VND_SYMBOL}"


def format_amount(amount: Numeric, currency: str) -> str:
    """Generic ``"1,234.57 EUR"`` format for currencies without a dedicated formatter."""
    value = to_decimal(amount)
    if value is None:
        return "0"
    currency = getattr(currency, "value", currency)
    if currency == "USD":
        return format_usd(value)
    if currency == "VND":
        return format_vnd(value)
    value = _round(value, DISPLAY_PLACES)
    if value is None:
        return "0"
    return f"{value:,.2f} {currency}"


def _compact(value: Decimal, steps) -> Optional[str]:
    magnitude = abs(value)
    for threshold, divisor, suffix, digits in steps:
        if magnitude >= threshold:
            scaled = _round(magnitude / divisor, digits)
            if scaled is None:
                return None
            return f"{_sign(value)}{scaled:.{digits}f}{suffix}"
    return ""


def format_compact_vnd(amount: Numeric) -> str:
    """Abbreviated VND for cards: ``"1.2 tỷ ₫"``, ``"25.0 tr ₫"``, ``"12K ₫"``."""
    value = to_decimal(amount)
    compact = _compact(value, _COMPACT_VND) if value is not None else None
    if compact is None:
        return f"0 {VND_SYMBOL}"
    return compact or format_vnd(value)


def format_compact_usd(amount: Numeric) -> str:
    value = to_decimal(amount)
    compact = _compact(value, _COMPACT_USD) if value is not None else None
    if compact is None:
        return "$0"
    return compact or format_usd(value)
