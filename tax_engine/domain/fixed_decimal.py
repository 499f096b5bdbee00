"""
Fixed-precision decimal helpers for money arithmetic.

Amounts travel through the engine as decimal strings (or ``Decimal``) and
every operation is carried out in ``decimal`` with an explicit result scale,
so repeated multiplication and division never pick up binary floating point
noise. Intermediate values are fixed to 4 fractional digits; rounding to 2
digits for display happens only in ``formatting``.

Unparseable operands never raise: they produce the ``"0"`` sentinel so a
bad form value cannot break a preview. The same goes for results too large
to hold at the working precision.
"""
from decimal import Decimal, Context, DecimalException, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP
from typing import Optional, Union

Numeric = Union[str, int, float, Decimal]

INTERMEDIATE_PLACES = 4
DISPLAY_PLACES = 2
RATE_PLACES = 10  # inverted FX quotes need more than 4 digits (1/25000 = 0.00004)

ZERO = "0"

# Wide enough that products of realistic operands are exact before rescaling
_CONTEXT = Context(prec=60, rounding=ROUND_HALF_UP)


def to_decimal(value: Optional[Numeric]) -> Optional[Decimal]:
    """
    Parses ``value`` into a finite Decimal.

    Returns None for None, empty strings, booleans, non-numeric text,
    NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        # Convert float to string first to preserve representation
        result = _parse(str(value))
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        result = _parse(value.strip())
    else:
        return None
    if result is None or not result.is_finite():
        return None
    return result


def _parse(text: str) -> Optional[Decimal]:
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def fix(value: Numeric, places: int = INTERMEDIATE_PLACES, rounding: str = ROUND_HALF_UP) -> str:
    """Formats ``value`` with exactly ``places`` fractional digits."""
    number = to_decimal(value)
    if number is None:
        return ZERO
    quantum = Decimal(1).scaleb(-places)
    try:
        fixed = number.quantize(quantum, rounding=rounding, context=_CONTEXT)
    except InvalidOperation:
        # more digits than the working precision holds
        return ZERO
    if fixed.is_zero():
        # no "-0.0000"
        fixed = abs(fixed)
    return format(fixed, "f")


def multiply(a: Numeric, b: Numeric) -> str:
    """
    Multiplies two decimal operands and fixes the result to 4 fractional digits.

    Each operand is effectively an integer scaled by its own number of
    fractional digits; the exact product is rescaled by the sum of both
    scales and only then rounded (half up).

    >>> multiply("1000.0000", "0.10")
    '100.0000'
    >>> multiply("abc", "2")
    '0'
    """
    left, right = to_decimal(a), to_decimal(b)
    if left is None or right is None:
        return ZERO
    try:
        return fix(_CONTEXT.multiply(left, right))
    except DecimalException:
        return ZERO


def divide(a: Numeric, b: Numeric) -> str:
    """
    Divides ``a`` by ``b`` and fixes the quotient to 4 fractional digits.

    Returns ``"0"`` when ``b`` is zero or either operand is unparseable.
    The quotient is truncated toward zero at the 4th digit, so
    ``divide("100.0000", "1.10")`` is ``"90.9090"``.
    """
    left, right = to_decimal(a), to_decimal(b)
    if left is None or right is None or right.is_zero():
        return ZERO
    try:
        return fix(_CONTEXT.divide(left, right), rounding=ROUND_DOWN)
    except DecimalException:
        return ZERO


def add(*values: Numeric) -> str:
    """Sums the operands at 4-digit precision; unparseable operands count as zero."""
    total = Decimal(0)
    for value in values:
        number = to_decimal(value)
        if number is not None:
            try:
                total = _CONTEXT.add(total, number)
            except DecimalException:
                return ZERO
    return fix(total)


def subtract(a: Numeric, b: Numeric) -> str:
    left, right = to_decimal(a) or Decimal(0), to_decimal(b) or Decimal(0)
    try:
        return fix(_CONTEXT.subtract(left, right))
    except DecimalException:
        return ZERO


def is_positive(value: Optional[Numeric]) -> bool:
    number = to_decimal(value)
    return number is not None and number > 0


def rate_from_quote(quote: Numeric, places: int = RATE_PLACES) -> str:
    """
    Inverts a "units per USD" quote into a "USD per unit" rate.

    ``rate_from_quote("25000")`` is ``"0.0000400000"``. Returns ``"0"`` when
    the quote is not a positive number.
    """
    number = to_decimal(quote)
    if number is None or number <= 0:
        return ZERO
    try:
        return fix(_CONTEXT.divide(Decimal(1), number), places=places)
    except DecimalException:
        return ZERO
