"""
Deterministic decimal rounding.

Money is presented to cents and ratios to four places, both half-up, so the
same inputs always produce the same figures regardless of summation order.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

MONEY_PLACES = Decimal("0.01")
RATIO_PLACES = Decimal("0.0001")


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, and strings to Decimal via their string form.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_money(value) -> Decimal:
    """Round a monetary amount to 2 decimal places."""
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def round_ratio(value) -> Decimal:
    """Round a ratio to 4 decimal places."""
    return to_decimal(value).quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)


def percent_of(part, whole) -> float:
    """``part / whole * 100`` as a plain float, 0.0 when ``whole`` is not positive."""
    whole = to_decimal(whole)
    if whole <= 0:
        return 0.0
    return float(to_decimal(part) / whole * 100)
