from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# "Balanced" means the difference is under one cent
TOLERANCE = Decimal("0.01")


def money(value):
    """
    Normalize a numeric value to a 2-decimal Decimal.

    - Accepts None, int, float, str, Decimal
    - Floats go through str() so 0.1 stays 0.10 and not 0.1000000000000000055
    - Anything unparseable becomes 0.00
    """

    if value is None:
        return ZERO

    try:
        amount = Decimal(str(value)).quantize(
            CENT,
            rounding=ROUND_HALF_UP
        )
    except InvalidOperation:
        return ZERO

    return amount


def money_sum(values):
    total = ZERO
    for v in values:
        total += money(v)
    return total


def within_tolerance(difference, tolerance=TOLERANCE):
    return abs(Decimal(str(difference))) < tolerance


def as_float(value):
    """JSON-friendly float for the presentation layer."""
    return float(money(value))
