from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext

MIN_PRECISION = 28


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def fixed(value, places: int = 6) -> str:
    """Fixed-point rendering, e.g. fixed(0.1, 6) -> '0.100000'."""
    value = to_decimal(value)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the requested places
        ctx.prec = max(MIN_PRECISION, value.adjusted() + places + 2)
        q = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return f"{q:f}"


def format_amount(value, max_places: int = 8) -> str:
    """Plain decimal without exponent or trailing zeros, e.g. '0.1', '100'."""
    text = fixed(value, max_places)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def is_round_number(value) -> bool:
    """Whole number ending in 0 (100, 250, 1e29); never traps on large values."""
    value = to_decimal(value)
    return value == value.to_integral_value() and int(value) % 10 == 0
