"""Fixed-point integer arithmetic for the 18-decimal internal scale.

All supplies, reserves and prices are int scaled by WAD = 10**18. No float, no Decimal.
Every helper stays inside the unsigned 256-bit range and truncates toward zero,
so rounding never hands value out of the protocol.
"""

import math

from src.pm_common.errors import ArithmeticOverflowError

INTERNAL_DECIMALS = 18
WAD = 10**INTERNAL_DECIMALS
MAX_UINT256 = 2**256 - 1


def _check_range(value: int, label: str) -> int:
    if value < 0 or value > MAX_UINT256:
        raise ArithmeticOverflowError(f"{label} out of range: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    return _check_range(_check_range(a, "a") + _check_range(b, "b"), "a + b")


def checked_sub(a: int, b: int) -> int:
    """a - b, failing instead of going negative."""
    return _check_range(_check_range(a, "a") - _check_range(b, "b"), "a - b")


def checked_mul(a: int, b: int) -> int:
    return _check_range(_check_range(a, "a") * _check_range(b, "b"), "a * b")


def mul_div(a: int, b: int, denom: int) -> int:
    """Full-precision floor(a * b / denom).

    The intermediate product may exceed 256 bits (Python ints are unbounded);
    only the operands and the final result must fit.
    """
    _check_range(a, "a")
    _check_range(b, "b")
    if denom <= 0:
        raise ArithmeticOverflowError(f"invalid denominator: {denom}")
    return _check_range(a * b // denom, "mul_div result")


def isqrt(x: int) -> int:
    """Integer square root, truncated toward zero."""
    return math.isqrt(_check_range(x, "isqrt input"))


def _scale_factor(decimals: int) -> int:
    if not (0 <= decimals <= 2 * INTERNAL_DECIMALS):
        raise ArithmeticOverflowError(f"unsupported decimals: {decimals}")
    return 10 ** abs(INTERNAL_DECIMALS - decimals)


def to_internal(amount: int, decimals: int) -> int:
    """Native asset units -> 18-decimal units (rounds down when decimals > 18)."""
    factor = _scale_factor(decimals)
    if decimals <= INTERNAL_DECIMALS:
        return checked_mul(amount, factor)
    return _check_range(amount, "amount") // factor


def to_native(amount: int, decimals: int) -> int:
    """18-decimal units -> native asset units, always rounding down."""
    factor = _scale_factor(decimals)
    if decimals <= INTERNAL_DECIMALS:
        return _check_range(amount, "amount") // factor
    return checked_mul(amount, factor)


def wad_to_display(value: int, places: int = 6) -> str:
    """Render a WAD value as a decimal string: 707106781186547524 -> '0.707106'."""
    sign = "-" if value < 0 else ""
    value = abs(value)
    whole, frac = divmod(value, WAD)
    frac_str = f"{frac:0{INTERNAL_DECIMALS}d}"[:places]
    return f"{sign}{whole:,}.{frac_str}"
