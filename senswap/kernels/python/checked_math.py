"""
Checked fixed-width arithmetic kernel.

Every operation works on Python ints constrained to an unsigned width (64 or
128 bits) and raises `ArithmeticOverflowError` instead of wrapping:
- results above the width maximum (overflow),
- negative results (underflow),
- zero divisors.

Division floors (Python `//` on non-negative operands).
"""

from __future__ import annotations

from ...errors import ArithmeticOverflowError


U64 = 64
U128 = 128

U64_MAX = (1 << U64) - 1
U128_MAX = (1 << U128) - 1

_MAX_BY_WIDTH = {U64: U64_MAX, U128: U128_MAX}


def max_value(bits: int) -> int:
    try:
        return _MAX_BY_WIDTH[bits]
    except KeyError:
        raise ValueError(f"unsupported width: {bits}") from None


def _require_uint(name: str, value: int, bits: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0 or value > max_value(bits):
        raise ArithmeticOverflowError(f"{name} out of u{bits} range: {value}")


def _fit(result: int, bits: int, op: str) -> int:
    if result < 0:
        raise ArithmeticOverflowError(f"{op} underflow (u{bits})")
    if result > max_value(bits):
        raise ArithmeticOverflowError(f"{op} overflow (u{bits})")
    return result


def is_uint(value: object, bits: int) -> bool:
    """True when `value` is a non-bool int inside the unsigned width."""
    if not isinstance(value, int) or isinstance(value, bool):
        return False
    return 0 <= value <= max_value(bits)


def checked_add(a: int, b: int, *, bits: int = U64) -> int:
    _require_uint("a", a, bits)
    _require_uint("b", b, bits)
    return _fit(a + b, bits, "add")


def checked_sub(a: int, b: int, *, bits: int = U64) -> int:
    _require_uint("a", a, bits)
    _require_uint("b", b, bits)
    return _fit(a - b, bits, "sub")


def checked_mul(a: int, b: int, *, bits: int = U128) -> int:
    _require_uint("a", a, bits)
    _require_uint("b", b, bits)
    return _fit(a * b, bits, "mul")


def checked_div(a: int, b: int, *, bits: int = U128) -> int:
    """Floor division; a zero divisor is reported as an overflow."""
    _require_uint("a", a, bits)
    _require_uint("b", b, bits)
    if b == 0:
        raise ArithmeticOverflowError(f"div by zero (u{bits})")
    return a // b


def checked_ceil_div(a: int, b: int, *, bits: int = U128) -> int:
    _require_uint("a", a, bits)
    _require_uint("b", b, bits)
    if b == 0:
        raise ArithmeticOverflowError(f"div by zero (u{bits})")
    return -(-a // b)


def narrow(value: int, *, bits: int = U64) -> int:
    """Cast a wider unsigned value down to `bits`, failing instead of truncating."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("value must be an int")
    return _fit(value, bits, "narrow")


def mul_div_floor(a: int, b: int, denominator: int, *, bits: int = U128) -> int:
    """`floor(a * b / denominator)` with the product checked at `bits`."""
    return checked_div(checked_mul(a, b, bits=bits), denominator, bits=bits)
