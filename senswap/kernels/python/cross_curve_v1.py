"""
Cross-pool pricing curve (v1 semantics).

Pools are single-asset. Two pools price against each other through the
reserve-per-share ratio of each side:

    r_s = reserve_s / shares_s,   r_t = reserve_t / shares_t
    invariant: r_s * r_t is preserved when the source reserve moves

Share supplies are fixed for the duration of a swap, so the invariant reduces
to a constant product of the two reserves:

    new_target = ceil(old_source * target / new_source)

Ceiling rounding keeps the target reserve as large as possible, so any
rounding dust stays in the pool and never reaches the trader.
"""

from __future__ import annotations

from ...errors import ArithmeticOverflowError
from .checked_math import U64, U128, checked_ceil_div, checked_mul, is_uint, narrow


def curve(
    new_source_reserve: int,
    old_source_reserve: int,
    source_shares: int,
    target_reserve: int,
    target_shares: int,
) -> int:
    """
    Return the target pool's reserve after the source reserve moves.

    Raises ArithmeticOverflowError on a zero share supply, a zero new source
    reserve, or any out-of-width intermediate.
    """
    for name, value, bits in (
        ("new_source_reserve", new_source_reserve, U64),
        ("old_source_reserve", old_source_reserve, U64),
        ("source_shares", source_shares, U128),
        ("target_reserve", target_reserve, U64),
        ("target_shares", target_shares, U128),
    ):
        if not is_uint(value, bits):
            raise ArithmeticOverflowError(f"{name} out of u{bits} range: {value!r}")

    if source_shares == 0 or target_shares == 0:
        raise ArithmeticOverflowError("share supply must be positive")

    k = checked_mul(old_source_reserve, target_reserve, bits=U128)
    new_target = checked_ceil_div(k, new_source_reserve, bits=U128)
    return narrow(new_target, bits=U64)


def invariant_holds(
    old_source_reserve: int,
    new_source_reserve: int,
    old_target_reserve: int,
    new_target_reserve: int,
) -> bool:
    """Post-condition: the reserve product never decreases across a curve step."""
    return new_source_reserve * new_target_reserve >= old_source_reserve * old_target_reserve
