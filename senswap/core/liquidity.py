"""
LP share math for single-asset pools: mint on deposit, payout on burn.

Both directions floor, so rounding always favours the pool:
    minted = floor(pool_lpt * reserve_in / pool_reserve)
    payout = floor(pool_reserve * lpt_in / pool_lpt)
"""

from typing import Tuple

from ..kernels.python.checked_math import U64, U128, checked_add, checked_sub, mul_div_floor, narrow
from ..state.balances import Amount
from ..state.pools import Pool


def compute_lp_mint(reserve_in: Amount, pool_reserve: Amount, pool_lpt: Amount) -> Amount:
    """
    Compute LP shares minted for a deposit of `reserve_in`.

    Raises:
        ArithmeticOverflowError: On u128 overflow or an empty pool reserve
    """
    return mul_div_floor(pool_lpt, reserve_in, pool_reserve, bits=U128)


def compute_lp_burn(lpt_in: Amount, pool_reserve: Amount, pool_lpt: Amount) -> Amount:
    """
    Compute the reserve paid out for burning `lpt_in` shares.

    The result never exceeds `pool_reserve` while `lpt_in <= pool_lpt`, and is
    narrowed to u64 (failing rather than truncating).
    """
    return narrow(mul_div_floor(pool_reserve, lpt_in, pool_lpt, bits=U128), bits=U64)


def add_liquidity(pool: Pool, reserve_in: Amount) -> Tuple[Amount, Amount, Amount]:
    """
    Apply a deposit to the pool's totals.

    Returns:
        Tuple of (minted, new_reserve, new_lpt)
    """
    minted = compute_lp_mint(reserve_in, pool.reserve, pool.lpt)
    new_reserve = checked_add(pool.reserve, reserve_in, bits=U64)
    new_lpt = checked_add(pool.lpt, minted, bits=U128)
    return minted, new_reserve, new_lpt


def remove_liquidity(pool: Pool, lpt_in: Amount) -> Tuple[Amount, Amount, Amount]:
    """
    Apply a burn to the pool's totals.

    Returns:
        Tuple of (payout, new_reserve, new_lpt)
    """
    payout = compute_lp_burn(lpt_in, pool.reserve, pool.lpt)
    new_reserve = checked_sub(pool.reserve, payout, bits=U64)
    new_lpt = checked_sub(pool.lpt, lpt_in, bits=U128)
    return payout, new_reserve, new_lpt
