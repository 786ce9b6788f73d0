"""
Core AMM algorithms
"""

from .fees import (
    DEFAULT_FEE_SCHEDULE,
    EARN_NUM,
    FEE_DEN,
    FEE_NUM,
    FeeResult,
    FeeSchedule,
    apply_fee,
)
from .liquidity import (
    add_liquidity,
    compute_lp_burn,
    compute_lp_mint,
    remove_liquidity,
)

__all__ = [
    "DEFAULT_FEE_SCHEDULE",
    "EARN_NUM",
    "FEE_DEN",
    "FEE_NUM",
    "FeeResult",
    "FeeSchedule",
    "apply_fee",
    "add_liquidity",
    "compute_lp_burn",
    "compute_lp_mint",
    "remove_liquidity",
]
