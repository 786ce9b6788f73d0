"""
Swap fee splitting (deterministic, integer-only, checked).

A swap's gross output is split three ways:
- `fee`: trading fee, left in the ask pool (compounds for its LPs),
- `earn`: protocol cut, waived when the bought asset is the primary asset,
- `payout`: what the trader receives.

    fee    = floor(gross * fee_num  / fee_den)
    earn   = floor(gross * earn_num / fee_den)   (0 for a primary target)
    payout = gross - fee - earn
"""

from __future__ import annotations

from dataclasses import dataclass

from ..kernels.python.checked_math import U64, U128, checked_add, checked_sub, mul_div_floor, narrow


FEE_NUM = 2_500_000  # 0.25%
EARN_NUM = 500_000  # 0.05%
FEE_DEN = 1_000_000_000


@dataclass(frozen=True)
class FeeSchedule:
    fee_num: int = FEE_NUM
    earn_num: int = EARN_NUM
    fee_den: int = FEE_DEN

    def __post_init__(self) -> None:
        for name, v in (
            ("fee_num", self.fee_num),
            ("earn_num", self.earn_num),
            ("fee_den", self.fee_den),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.fee_den <= 0:
            raise ValueError(f"fee_den must be positive: {self.fee_den}")
        if self.fee_num + self.earn_num > self.fee_den:
            raise ValueError(
                f"fee_num + earn_num must not exceed fee_den: {self.fee_num} + {self.earn_num} > {self.fee_den}"
            )


DEFAULT_FEE_SCHEDULE = FeeSchedule()


@dataclass(frozen=True)
class FeeResult:
    new_reserve_with_fee: int
    payout: int
    fee: int
    earn: int

    @property
    def gross(self) -> int:
        return self.payout + self.fee + self.earn


def apply_fee(
    new_reserve_without_fee: int,
    old_reserve: int,
    is_primary_target: bool,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> FeeResult:
    """
    Split the gross ask-side output of a swap.

    Args:
        new_reserve_without_fee: Ask reserve priced by the curve, before fees
        old_reserve: Ask reserve before the swap
        is_primary_target: True when the ask pool holds the primary asset
        schedule: Fee numerators/denominator

    Raises:
        ArithmeticOverflowError: If the curve raised the ask reserve, or any step leaves u64
    """
    gross = checked_sub(old_reserve, new_reserve_without_fee, bits=U64)
    fee = narrow(mul_div_floor(gross, schedule.fee_num, schedule.fee_den, bits=U128), bits=U64)
    if is_primary_target:
        earn = 0
    else:
        earn = narrow(mul_div_floor(gross, schedule.earn_num, schedule.fee_den, bits=U128), bits=U64)

    new_reserve_with_fee = checked_add(new_reserve_without_fee, fee, bits=U64)
    payout = checked_sub(checked_sub(gross, fee, bits=U64), earn, bits=U64)

    return FeeResult(
        new_reserve_with_fee=new_reserve_with_fee,
        payout=payout,
        fee=fee,
        earn=earn,
    )
