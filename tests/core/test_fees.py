"""Tests for senswap/core/fees.py."""

import pytest

from senswap.core.fees import (
    DEFAULT_FEE_SCHEDULE,
    EARN_NUM,
    FEE_DEN,
    FEE_NUM,
    FeeSchedule,
    apply_fee,
)
from senswap.errors import ArithmeticOverflowError


def test_constants():
    assert (FEE_NUM, EARN_NUM, FEE_DEN) == (2_500_000, 500_000, 1_000_000_000)
    assert DEFAULT_FEE_SCHEDULE == FeeSchedule()


def test_split_for_asset_target():
    r = apply_fee(3_960_397, 4_000_000, False)
    assert r.fee == 99
    assert r.earn == 19
    assert r.payout == 39_485
    assert r.new_reserve_with_fee == 3_960_496
    assert r.gross == 39_603


def test_primary_target_waives_earn():
    r = apply_fee(3_960_397, 4_000_000, True)
    assert r.earn == 0
    assert r.fee == 99
    assert r.payout == 39_504


def test_small_trades_pay_no_fee():
    r = apply_fee(999_900, 1_000_000, False)
    assert (r.fee, r.earn, r.payout) == (0, 0, 100)


def test_no_movement():
    r = apply_fee(1_000, 1_000, False)
    assert (r.fee, r.earn, r.payout, r.new_reserve_with_fee) == (0, 0, 0, 1_000)


def test_reserve_growth_fails():
    with pytest.raises(ArithmeticOverflowError, match="underflow"):
        apply_fee(1_001, 1_000, False)


@pytest.mark.parametrize("gross", [1, 399, 400, 10_000, 123_456_789, 2**63])
def test_fee_monotone_and_conserving(gross):
    old = 2**64 - 1
    r = apply_fee(old - gross, old, False)
    assert r.gross == r.payout + r.fee + r.earn == gross
    assert r.fee >= r.earn
    bigger = apply_fee(old - gross - 1, old, False)
    assert bigger.fee >= r.fee
    assert bigger.earn >= r.earn


def test_custom_schedule():
    schedule = FeeSchedule(fee_num=3, earn_num=1, fee_den=100)
    r = apply_fee(0, 1_000, False, schedule)
    assert (r.fee, r.earn, r.payout) == (30, 10, 960)


@pytest.mark.parametrize(
    "kwargs,exc",
    [
        ({"fee_num": -1}, ValueError),
        ({"fee_den": 0}, ValueError),
        ({"fee_num": 600, "earn_num": 500, "fee_den": 1_000}, ValueError),
        ({"fee_num": 1.5}, TypeError),
        ({"earn_num": True}, TypeError),
    ],
)
def test_schedule_validation(kwargs, exc):
    with pytest.raises(exc):
        FeeSchedule(**kwargs)
