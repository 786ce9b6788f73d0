# [TESTER] v1

from __future__ import annotations

import pytest

from senswap.errors import (
    ERROR_CODES,
    ERROR_TYPES,
    AppError,
    ArithmeticOverflowError,
    ConstructorOnceError,
    ErrorKind,
    IncorrectNetworkIdError,
    IncorrectProgramIdError,
    InsufficientFundsError,
    InvalidInstructionError,
    InvalidOwnerError,
    InvariantViolationError,
    NotInitializedError,
    UnmatchedPoolError,
    ZeroValueError,
)


# Program error numbers are part of the external interface; never renumber.
EXPECTED = [
    (ErrorKind.INVALID_INSTRUCTION, 0, InvalidInstructionError),
    (ErrorKind.INCORRECT_PROGRAM_ID, 1, IncorrectProgramIdError),
    (ErrorKind.CONSTRUCTOR_ONCE, 2, ConstructorOnceError),
    (ErrorKind.INVALID_OWNER, 3, InvalidOwnerError),
    (ErrorKind.UNMATCHED_POOL, 4, UnmatchedPoolError),
    (ErrorKind.NOT_INITIALIZED, 5, NotInitializedError),
    (ErrorKind.INCORRECT_NETWORK_ID, 6, IncorrectNetworkIdError),
    (ErrorKind.ZERO_VALUE, 7, ZeroValueError),
    (ErrorKind.INSUFFICIENT_FUNDS, 8, InsufficientFundsError),
    (ErrorKind.OVERFLOW, 9, ArithmeticOverflowError),
]


@pytest.mark.parametrize("kind,code,cls", EXPECTED, ids=[k.value for k, _, _ in EXPECTED])
def test_kind_code_and_type_are_pinned(kind: ErrorKind, code: int, cls: type[AppError]) -> None:
    assert ERROR_CODES[kind] == code
    assert ERROR_TYPES[kind] is cls
    err = cls("boom")
    assert err.kind is kind
    assert err.code == code
    assert err.message == "boom"
    assert isinstance(err, AppError)


def test_tables_cover_every_kind() -> None:
    assert set(ERROR_CODES) == set(ErrorKind)
    assert set(ERROR_TYPES) == set(ErrorKind)
    assert sorted(ERROR_CODES.values()) == list(range(len(ErrorKind)))


def test_default_message_is_kind_name() -> None:
    assert ZeroValueError().message == "ZeroValue"


def test_overflow_is_also_arithmetic_error() -> None:
    with pytest.raises(ArithmeticError):
        raise ArithmeticOverflowError("u64 overflow")


def test_invariant_violation_is_not_an_app_error() -> None:
    err = InvariantViolationError(["inv_a", "inv_b"])
    assert not isinstance(err, AppError)
    assert err.violations == ["inv_a", "inv_b"]
    assert "inv_a, inv_b" in str(err)
