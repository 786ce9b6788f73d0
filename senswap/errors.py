"""Error taxonomy shared by the kernels, the record store and the handlers.

Every user-facing failure is an ``AppError`` subclass carrying an
``ErrorKind`` and a stable numeric ``code`` (the program error number).
``InvariantViolationError`` is kept outside the taxonomy: it signals an engine
bug, not a rejected request.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ErrorKind(Enum):
    INVALID_INSTRUCTION = "InvalidInstruction"
    INCORRECT_PROGRAM_ID = "IncorrectProgramId"
    CONSTRUCTOR_ONCE = "ConstructorOnce"
    INVALID_OWNER = "InvalidOwner"
    UNMATCHED_POOL = "UnmatchedPool"
    NOT_INITIALIZED = "NotInitialized"
    INCORRECT_NETWORK_ID = "IncorrectNetworkId"
    ZERO_VALUE = "ZeroValue"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    OVERFLOW = "Overflow"


ERROR_CODES: dict[ErrorKind, int] = {kind: code for code, kind in enumerate(ErrorKind)}


class AppError(Exception):
    """Base class for rejected operations."""

    kind: ErrorKind = ErrorKind.INVALID_INSTRUCTION

    def __init__(self, message: str = "") -> None:
        self.message = message or self.kind.value
        super().__init__(self.message)

    @property
    def code(self) -> int:
        return ERROR_CODES[self.kind]


class InvalidInstructionError(AppError):
    """Malformed wire payload, unknown tag, or missing accounts."""

    kind = ErrorKind.INVALID_INSTRUCTION


class IncorrectProgramIdError(AppError):
    """A slot is not owned by the expected program."""

    kind = ErrorKind.INCORRECT_PROGRAM_ID


class ConstructorOnceError(AppError):
    """Re-initialization attempt."""

    kind = ErrorKind.CONSTRUCTOR_ONCE


class InvalidOwnerError(AppError):
    """Signer, ownership or derived-authority check failed."""

    kind = ErrorKind.INVALID_OWNER


class UnmatchedPoolError(AppError):
    """Cross-referenced records disagree."""

    kind = ErrorKind.UNMATCHED_POOL


class NotInitializedError(AppError):
    """A dependency is not yet in the required state."""

    kind = ErrorKind.NOT_INITIALIZED


class IncorrectNetworkIdError(AppError):
    """Pools involved in one swap belong to different networks."""

    kind = ErrorKind.INCORRECT_NETWORK_ID


class ZeroValueError(AppError):
    """A required-positive quantity is zero, or a close finds a nonzero balance."""

    kind = ErrorKind.ZERO_VALUE


class InsufficientFundsError(AppError):
    """Withdrawal or transfer exceeds the available balance."""

    kind = ErrorKind.INSUFFICIENT_FUNDS


class ArithmeticOverflowError(AppError, ArithmeticError):
    """Overflow, underflow or division by zero in checked arithmetic."""

    kind = ErrorKind.OVERFLOW


ERROR_TYPES: dict[ErrorKind, type[AppError]] = {
    cls.kind: cls
    for cls in (
        InvalidInstructionError,
        IncorrectProgramIdError,
        ConstructorOnceError,
        InvalidOwnerError,
        UnmatchedPoolError,
        NotInitializedError,
        IncorrectNetworkIdError,
        ZeroValueError,
        InsufficientFundsError,
        ArithmeticOverflowError,
    )
}


class InvariantViolationError(Exception):
    """Raised when a post-state violates one or more global invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
