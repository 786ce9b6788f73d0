"""Data types for the AMM operation handlers.

All value types are frozen dataclasses. `TransferService` and `AuthorityGate`
are the interfaces the core needs from its external collaborators.

Units/conventions:
- `reserve`/`amount` are asset units (u64).
- `lpt` is LP shares (u128).
- keys are 0x-prefixed 32-byte hex strings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntEnum, unique

from ...errors import ErrorKind


@unique
class InstructionTag(IntEnum):
    """Wire tag of each operation (first byte of a request)."""
    INITIALIZE_POOL = 0
    INITIALIZE_LPT = 1
    ADD_LIQUIDITY = 2
    REMOVE_LIQUIDITY = 3
    SWAP = 4
    TRANSFER = 5
    VOTE = 6
    CLOSE_LPT = 7
    CLOSE_POOL = 8
    INITIALIZE_NETWORK = 9


@dataclass(frozen=True)
class Instruction:
    """Decoded request. Unused fields default to 0."""

    tag: InstructionTag
    reserve: int = 0   # initialize_pool / add_liquidity
    lpt: int = 0       # initialize_pool / remove_liquidity / transfer
    amount: int = 0    # swap


@unique
class Event(Enum):
    NETWORK_INITIALIZED = "NetworkInitialized"
    POOL_INITIALIZED = "PoolInitialized"
    LPT_INITIALIZED = "LPTInitialized"
    LIQUIDITY_ADDED = "LiquidityAdded"
    LIQUIDITY_REMOVED = "LiquidityRemoved"
    SWAPPED = "Swapped"
    LPT_TRANSFERRED = "LPTTransferred"
    LPT_CLOSED = "LPTClosed"
    POOL_CLOSED = "PoolClosed"


@dataclass(frozen=True)
class Effect:
    """Amounts moved by a successful operation."""

    event: Event
    noop: bool = False
    reserve_in: int = 0
    lpt_minted: int = 0
    lpt_burned: int = 0
    lpt_moved: int = 0
    payout: int = 0
    fee: int = 0
    earn: int = 0
    earn_in_settlement: int = 0
    lamports_reclaimed: int = 0


@dataclass(frozen=True)
class ProcessResult:
    ok: bool
    instruction: Instruction | None = None
    effect: Effect | None = None
    error: ErrorKind | None = None
    code: int | None = None
    message: str | None = None


@dataclass(frozen=True)
class AccountMeta:
    """One entry of a request's ordered account list."""

    key: str
    is_signer: bool = False


class TransferService(ABC):
    """Custody of fungible assets; the core only says how much moves where."""

    program_id: str

    @abstractmethod
    def initialize_account(self, account: str, mint: str, owner: str) -> None:
        """Bind an empty token account to `mint` under `owner`."""

    @abstractmethod
    def transfer(self, amount: int, source: str, destination: str, authority: str) -> None:
        """Move `amount` from `source` to `destination`; `authority` must own `source`."""

    @abstractmethod
    def close_account(self, account: str, destination: str, authority: str) -> int:
        """Close an empty token account and return the lamports credited to `destination`."""


class AuthorityGate(ABC):
    """Supplies the verified treasurer authority of a pool."""

    @abstractmethod
    def treasurer_of(self, pool: str) -> str:
        """Derived treasurer key of `pool`."""
