"""
Pool record for single-asset liquidity pools.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..kernels.python.checked_math import U64, U128, is_uint
from .balances import NULL_KEY, PRIMARY_MINT, Amount, MintId, PubKey


@dataclass(frozen=True)
class Pool:
    """
    State of one liquidity pool.

    Attributes:
        owner: Creator; the only key allowed to close the pool
        network: Network record this pool belongs to
        mint: Asset custodied by the pool
        treasury: Token account holding the reserve
        reserve: Asset units held (u64)
        lpt: LP shares outstanding (u128)
        fee_rate: Trading fee numerator over FEE_DEN, fixed at creation
        initialized: Set once by pool initialization
    """

    owner: PubKey = NULL_KEY
    network: PubKey = NULL_KEY
    mint: MintId = NULL_KEY
    treasury: PubKey = NULL_KEY
    reserve: Amount = 0
    lpt: Amount = 0
    fee_rate: int = 0
    initialized: bool = False

    def __post_init__(self) -> None:
        if not is_uint(self.reserve, U64):
            raise ValueError(f"reserve must be a u64: {self.reserve!r}")
        if not is_uint(self.lpt, U128):
            raise ValueError(f"lpt must be a u128: {self.lpt!r}")
        if not is_uint(self.fee_rate, U64):
            raise ValueError(f"fee_rate must be a u64: {self.fee_rate!r}")

    def is_initialized(self) -> bool:
        return self.initialized

    def is_primary(self) -> bool:
        return self.mint == PRIMARY_MINT

    def is_drained(self) -> bool:
        return self.reserve == 0 and self.lpt == 0

    def verify_invariant(self) -> bool:
        """Reserve and shares are zero together or positive together."""
        return (self.reserve == 0) == (self.lpt == 0)

    def __repr__(self) -> str:
        return (
            f"Pool(mint={self.mint[:10]}..., reserve={self.reserve}, "
            f"lpt={self.lpt}, initialized={self.initialized})"
        )
