"""
LP share account record.

Each account is bound to exactly one pool; the sum of the balances of all
accounts bound to a pool equals that pool's `lpt`.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..kernels.python.checked_math import U128, is_uint
from .balances import NULL_KEY, Amount, PubKey


@dataclass(frozen=True)
class LPTAccount:
    owner: PubKey = NULL_KEY
    pool: PubKey = NULL_KEY
    lpt: Amount = 0
    initialized: bool = False

    def __post_init__(self) -> None:
        if not is_uint(self.lpt, U128):
            raise ValueError(f"lpt must be a u128: {self.lpt!r}")

    def is_initialized(self) -> bool:
        return self.initialized
