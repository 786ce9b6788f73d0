"""
Identifier aliases and the token account record.

Token accounts are custodied by the token program (the Token Transfer
Service); the AMM core only reads their `mint`/`owner` to validate treasuries
and asks the service to move `amount`.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..kernels.python.checked_math import U64, is_uint
from .canonical import canonical_hex_fixed_allow_0x


# Type aliases
PubKey = str  # 32-byte account key as 0x-prefixed lowercase hex
MintId = str  # 32-byte asset identifier (0x...)
Amount = int  # Non-negative, width-checked integer

KEY_BYTES = 32

# Sentinel identifier of the network's primary (settlement) asset.
PRIMARY_MINT: MintId = "0x" + "00" * KEY_BYTES

# Unset key field on an uninitialized record.
NULL_KEY: PubKey = "0x" + "00" * KEY_BYTES


def normalize_key(value: str, *, name: str = "key") -> PubKey:
    """Canonicalize a 32-byte key (lowercase, 0x-prefixed)."""
    return canonical_hex_fixed_allow_0x(value, nbytes=KEY_BYTES, name=name)


@dataclass(frozen=True)
class TokenAccount:
    """
    Fungible token balance held by `owner` for `mint`.

    Attributes:
        mint: Asset held by the account
        owner: Authority allowed to move or close the balance
        amount: Units held (u64)
        initialized: Set once by `initialize_account`
    """

    mint: MintId = NULL_KEY
    owner: PubKey = NULL_KEY
    amount: Amount = 0
    initialized: bool = False

    def __post_init__(self) -> None:
        if not is_uint(self.amount, U64):
            raise ValueError(f"token amount must be a u64: {self.amount!r}")

    def is_initialized(self) -> bool:
        return self.initialized
