"""
Network record: the set of approved mints and the activation lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .balances import NULL_KEY, PRIMARY_MINT, MintId


# Slot 0 is the primary sentinel; slots 1..MAX_MINTS-1 are filled at construction.
MAX_MINTS = 11


class NetworkState(Enum):
    """Network lifecycle; only ever advances."""
    UNINITIALIZED = 0
    INITIALIZED = 1
    ACTIVATED = 2


@dataclass(frozen=True)
class Network:
    state: NetworkState = NetworkState.UNINITIALIZED
    mints: tuple[MintId, ...] = (NULL_KEY,) * MAX_MINTS

    def __post_init__(self) -> None:
        if not isinstance(self.state, NetworkState):
            raise TypeError("state must be a NetworkState")
        if len(self.mints) != MAX_MINTS:
            raise ValueError(f"mints must have exactly {MAX_MINTS} slots, got {len(self.mints)}")

    @staticmethod
    def primary() -> MintId:
        return PRIMARY_MINT

    def is_initialized(self) -> bool:
        return self.state != NetworkState.UNINITIALIZED

    def is_activated(self) -> bool:
        return self.state == NetworkState.ACTIVATED

    def is_approved(self, mint: MintId) -> bool:
        return mint in self.mints

    def can_advance_to(self, state: NetworkState) -> bool:
        return state.value > self.state.value
