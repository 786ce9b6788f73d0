"""
State management for the SenSwap AMM
"""

from .accounts import Account, AccountStore, Record
from .balances import NULL_KEY, PRIMARY_MINT, TokenAccount
from .lp import LPTAccount
from .network import MAX_MINTS, Network, NetworkState
from .pools import Pool

__all__ = [
    "Account",
    "AccountStore",
    "Record",
    "NULL_KEY",
    "PRIMARY_MINT",
    "TokenAccount",
    "LPTAccount",
    "MAX_MINTS",
    "Network",
    "NetworkState",
    "Pool",
]
