"""Global invariant checkers over the account store.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass). Unlike the per-record
checks in `senswap.state`, these span records: share accounting sums every LPT
account bound to a pool, treasury coverage reads the token program's account.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Dict

from ...state.accounts import AccountStore
from ...state.balances import PRIMARY_MINT, PubKey, TokenAccount
from ...state.lp import LPTAccount
from ...state.network import Network
from ...state.pools import Pool


def _share_totals(store: AccountStore) -> Dict[PubKey, int]:
    totals: Dict[PubKey, int] = defaultdict(int)
    for _key, account in store.iter_records(LPTAccount):
        if account.is_initialized():
            totals[account.pool] += account.lpt
    return totals


def inv_pool_reserve_lpt_together(store: AccountStore) -> bool:
    return all(pool.verify_invariant() for _k, pool in store.iter_records(Pool) if pool.is_initialized())


def inv_share_accounting(store: AccountStore) -> bool:
    totals = _share_totals(store)
    pools = {k: pool for k, pool in store.iter_records(Pool) if pool.is_initialized()}
    for key, pool in pools.items():
        if totals.get(key, 0) != pool.lpt:
            return False
    # Shares bound to a missing or uninitialized pool must be zero.
    return all(total == 0 for key, total in totals.items() if key not in pools)


def inv_lpt_within_pool_supply(store: AccountStore) -> bool:
    for _key, account in store.iter_records(LPTAccount):
        if not account.is_initialized() or account.lpt == 0:
            continue
        pool_slot = store.get(account.pool)
        if pool_slot is None or not isinstance(pool_slot.data, Pool):
            return False
        if account.lpt > pool_slot.data.lpt:
            return False
    return True


def inv_network_primary_slot(store: AccountStore) -> bool:
    return all(
        network.mints[0] == PRIMARY_MINT
        for _k, network in store.iter_records(Network)
        if network.is_initialized()
    )


def inv_pool_network_activated(store: AccountStore) -> bool:
    for _key, pool in store.iter_records(Pool):
        if not pool.is_initialized():
            continue
        slot = store.get(pool.network)
        if slot is None or not isinstance(slot.data, Network):
            return False
        if not slot.data.is_activated() or not slot.data.is_approved(pool.mint):
            return False
    return True


def inv_treasury_covers_reserve(store: AccountStore) -> bool:
    for _key, pool in store.iter_records(Pool):
        if not pool.is_initialized():
            continue
        slot = store.get(pool.treasury)
        if slot is None or not isinstance(slot.data, TokenAccount):
            return False
        if slot.data.mint != pool.mint or slot.data.amount < pool.reserve:
            return False
    return True


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[AccountStore], bool]] = {
    "inv_pool_reserve_lpt_together": inv_pool_reserve_lpt_together,
    "inv_share_accounting": inv_share_accounting,
    "inv_lpt_within_pool_supply": inv_lpt_within_pool_supply,
    "inv_network_primary_slot": inv_network_primary_slot,
    "inv_pool_network_activated": inv_pool_network_activated,
    "inv_treasury_covers_reserve": inv_treasury_covers_reserve,
}


def check_all(store: AccountStore) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(store)
    ]
