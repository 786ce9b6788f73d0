"""Plain-dict serialization of the account store.

Round-trip property (tested): `store_to_dict(store_from_dict(d)) == d` for
every dict produced by `store_to_dict`. The output is JSON-compatible and
accepted by `canonical_json_bytes`.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping, Optional

from .accounts import AccountStore, Record
from .balances import TokenAccount
from .lp import LPTAccount
from .network import Network, NetworkState
from .pools import Pool


SNAPSHOT_VERSION = 1

RECORD_TYPES: dict[str, type] = {
    "network": Network,
    "pool": Pool,
    "lpt": LPTAccount,
    "token": TokenAccount,
}
_TYPE_NAMES = {cls: name for name, cls in RECORD_TYPES.items()}


def record_type_name(record: Optional[Record]) -> Optional[str]:
    if record is None:
        return None
    try:
        return _TYPE_NAMES[type(record)]
    except KeyError:
        raise TypeError(f"unsupported record type: {type(record).__name__}") from None


def record_to_dict(record: Record) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(record):
        val = getattr(record, f.name)
        if isinstance(val, NetworkState):
            val = val.value
        elif isinstance(val, tuple):
            val = list(val)
        out[f.name] = val
    return out


def record_from_dict(type_name: str, d: Mapping[str, Any]) -> Record:
    cls = RECORD_TYPES.get(type_name)
    if cls is None:
        raise ValueError(f"unknown record type: {type_name!r}")
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        val = d[f.name]
        if cls is Network and f.name == "state":
            val = NetworkState(val)
        elif cls is Network and f.name == "mints":
            val = tuple(val)
        kwargs[f.name] = val
    return cls(**kwargs)


def store_to_dict(store: AccountStore) -> dict[str, Any]:
    """Serialize every slot, sorted by key."""
    accounts = []
    for account in store.accounts():
        type_name = record_type_name(account.data)
        accounts.append(
            {
                "key": account.key,
                "owner": account.owner,
                "lamports": account.lamports,
                "type": type_name,
                "data": record_to_dict(account.data) if account.data is not None else None,
            }
        )
    return {"version": SNAPSHOT_VERSION, "accounts": accounts}


def store_from_dict(d: Mapping[str, Any]) -> AccountStore:
    """Rebuild a store. Raises KeyError on missing fields, ValueError on bad data."""
    if d.get("version") != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {d.get('version')!r}")
    store = AccountStore()
    for entry in d["accounts"]:
        type_name = entry["type"]
        data = record_from_dict(type_name, entry["data"]) if type_name is not None else None
        store.allocate(entry["key"], entry["owner"], data, lamports=entry["lamports"])
    return store
