"""
Deterministic state root hashing (v1).

This is intended for:
- debugging / audit (stable hashes for the same logical state),
- comparing stores after replaying the same requests,
- future integration where state commitment is required.

Slots are hashed sorted by key, so the root does not depend on the order in
which accounts were created.
"""

from __future__ import annotations

from .accounts import Account, AccountStore
from .balances import KEY_BYTES, TokenAccount
from .canonical import domain_sep_bytes, encode_bytes, encode_uvarint, hex_to_bytes_fixed, sha256_hex
from .lp import LPTAccount
from .network import Network
from .pools import Pool


STATE_ROOT_VERSION = 1

_RECORD_CODE: dict[type, int] = {
    Network: 1,
    Pool: 2,
    LPTAccount: 3,
    TokenAccount: 4,
}


def _key(value: str, name: str) -> bytes:
    return hex_to_bytes_fixed(value, nbytes=KEY_BYTES, name=name)


def _encode_record(record) -> bytes:
    out = bytearray()
    if record is None:
        out += encode_uvarint(0)
        return bytes(out)
    code = _RECORD_CODE.get(type(record))
    if code is None:
        raise ValueError(f"unsupported record type: {type(record).__name__}")
    out += encode_uvarint(code)

    if isinstance(record, Network):
        out += encode_uvarint(record.state.value)
        out += encode_uvarint(len(record.mints))
        for mint in record.mints:
            out += _key(mint, "mint")
    elif isinstance(record, Pool):
        out += _key(record.owner, "owner")
        out += _key(record.network, "network")
        out += _key(record.mint, "mint")
        out += _key(record.treasury, "treasury")
        out += encode_uvarint(record.reserve)
        out += encode_uvarint(record.lpt)
        out += encode_uvarint(record.fee_rate)
        out += encode_uvarint(int(record.initialized))
    elif isinstance(record, LPTAccount):
        out += _key(record.owner, "owner")
        out += _key(record.pool, "pool")
        out += encode_uvarint(record.lpt)
        out += encode_uvarint(int(record.initialized))
    else:
        out += _key(record.mint, "mint")
        out += _key(record.owner, "owner")
        out += encode_uvarint(record.amount)
        out += encode_uvarint(int(record.initialized))
    return bytes(out)


def _encode_account(account: Account) -> bytes:
    out = bytearray()
    out += _key(account.key, "key")
    out += _key(account.owner, "owner")
    out += encode_uvarint(account.lamports)
    out += encode_bytes(_encode_record(account.data))
    return bytes(out)


def compute_state_root(store: AccountStore) -> str:
    """
    Compute a deterministic state root hash for the account store.

    Returns a 0x-prefixed sha256 digest.
    """
    if not isinstance(store, AccountStore):
        raise TypeError("store must be an AccountStore")

    accounts = store.accounts()
    section = bytearray()
    section += encode_uvarint(len(accounts))
    for account in accounts:
        section += _encode_account(account)

    payload = domain_sep_bytes("state_root", version=STATE_ROOT_VERSION) + b"ACC" + encode_bytes(bytes(section))
    return sha256_hex(payload)
