"""
Account slot table with per-operation transactions.

Every record (network, pool, LPT account, token account) lives in a slot keyed
by its account key. A slot also records the program whose storage domain owns
it and the lamports deposited for its storage, reclaimed when it is closed.

Records are frozen dataclasses. Handlers read a record, build the updated copy
with `dataclasses.replace`, and store it back into the same slot.

`transaction()` snapshots the slot table; if the block raises, the snapshot is
restored and every write made inside the block disappears.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Iterator, Optional, Tuple, Type, TypeVar, Union

from ..errors import IncorrectProgramIdError
from ..kernels.python.checked_math import U64, checked_add, is_uint
from .balances import PubKey, TokenAccount, normalize_key
from .lp import LPTAccount
from .network import Network
from .pools import Pool


Record = Union[Network, Pool, LPTAccount, TokenAccount]
R = TypeVar("R", Network, Pool, LPTAccount, TokenAccount)

# Owner of plain lamport-holding slots (wallets, rent destinations).
SYSTEM_PROGRAM_ID: PubKey = "0x" + "00" * 32


@dataclass(frozen=True)
class Account:
    key: PubKey
    owner: PubKey
    lamports: int = 0
    data: Optional[Record] = None

    def __post_init__(self) -> None:
        if not is_uint(self.lamports, U64):
            raise ValueError(f"lamports must be a u64: {self.lamports!r}")


class AccountStore:
    """
    In-memory slot table: key -> Account.

    Notes:
    - Keys are canonicalized on every access.
    - Iteration helpers return slots sorted by key.
    """

    def __init__(self) -> None:
        self._slots: Dict[PubKey, Account] = {}

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def allocate(
        self,
        key: PubKey,
        owner: PubKey,
        data: Optional[Record] = None,
        *,
        lamports: int = 0,
    ) -> Account:
        """Create a new slot; fails if the key is already in use."""
        k = normalize_key(key)
        if k in self._slots:
            raise ValueError(f"account already exists: {k}")
        account = Account(key=k, owner=normalize_key(owner, name="owner"), lamports=lamports, data=data)
        self._slots[k] = account
        return account

    def get(self, key: PubKey) -> Optional[Account]:
        return self._slots.get(normalize_key(key))

    def owner_of(self, key: PubKey) -> Optional[PubKey]:
        account = self.get(key)
        return account.owner if account is not None else None

    def lamports_of(self, key: PubKey) -> int:
        account = self.get(key)
        return account.lamports if account is not None else 0

    def load(self, key: PubKey, record_type: Type[R]) -> R:
        """
        Return the record held by `key`.

        Raises:
            IncorrectProgramIdError: If the slot is missing or holds another record type
        """
        account = self.get(key)
        if account is None:
            raise IncorrectProgramIdError(f"account not found: {key}")
        if not isinstance(account.data, record_type):
            raise IncorrectProgramIdError(
                f"account {account.key} does not hold a {record_type.__name__} record"
            )
        return account.data

    def store(self, key: PubKey, record: Record) -> None:
        """Write a record back into an existing slot."""
        k = normalize_key(key)
        account = self._slots.get(k)
        if account is None:
            raise KeyError(f"account not found: {k}")
        self._slots[k] = replace(account, data=record)

    def credit(self, key: PubKey, lamports: int) -> None:
        """Add lamports to a slot, creating a system-owned slot if absent."""
        k = normalize_key(key)
        account = self._slots.get(k)
        if account is None:
            account = Account(key=k, owner=SYSTEM_PROGRAM_ID)
        self._slots[k] = replace(account, lamports=checked_add(account.lamports, lamports, bits=U64))

    def close(self, key: PubKey, destination: PubKey) -> int:
        """
        Remove a slot and credit its lamports to `destination`.

        Returns the reclaimed lamports.
        """
        k = normalize_key(key)
        account = self._slots.get(k)
        if account is None:
            raise KeyError(f"account not found: {k}")
        if normalize_key(destination, name="destination") == k:
            raise ValueError("cannot close an account into itself")
        self.credit(destination, account.lamports)
        del self._slots[k]
        return account.lamports

    def iter_records(self, record_type: Type[R]) -> Iterator[Tuple[PubKey, R]]:
        for key in sorted(self._slots):
            data = self._slots[key].data
            if isinstance(data, record_type):
                yield key, data

    def accounts(self) -> list[Account]:
        return [self._slots[k] for k in sorted(self._slots)]

    def snapshot(self) -> Dict[PubKey, Account]:
        # Slots are immutable, so a shallow copy is a full snapshot.
        return dict(self._slots)

    def restore(self, snapshot: Dict[PubKey, Account]) -> None:
        self._slots = dict(snapshot)

    @contextmanager
    def transaction(self) -> Iterator["AccountStore"]:
        """All-or-nothing block: any exception restores the entry snapshot."""
        saved = self.snapshot()
        try:
            yield self
        except BaseException:
            self.restore(saved)
            raise

    def __repr__(self) -> str:
        return f"AccountStore({len(self._slots)} accounts)"
