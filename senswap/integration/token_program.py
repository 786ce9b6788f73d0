"""
In-memory token program (the Token Transfer Service).

Token accounts live in the same `AccountStore` as the AMM records, owned by
this program's id, so the engine's per-request transaction covers token
balances too. The AMM core reaches it only through the `TransferService`
interface; `create_account`, `mint_to` and `balance` are setup/inspection
helpers for callers and tests.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..config import DEFAULT_TOKEN_PROGRAM_ID
from ..core.amm.types import TransferService
from ..errors import (
    ConstructorOnceError,
    IncorrectProgramIdError,
    InsufficientFundsError,
    InvalidOwnerError,
    NotInitializedError,
    UnmatchedPoolError,
    ZeroValueError,
)
from ..kernels.python.checked_math import U64, checked_add, checked_sub
from ..state.accounts import AccountStore
from ..state.balances import Amount, MintId, PubKey, TokenAccount, normalize_key

logger = logging.getLogger(__name__)


class TokenProgram(TransferService):
    def __init__(self, store: AccountStore, program_id: PubKey = DEFAULT_TOKEN_PROGRAM_ID) -> None:
        self.store = store
        self.program_id = normalize_key(program_id, name="program_id")

    # -- Setup helpers -----------------------------------------------------

    def create_account(
        self,
        key: PubKey,
        *,
        mint: MintId | None = None,
        owner: PubKey | None = None,
        amount: Amount = 0,
        lamports: int = 0,
    ) -> PubKey:
        """
        Allocate a token account slot.

        Without `mint`/`owner` the slot is left uninitialized, ready for
        `initialize_account` (e.g. a pool treasury).
        """
        if mint is None and owner is None:
            if amount:
                raise ValueError("an uninitialized token account cannot hold a balance")
            record = TokenAccount()
        elif mint is None or owner is None:
            raise ValueError("mint and owner must be given together")
        else:
            record = TokenAccount(
                mint=normalize_key(mint, name="mint"),
                owner=normalize_key(owner, name="owner"),
                amount=amount,
                initialized=True,
            )
        return self.store.allocate(key, self.program_id, record, lamports=lamports).key

    def mint_to(self, account: PubKey, amount: Amount) -> None:
        token = self._load_initialized(account)
        self.store.store(account, replace(token, amount=checked_add(token.amount, amount, bits=U64)))

    def balance(self, account: PubKey) -> Amount:
        return self._load(account).amount

    # -- TransferService ---------------------------------------------------

    def _load(self, key: PubKey) -> TokenAccount:
        if self.store.owner_of(key) != self.program_id:
            raise IncorrectProgramIdError(f"token account {key} is not owned by the token program")
        return self.store.load(key, TokenAccount)

    def _load_initialized(self, key: PubKey) -> TokenAccount:
        token = self._load(key)
        if not token.is_initialized():
            raise NotInitializedError(f"token account {key} is not initialized")
        return token

    def initialize_account(self, account: PubKey, mint: MintId, owner: PubKey) -> None:
        token = self._load(account)
        if token.is_initialized():
            raise ConstructorOnceError(f"token account {account} is already initialized")
        self.store.store(
            account,
            replace(
                token,
                mint=normalize_key(mint, name="mint"),
                owner=normalize_key(owner, name="owner"),
                amount=0,
                initialized=True,
            ),
        )

    def transfer(self, amount: Amount, source: PubKey, destination: PubKey, authority: PubKey) -> None:
        src = self._load_initialized(source)
        dst = self._load_initialized(destination)
        if normalize_key(authority, name="authority") != src.owner:
            raise InvalidOwnerError(f"authority does not own token account {source}")
        if src.mint != dst.mint:
            raise UnmatchedPoolError("source and destination hold different mints")
        if src.amount < amount:
            raise InsufficientFundsError(f"token balance {src.amount} < {amount}")
        logger.debug("transfer %d from %s to %s", amount, source, destination)
        if normalize_key(source) == normalize_key(destination):
            return
        self.store.store(source, replace(src, amount=checked_sub(src.amount, amount, bits=U64)))
        self.store.store(destination, replace(dst, amount=checked_add(dst.amount, amount, bits=U64)))

    def close_account(self, account: PubKey, destination: PubKey, authority: PubKey) -> int:
        token = self._load_initialized(account)
        if normalize_key(authority, name="authority") != token.owner:
            raise InvalidOwnerError(f"authority does not own token account {account}")
        if token.amount != 0:
            raise ZeroValueError(f"token account {account} still holds {token.amount}")
        return self.store.close(account, destination)
