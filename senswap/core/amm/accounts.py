"""Ordered account-list cursor used by every handler."""

from __future__ import annotations

from typing import Sequence

from ...errors import InvalidInstructionError
from ...state.balances import normalize_key
from .types import AccountMeta


class AccountCursor:
    """Hands out the request's accounts in order, failing when they run out."""

    def __init__(self, accounts: Sequence[AccountMeta]) -> None:
        self._accounts = tuple(accounts)
        self._pos = 0

    def next(self) -> AccountMeta:
        if self._pos >= len(self._accounts):
            raise InvalidInstructionError("not enough account keys")
        meta = self._accounts[self._pos]
        self._pos += 1
        try:
            key = normalize_key(meta.key)
        except (TypeError, ValueError) as exc:
            raise InvalidInstructionError(f"invalid account key at position {self._pos - 1}: {exc}") from exc
        return AccountMeta(key=key, is_signer=bool(meta.is_signer))

    def take(self, n: int) -> list[AccountMeta]:
        return [self.next() for _ in range(n)]
