"""Dispatch-table engine for the AMM program.

``Processor.process(accounts, data)`` is the single entry point. It:

1. Decodes the request (raw bytes or an already decoded ``Instruction``).
2. Validates parameter widths.
3. Dispatches to the operation handler inside one store transaction.
4. Checks all global invariants on the post-state (``check_invariants``).
5. Returns a ``ProcessResult`` (ok with an ``Effect``, or the error kind).

A failure at any step restores the store to its pre-request contents.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

from ...config import ProgramConfig
from ...errors import AppError, InvalidInstructionError, InvariantViolationError
from ...kernels.python.checked_math import U64, U128, is_uint
from ...state.accounts import AccountStore
from .accounts import AccountCursor
from .handlers import (
    HandlerFn,
    InvocationContext,
    add_liquidity_handler,
    close_lpt,
    close_pool,
    initialize_lpt,
    initialize_network,
    initialize_pool,
    remove_liquidity_handler,
    swap,
    transfer,
)
from .invariants import check_all
from .instruction import unpack
from .types import AccountMeta, AuthorityGate, Instruction, InstructionTag, ProcessResult, TransferService

logger = logging.getLogger(__name__)

_DISPATCH: dict[InstructionTag, HandlerFn] = {
    InstructionTag.INITIALIZE_POOL: initialize_pool,
    InstructionTag.INITIALIZE_LPT: initialize_lpt,
    InstructionTag.ADD_LIQUIDITY: add_liquidity_handler,
    InstructionTag.REMOVE_LIQUIDITY: remove_liquidity_handler,
    InstructionTag.SWAP: swap,
    InstructionTag.TRANSFER: transfer,
    InstructionTag.CLOSE_LPT: close_lpt,
    InstructionTag.CLOSE_POOL: close_pool,
    InstructionTag.INITIALIZE_NETWORK: initialize_network,
}

# -- Parameter widths (from the wire format) ---------------------------------

_PARAM_WIDTHS: dict[str, int] = {
    "reserve": U64,
    "lpt": U128,
    "amount": U64,
}


def _validate_params(ix: Instruction) -> None:
    if not isinstance(ix.tag, InstructionTag):
        raise InvalidInstructionError(f"unknown instruction tag: {ix.tag!r}")
    for name, bits in _PARAM_WIDTHS.items():
        if not is_uint(getattr(ix, name), bits):
            raise InvalidInstructionError(f"param_domain:{name}")


Request = Union[bytes, bytearray, memoryview, Instruction]


class Processor:
    """Runs requests against an account store, one at a time."""

    def __init__(
        self,
        store: AccountStore,
        tokens: TransferService,
        gate: AuthorityGate,
        config: ProgramConfig | None = None,
    ) -> None:
        self.config = config if config is not None else ProgramConfig()
        if tokens.program_id != self.config.token_program_id:
            raise ValueError("transfer service program id does not match the configured token program")
        self.store = store
        self.tokens = tokens
        self.gate = gate
        self._ctx = InvocationContext(
            program_id=self.config.program_id,
            store=store,
            tokens=tokens,
            gate=gate,
            config=self.config,
        )

    def _execute(self, accounts: Sequence[AccountMeta], ix: Instruction):
        _validate_params(ix)
        handler = _DISPATCH.get(ix.tag)
        if handler is None:
            raise InvalidInstructionError(f"unsupported instruction: {ix.tag.name}")

        with self.store.transaction():
            effect = handler(self._ctx, AccountCursor(accounts), ix)
            if self.config.check_invariants:
                violations = check_all(self.store)
                if violations:
                    logger.error("%s broke invariants: %s", ix.tag.name, ", ".join(violations))
                    raise InvariantViolationError(violations)
        return effect

    @staticmethod
    def _decode(data: Request) -> Instruction:
        if isinstance(data, Instruction):
            return data
        return unpack(data)

    def process(self, accounts: Sequence[AccountMeta], data: Request) -> ProcessResult:
        """Execute one request; rejections come back as a result.

        ``InvariantViolationError`` and non-``AppError`` exceptions propagate
        after rollback.
        """
        ix: Instruction | None = None
        try:
            ix = self._decode(data)
            effect = self._execute(accounts, ix)
        except AppError as exc:
            name = ix.tag.name if ix is not None and isinstance(ix.tag, InstructionTag) else "request"
            logger.info("%s rejected: %s [%d] (%s)", name, exc.kind.value, exc.code, exc.message)
            return ProcessResult(ok=False, instruction=ix, error=exc.kind, code=exc.code, message=exc.message)
        return ProcessResult(ok=True, instruction=ix, effect=effect)

    def process_or_raise(self, accounts: Sequence[AccountMeta], data: Request) -> ProcessResult:
        """Like ``process()`` but raises the typed ``AppError`` on rejection."""
        ix = self._decode(data)
        effect = self._execute(accounts, ix)
        return ProcessResult(ok=True, instruction=ix, effect=effect)
