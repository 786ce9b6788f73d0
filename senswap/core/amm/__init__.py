"""`amm`: operation handlers and the request engine.

- deterministic, integer-only transitions over an `AccountStore`,
- immutable records (frozen dataclasses),
- all-or-nothing requests with a global invariant check.

Public API:
- `Processor(store, tokens, gate, config).process(accounts, data) -> ProcessResult`
- `Processor.process_or_raise(accounts, data) -> ProcessResult` (raises on rejection)
- `pack(instruction) -> bytes` / `unpack(data) -> Instruction`
"""

from .engine import Processor
from .instruction import pack, unpack
from .invariants import INVARIANT_REGISTRY, check_all
from .types import (
    AccountMeta,
    AuthorityGate,
    Effect,
    Event,
    Instruction,
    InstructionTag,
    ProcessResult,
    TransferService,
)

__all__ = [
    "Processor",
    "pack",
    "unpack",
    "INVARIANT_REGISTRY",
    "check_all",
    "AccountMeta",
    "AuthorityGate",
    "Effect",
    "Event",
    "Instruction",
    "InstructionTag",
    "ProcessResult",
    "TransferService",
]
