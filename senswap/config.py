"""
Program configuration.

`ProgramConfig` pins the identity of the AMM program and of the token program
it trusts, the fee schedule recorded into new pools, and whether the engine
re-checks global invariants after each operation.

`load_config(path)` reads the same fields from a YAML mapping:

    program_id: "0x..."
    token_program_id: "0x..."
    fee_schedule:
      fee_num: 2500000
      earn_num: 500000
      fee_den: 1000000000
    check_invariants: true

Every field is validated fail-closed; unknown keys are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .core.fees import DEFAULT_FEE_SCHEDULE, FeeSchedule
from .state.balances import PubKey, normalize_key


DEFAULT_PROGRAM_ID: PubKey = "0x" + "5e" * 32
DEFAULT_TOKEN_PROGRAM_ID: PubKey = "0x" + "70" * 32

_CONFIG_KEYS = frozenset({"program_id", "token_program_id", "fee_schedule", "check_invariants"})
_FEE_KEYS = frozenset({"fee_num", "earn_num", "fee_den"})


@dataclass(frozen=True)
class ProgramConfig:
    program_id: PubKey = DEFAULT_PROGRAM_ID
    token_program_id: PubKey = DEFAULT_TOKEN_PROGRAM_ID
    fee_schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE
    check_invariants: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "program_id", normalize_key(self.program_id, name="program_id"))
        object.__setattr__(
            self, "token_program_id", normalize_key(self.token_program_id, name="token_program_id")
        )
        if self.program_id == self.token_program_id:
            raise ValueError("program_id and token_program_id must differ")
        if not isinstance(self.fee_schedule, FeeSchedule):
            raise TypeError("fee_schedule must be a FeeSchedule")
        if not isinstance(self.check_invariants, bool):
            raise TypeError("check_invariants must be a bool")


def config_from_dict(obj: Mapping[str, Any]) -> ProgramConfig:
    if not isinstance(obj, Mapping):
        raise TypeError("config must be a mapping")
    unknown = set(obj) - _CONFIG_KEYS
    if unknown:
        raise ValueError(f"unknown config keys: {sorted(unknown)}")

    kwargs: dict[str, Any] = {}
    for name in ("program_id", "token_program_id"):
        if name in obj:
            if not isinstance(obj[name], str):
                raise TypeError(f"{name} must be a hex string")
            kwargs[name] = obj[name]
    if "check_invariants" in obj:
        kwargs["check_invariants"] = obj["check_invariants"]
    if "fee_schedule" in obj:
        raw = obj["fee_schedule"]
        if not isinstance(raw, Mapping):
            raise TypeError("fee_schedule must be a mapping")
        unknown = set(raw) - _FEE_KEYS
        if unknown:
            raise ValueError(f"unknown fee_schedule keys: {sorted(unknown)}")
        kwargs["fee_schedule"] = FeeSchedule(**dict(raw))
    return ProgramConfig(**kwargs)


def load_config(path: str | Path) -> ProgramConfig:
    """Load and validate a `ProgramConfig` from a YAML file."""
    path = Path(path)
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    if obj is None:
        return ProgramConfig()
    return config_from_dict(obj)
