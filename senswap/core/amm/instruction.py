"""
Wire codec for AMM requests.

A request is one tag byte followed by the operation's little-endian payload:

    tag  operation            payload
    0    InitializePool       reserve u64, lpt u128
    1    InitializeLPT        -
    2    AddLiquidity         reserve u64
    3    RemoveLiquidity      lpt u128
    4    Swap                 amount u64
    5    Transfer             lpt u128
    6    Vote                 -
    7    CloseLPT             -
    8    ClosePool            -
    9    InitializeNetwork    -

Bytes past the required payload are ignored.
"""

from __future__ import annotations

from typing import Tuple

from ...errors import InvalidInstructionError
from ...kernels.python.checked_math import U64, U128, is_uint
from .types import Instruction, InstructionTag


# Payload layout per tag: ordered (field, width in bits).
_LAYOUT: dict[InstructionTag, Tuple[Tuple[str, int], ...]] = {
    InstructionTag.INITIALIZE_POOL: (("reserve", U64), ("lpt", U128)),
    InstructionTag.INITIALIZE_LPT: (),
    InstructionTag.ADD_LIQUIDITY: (("reserve", U64),),
    InstructionTag.REMOVE_LIQUIDITY: (("lpt", U128),),
    InstructionTag.SWAP: (("amount", U64),),
    InstructionTag.TRANSFER: (("lpt", U128),),
    InstructionTag.VOTE: (),
    InstructionTag.CLOSE_LPT: (),
    InstructionTag.CLOSE_POOL: (),
    InstructionTag.INITIALIZE_NETWORK: (),
}


def unpack(data: bytes) -> Instruction:
    """
    Decode a request.

    Raises:
        InvalidInstructionError: Empty buffer, unknown tag, or short payload
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidInstructionError("instruction data must be bytes")
    buf = bytes(data)
    if not buf:
        raise InvalidInstructionError("empty instruction data")
    try:
        tag = InstructionTag(buf[0])
    except ValueError:
        raise InvalidInstructionError(f"unknown instruction tag: {buf[0]}") from None

    fields: dict[str, int] = {}
    offset = 1
    for name, bits in _LAYOUT[tag]:
        width = bits // 8
        chunk = buf[offset : offset + width]
        if len(chunk) != width:
            raise InvalidInstructionError(f"{tag.name}: payload too short for {name}")
        fields[name] = int.from_bytes(chunk, "little")
        offset += width
    return Instruction(tag=tag, **fields)


def pack(ix: Instruction) -> bytes:
    """Encode a request; the exact inverse of `unpack` for in-range fields."""
    tag = InstructionTag(ix.tag)
    out = bytearray([int(tag)])
    for name, bits in _LAYOUT[tag]:
        value = getattr(ix, name)
        if not is_uint(value, bits):
            raise ValueError(f"{name} does not fit in u{bits}: {value!r}")
        out += value.to_bytes(bits // 8, "little")
    return bytes(out)
