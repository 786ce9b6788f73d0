"""
Canonical byte encodings.

Everything hashed or signed in this package goes through these helpers: the
state root, derived treasurer keys, signer account keys and signed request
envelopes. Changing any output here changes those formats.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any


_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


def _check_json_value(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical JSON")
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"canonical JSON keys must be str, got {type(k).__name__}")
            _check_json_value(v)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_json_value(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    UTF-8 JSON with sorted keys and no whitespace.

    Floats and non-str keys are rejected so one logical value has exactly one
    encoding; integers of any size are kept exact.
    """
    _check_json_value(value)
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """`senswap:<label>:v<version>` followed by a NUL terminator."""
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label or not label.isascii():
        raise ValueError("label must be ASCII without NUL")
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise ValueError("version must be a positive int")
    return f"senswap:{label}:v{version}".encode("ascii") + b"\x00"


def encode_uvarint(value: int) -> bytes:
    """Unsigned LEB128."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"uvarint must be a non-negative int, got {value!r}")
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_bytes(value: bytes) -> bytes:
    """Length-prefixed (uvarint) byte string."""
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError("value must be bytes")
    return encode_uvarint(len(value)) + bytes(value)


def _hex_body(hex_str: str, *, nbytes: int, name: str) -> str:
    body = hex_str[2:] if hex_str[:2].lower() == "0x" else hex_str
    if len(body) != 2 * nbytes:
        raise ValueError(f"{name} must be {nbytes} bytes (hex length {2 * nbytes})")
    if not _HEX_RE.fullmatch(body):
        raise ValueError(f"{name} must be valid hex")
    return body.lower()


def hex_to_bytes_fixed(hex_str: str, *, nbytes: int, name: str) -> bytes:
    """Decode a 0x-prefixed hex string of exactly `nbytes` bytes."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    if not hex_str.startswith("0x"):
        raise ValueError(f"{name} must be a 0x-prefixed {nbytes}-byte hex string")
    return bytes.fromhex(_hex_body(hex_str, nbytes=nbytes, name=name))


def canonical_hex_fixed_allow_0x(hex_str: str, *, nbytes: int, name: str) -> str:
    """Lowercase, 0x-prefixed form of a fixed-size hex string (prefix optional on input)."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    return "0x" + _hex_body(hex_str.strip(), nbytes=nbytes, name=name)
