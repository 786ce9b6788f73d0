"""
Authorization gate: derived treasurer authorities and signed request envelopes.

Two pieces:

- `derive_treasurer(program_id, pool)` derives the key that acts as a pool's
  treasurer authority. The gate supplies it to the handlers, which compare
  it with the treasurer account a request names.

- `SignerGate` turns a request plus per-key BLS signatures into the account
  list the engine consumes, with `is_signer` set only where a signature over
  the request verified.

Signing scheme:
    msg  = domain_sep(f"senswap_request:{chain_id}", v1)
           || canonical_json_bytes({"accounts": [...keys...], "data": hex(data)})
    sign SHA256(msg) with py_ecc `G2Basic`.

A signer's account key is `0x` + sha256(domain_sep("account_key", v1) || pubkey).
"""

from __future__ import annotations

import hashlib
import logging
from typing import Mapping, Sequence

from py_ecc.bls import G2Basic

from ..core.amm.types import AccountMeta, AuthorityGate
from ..state.balances import KEY_BYTES, PubKey, normalize_key
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, hex_to_bytes_fixed, sha256_hex

logger = logging.getLogger(__name__)

BLS_PUBKEY_BYTES = 48
BLS_SIGNATURE_BYTES = 96


def derive_treasurer(program_id: PubKey, pool: PubKey) -> PubKey:
    """Deterministic treasurer key of `pool` under `program_id`."""
    program_b = hex_to_bytes_fixed(normalize_key(program_id, name="program_id"), nbytes=KEY_BYTES, name="program_id")
    pool_b = hex_to_bytes_fixed(normalize_key(pool, name="pool"), nbytes=KEY_BYTES, name="pool")
    return sha256_hex(domain_sep_bytes("treasurer", version=1) + program_b + pool_b)


class DerivedAuthorityGate(AuthorityGate):
    def __init__(self, program_id: PubKey) -> None:
        self.program_id = normalize_key(program_id, name="program_id")

    def treasurer_of(self, pool: PubKey) -> PubKey:
        return derive_treasurer(self.program_id, pool)


def account_key_of(pubkey_hex: str) -> PubKey:
    """Account key controlled by a BLS public key."""
    pubkey_b = hex_to_bytes_fixed(_with_0x(pubkey_hex), nbytes=BLS_PUBKEY_BYTES, name="pubkey")
    return sha256_hex(domain_sep_bytes("account_key", version=1) + pubkey_b)


def _with_0x(value: str) -> str:
    if not isinstance(value, str):
        raise TypeError("hex value must be a str")
    return value if value.lower().startswith("0x") else "0x" + value


class SignerGate:
    """Verifies BLS signatures over a request and marks the signing accounts."""

    def __init__(self, chain_id: str) -> None:
        if not isinstance(chain_id, str) or not chain_id:
            raise ValueError("chain_id must be a non-empty str")
        self.chain_id = chain_id

    def signing_message(self, data: bytes, keys: Sequence[PubKey]) -> bytes:
        payload = {
            "accounts": [normalize_key(k) for k in keys],
            "data": bytes(data).hex(),
        }
        return domain_sep_bytes(f"senswap_request:{self.chain_id}", version=1) + canonical_json_bytes(payload)

    def signing_hash(self, data: bytes, keys: Sequence[PubKey]) -> bytes:
        return hashlib.sha256(self.signing_message(data, keys)).digest()

    def sign(self, data: bytes, keys: Sequence[PubKey], secret_key: int) -> str:
        """Sign a request (client-side helper)."""
        return "0x" + G2Basic.Sign(secret_key, self.signing_hash(data, keys)).hex()

    def _verify_one(self, key: PubKey, msg_hash: bytes, signature_hex: str, pubkey_hex: str) -> bool:
        try:
            if account_key_of(pubkey_hex) != key:
                logger.info("pubkey does not control account %s", key)
                return False
            pubkey_b = hex_to_bytes_fixed(_with_0x(pubkey_hex), nbytes=BLS_PUBKEY_BYTES, name="pubkey")
            sig_b = hex_to_bytes_fixed(_with_0x(signature_hex), nbytes=BLS_SIGNATURE_BYTES, name="signature")
        except (TypeError, ValueError) as exc:
            logger.info("malformed signature material for %s: %s", key, exc)
            return False
        ok = bool(G2Basic.Verify(pubkey_b, msg_hash, sig_b))
        if not ok:
            logger.info("invalid signature for %s", key)
        return ok

    def verify(
        self,
        accounts: Sequence[PubKey],
        data: bytes,
        signatures: Mapping[PubKey, str],
        pubkeys: Mapping[PubKey, str],
    ) -> list[AccountMeta]:
        """
        Build the engine's account list for a signed request.

        Args:
            accounts: Ordered account keys of the request
            data: Encoded request
            signatures: key -> BLS signature hex over the request
            pubkeys: key -> BLS public key hex controlling that key

        Returns:
            One `AccountMeta` per account; `is_signer` is True only for keys
            with a verified signature.
        """
        keys = [normalize_key(k) for k in accounts]
        msg_hash = self.signing_hash(data, keys)
        sigs = {normalize_key(k): v for k, v in signatures.items()}
        pks = {normalize_key(k): v for k, v in pubkeys.items()}

        verified: dict[PubKey, bool] = {}
        for key in keys:
            if key in verified:
                continue
            if key not in sigs or key not in pks:
                verified[key] = False
                continue
            verified[key] = self._verify_one(key, msg_hash, sigs[key], pks[key])
        return [AccountMeta(key=key, is_signer=verified[key]) for key in keys]
