"""
Cryptographic utilities for envelope encoding.

- keccak256 hashing
- secp256k1 signature packing / unmarshalling (r || s || v, 65 bytes)
"""

from __future__ import annotations

from Crypto.Hash import keccak as _keccak_mod
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError

from zkcodec.common.config import SIGNATURE_BYTE_SIZE
from zkcodec.common.errors import SignatureUnmarshalFailure
from zkcodec.common.rlp import encode_fixed


def keccak256(data: bytes) -> bytes:
    """Compute Keccak-256 hash (NOT SHA3-256)."""
    h = _keccak_mod.new(digest_bits=256)
    h.update(data)
    return h.digest()


# ---------------------------------------------------------------------------
# secp256k1 signature bytes
# ---------------------------------------------------------------------------

def pack_signature(v: int, r: int, s: int) -> bytes:
    """Pack a signature triplet as r(32) || s(32) || v(1)."""
    try:
        return encode_fixed(r, 32) + encode_fixed(s, 32) + encode_fixed(v, 1)
    except OverflowError as exc:
        raise SignatureUnmarshalFailure(f"Signature component out of range: {exc}") from exc


def unmarshal_signature(data: bytes) -> tuple[int, int, int]:
    """Split 65 signature bytes into (v, r, s).

    v may be a recovery id (0/1) or carry the legacy 27 offset; r and s must
    be valid secp256k1 scalars.
    """
    if len(data) != SIGNATURE_BYTE_SIZE:
        raise SignatureUnmarshalFailure(
            f"Signature must be {SIGNATURE_BYTE_SIZE} bytes, got {len(data)}"
        )
    r = int.from_bytes(data[0:32], "big")
    s = int.from_bytes(data[32:64], "big")
    v = data[64]
    recovery_id = v - 27 if v >= 27 else v
    try:
        keys.Signature(vrs=(recovery_id, r, s))
    except (BadSignature, ValidationError) as exc:
        raise SignatureUnmarshalFailure(f"Invalid signature: {exc}") from exc
    return v, r, s
