"""
Hex quantity / data helpers for JSON-RPC keyed objects.

Each field decoded from node JSON goes through one of two families:

- ``decode_hex_int`` / ``decode_hex_bytes`` fail with MissingField when the key
  is absent (or null) and with MalformedHex when the value is not hex.
- ``*_if_present`` variants return the caller's default when the key is absent
  or null, but still fail with MalformedHex on malformed content.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, TypeVar

from eth_utils import decode_hex, is_hexstr, remove_0x_prefix

from zkcodec.common.errors import MalformedHex, MissingField

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Scalar conversions
# ---------------------------------------------------------------------------

def hex_to_int(value: Any, key: Optional[str] = None) -> int:
    """Parse a hex quantity. Any digit count is accepted, "0x" is zero."""
    if not isinstance(value, str) or not is_hexstr(value):
        raise MalformedHex(key, value)
    digits = remove_0x_prefix(value)
    if not digits:
        return 0
    return int(digits, 16)


def hex_to_bytes(value: Any, key: Optional[str] = None) -> bytes:
    """Parse hex data. Odd digit counts and non-hex characters are rejected."""
    if not isinstance(value, str):
        raise MalformedHex(key, value)
    try:
        return decode_hex(value)
    except ValueError as exc:
        # binascii.Error (odd length, bad digit) and UnicodeEncodeError
        # are both ValueError subclasses
        raise MalformedHex(key, value) from exc


def int_to_hex(value: int) -> str:
    return hex(value)


def bytes_to_hex(value: bytes) -> str:
    return "0x" + value.hex()


# ---------------------------------------------------------------------------
# Keyed-container helpers
# ---------------------------------------------------------------------------

def _present(obj: Mapping[str, Any], key: str) -> bool:
    return obj.get(key) is not None


def decode_hex_int(obj: Mapping[str, Any], key: str) -> int:
    if not _present(obj, key):
        raise MissingField(key)
    return hex_to_int(obj[key], key)


def decode_hex_bytes(obj: Mapping[str, Any], key: str) -> bytes:
    if not _present(obj, key):
        raise MissingField(key)
    return hex_to_bytes(obj[key], key)


def decode_hex_int_if_present(obj: Mapping[str, Any], key: str, default: T = 0) -> int | T:
    if not _present(obj, key):
        return default
    return hex_to_int(obj[key], key)


def decode_hex_bytes_if_present(obj: Mapping[str, Any], key: str, default: T = b"") -> bytes | T:
    if not _present(obj, key):
        return default
    return hex_to_bytes(obj[key], key)


def decode_byte_array(value: Any, key: Optional[str] = None) -> bytes:
    """Decode bytes sent either as hex data or as a JSON array of byte numbers."""
    if isinstance(value, str):
        return hex_to_bytes(value, key)
    if isinstance(value, list) and all(
        isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 0xFF for b in value
    ):
        return bytes(value)
    raise MalformedHex(key, value)
