"""
RLP content model on top of pyrlp.

pyrlp decodes a byte string into nested ``bytes``/``list`` values. Envelope
fields are consumed through a three-way tagged union instead of ad hoc
isinstance checks:

- NoItem: the slot is missing altogether
- Scalar: a byte string (possibly zero-length)
- Items: a nested list
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import rlp as pyrlp

from zkcodec.common.errors import RLPDecodingError, UnexpectedVariantShape

# RLP item: either raw bytes or a list of RLP items
RLPItem = Union[bytes, list["RLPItem"]]


# ---------------------------------------------------------------------------
# Tagged content
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NoItem:
    pass


@dataclass(frozen=True)
class Scalar:
    data: bytes


@dataclass(frozen=True)
class Items:
    elements: tuple[RLPItem, ...]

    def __len__(self) -> int:
        return len(self.elements)

    def content_at(self, index: int) -> RLPContent:
        return content_at(self.elements, index)


RLPContent = Union[NoItem, Scalar, Items]


def classify(item: RLPItem | None) -> RLPContent:
    if item is None:
        return NoItem()
    if isinstance(item, (bytes, bytearray)):
        return Scalar(bytes(item))
    if isinstance(item, (list, tuple)):
        return Items(tuple(item))
    raise UnexpectedVariantShape(f"Not an RLP item: {type(item).__name__}")


def content_at(items: Sequence[RLPItem], index: int) -> RLPContent:
    """Classify ``items[index]``; an index past the end is NoItem."""
    if index >= len(items):
        return NoItem()
    return classify(items[index])


def require_scalar(content: RLPContent, name: str) -> bytes:
    if isinstance(content, Scalar):
        return content.data
    if isinstance(content, NoItem):
        raise UnexpectedVariantShape(f"{name}: expected a byte string, slot is empty")
    if isinstance(content, Items):
        raise UnexpectedVariantShape(f"{name}: expected a byte string, got a list")
    raise UnexpectedVariantShape(f"{name}: unknown RLP content {content!r}")


# ---------------------------------------------------------------------------
# Encoding / decoding
# ---------------------------------------------------------------------------

def encode(item: RLPItem) -> bytes:
    """Encode bytes / nested lists of bytes. Integers must go through encode_uint."""
    return pyrlp.encode(item)


def decode(data: bytes | bytearray | memoryview) -> RLPItem:
    try:
        return pyrlp.decode(bytes(data), strict=True)
    except pyrlp.DecodingError as exc:
        raise RLPDecodingError(str(exc)) from exc


def decode_list(data: bytes | bytearray | memoryview) -> list[RLPItem]:
    """Decode RLP bytes, asserting the top-level item is a list."""
    result = decode(data)
    if not isinstance(result, list):
        raise UnexpectedVariantShape("Expected RLP list, got bytes")
    return result


# ---------------------------------------------------------------------------
# Helpers for typed encoding/decoding
# ---------------------------------------------------------------------------

def encode_uint(value: int) -> bytes:
    """Encode unsigned integer as RLP bytes (without leading zeros)."""
    if value < 0:
        raise ValueError("RLP cannot encode negative integers")
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def decode_uint(data: bytes) -> int:
    """Decode RLP bytes to unsigned integer.

    Leading zeros are tolerated for compatibility with other encoders.
    """
    if len(data) == 0:
        return 0
    return int.from_bytes(data, "big")


def encode_fixed(value: int, length: int) -> bytes:
    """Encode integer as fixed-length big-endian bytes (e.g., 32 for signature scalars)."""
    return value.to_bytes(length, "big")
