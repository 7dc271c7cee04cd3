"""
Shared value records: access-list entries, event logs, logs bloom.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from eth_typing import Address

from zkcodec.common.address import format_address, parse_address
from zkcodec.common.crypto import keccak256
from zkcodec.common.errors import MalformedHex, MissingField, UnexpectedVariantShape
from zkcodec.common.hexutil import (
    bytes_to_hex,
    decode_hex_bytes,
    decode_hex_bytes_if_present,
    decode_hex_int_if_present,
    hex_to_bytes,
)

BLOOM_BYTE_SIZE = 256
STORAGE_KEY_BYTE_SIZE = 32


# ---------------------------------------------------------------------------
# Access list (EIP-2930)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AccessListEntry:
    address: Address
    storage_keys: tuple[bytes, ...] = ()  # 32-byte keys

    def to_rlp_list(self) -> list:
        return [self.address, list(self.storage_keys)]

    def to_json(self) -> dict:
        return {
            "address": format_address(self.address),
            "storageKeys": [bytes_to_hex(k) for k in self.storage_keys],
        }

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> AccessListEntry:
        if "address" not in obj:
            raise MissingField("address")
        raw_keys = obj.get("storageKeys", [])
        if not isinstance(raw_keys, list):
            raise UnexpectedVariantShape("storageKeys must be a list")
        keys = []
        for raw in raw_keys:
            key = hex_to_bytes(raw, "storageKeys")
            if len(key) != STORAGE_KEY_BYTE_SIZE:
                raise MalformedHex("storageKeys", raw)
            keys.append(key)
        return cls(address=parse_address(obj["address"]), storage_keys=tuple(keys))


def access_list_from_json(raw: Any) -> tuple[AccessListEntry, ...]:
    if not isinstance(raw, list):
        raise UnexpectedVariantShape("accessList must be a list")
    entries = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise UnexpectedVariantShape("accessList entry must be an object")
        entries.append(AccessListEntry.from_json(item))
    return tuple(entries)


# ---------------------------------------------------------------------------
# Event log
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Log:
    address: Address
    topics: tuple[bytes, ...] = ()
    data: bytes = b""
    block_number: Optional[int] = None
    block_hash: Optional[bytes] = None
    transaction_hash: Optional[bytes] = None
    transaction_index: Optional[int] = None
    log_index: Optional[int] = None
    removed: bool = False

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> Log:
        if not isinstance(obj, Mapping):
            raise UnexpectedVariantShape("log entry must be an object")
        if "address" not in obj:
            raise MissingField("address")
        raw_topics = obj.get("topics")
        if raw_topics is None:
            raise MissingField("topics")
        if not isinstance(raw_topics, list):
            raise UnexpectedVariantShape("topics must be a list")
        return cls(
            address=parse_address(obj["address"]),
            topics=tuple(hex_to_bytes(t, "topics") for t in raw_topics),
            data=decode_hex_bytes(obj, "data"),
            block_number=decode_hex_int_if_present(obj, "blockNumber", None),
            block_hash=decode_hex_bytes_if_present(obj, "blockHash", None),
            transaction_hash=decode_hex_bytes_if_present(obj, "transactionHash", None),
            transaction_index=decode_hex_int_if_present(obj, "transactionIndex", None),
            log_index=decode_hex_int_if_present(obj, "logIndex", None),
            removed=bool(obj.get("removed", False)),
        )


def logs_from_json(raw: Any) -> tuple[Log, ...]:
    if not isinstance(raw, list):
        raise UnexpectedVariantShape("logs must be a list")
    return tuple(Log.from_json(item) for item in raw)


# ---------------------------------------------------------------------------
# Logs bloom
# ---------------------------------------------------------------------------

def _bloom_bits(data: bytes) -> list[tuple[int, int]]:
    h = keccak256(data)
    positions = []
    for i in range(3):
        bit = (h[i * 2] << 8 | h[i * 2 + 1]) & 0x7FF
        positions.append((BLOOM_BYTE_SIZE - 1 - (bit // 8), bit % 8))
    return positions


@dataclass(frozen=True)
class LogsBloom:
    """2048-bit bloom filter over log addresses and topics."""
    value: bytes = field(default_factory=lambda: b"\x00" * BLOOM_BYTE_SIZE)

    @classmethod
    def from_hex(cls, value: Any) -> LogsBloom:
        raw = hex_to_bytes(value, "logsBloom")
        if len(raw) != BLOOM_BYTE_SIZE:
            raise MalformedHex("logsBloom", value)
        return cls(raw)

    @classmethod
    def from_logs(cls, logs: tuple[Log, ...] | list[Log]) -> LogsBloom:
        bloom = bytearray(BLOOM_BYTE_SIZE)
        for log in logs:
            for item in (log.address, *log.topics):
                for byte_idx, bit_idx in _bloom_bits(item):
                    bloom[byte_idx] |= 1 << bit_idx
        return cls(bytes(bloom))

    def contains(self, data: bytes) -> bool:
        """Check if data might be in the bloom filter."""
        return all(
            self.value[byte_idx] & (1 << bit_idx)
            for byte_idx, bit_idx in _bloom_bits(data)
        )
