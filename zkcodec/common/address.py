"""
Address parsing and formatting.

Addresses are carried as canonical 20-byte values (eth_typing.Address); the
contract-deployment destination is the empty address.
"""

from __future__ import annotations

from typing import Any, Optional

from eth_typing import Address, ChecksumAddress
from eth_utils import (
    is_checksum_address,
    is_checksum_formatted_address,
    is_hex_address,
    to_canonical_address,
    to_checksum_address,
)

from zkcodec.common.config import ADDRESS_BYTE_SIZE, CONTRACT_DEPLOYMENT_ADDRESS
from zkcodec.common.errors import MalformedAddress
from zkcodec.common.rlp import Items, NoItem, RLPContent, Scalar

_DEPLOYMENT_SPELLINGS = (None, "0x", "0x0")


def parse_address(value: Any) -> Address:
    """Parse a hex address string, enforcing the EIP-55 checksum when mixed-case."""
    if not is_hex_address(value):
        raise MalformedAddress(f"Not a 20-byte hex address: {value!r}")
    if is_checksum_formatted_address(value) and not is_checksum_address(value):
        raise MalformedAddress(f"Invalid address checksum: {value}")
    return to_canonical_address(value)


def parse_destination(value: Any) -> Address:
    """Parse a ``to`` value; null, "0x" and "0x0" mean contract deployment."""
    if value in _DEPLOYMENT_SPELLINGS:
        return CONTRACT_DEPLOYMENT_ADDRESS
    return parse_address(value)


def format_address(address: bytes) -> Optional[ChecksumAddress]:
    if len(address) == 0:
        return None
    return to_checksum_address(address)


def is_deployment(address: bytes) -> bool:
    return len(address) == 0


def address_from_rlp(content: RLPContent) -> Optional[Address]:
    """Decode an address slot: absent/empty -> None, 20 bytes -> address."""
    if isinstance(content, NoItem):
        return None
    if isinstance(content, Scalar):
        if len(content.data) == 0:
            return None
        if len(content.data) == ADDRESS_BYTE_SIZE:
            return Address(content.data)
        raise MalformedAddress(
            f"Address must be {ADDRESS_BYTE_SIZE} bytes, got {len(content.data)}"
        )
    if isinstance(content, Items):
        raise MalformedAddress("Address slot holds a list")
    raise MalformedAddress(f"Unknown RLP content {content!r}")


def destination_from_rlp(content: RLPContent) -> Address:
    address = address_from_rlp(content)
    return CONTRACT_DEPLOYMENT_ADDRESS if address is None else address
