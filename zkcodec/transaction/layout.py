"""
Field position tables for the EIP-712 (type 0x71) envelope.

The broadcast and signing layouts carry different fields in a different
order, so each has its own table.
"""

from __future__ import annotations

from enum import IntEnum


class BroadcastField(IntEnum):
    NONCE = 0
    MAX_PRIORITY_FEE_PER_GAS = 1
    MAX_FEE_PER_GAS = 2
    GAS_LIMIT = 3
    TO = 4
    VALUE = 5
    DATA = 6
    CHAIN_ID_1 = 7
    RESERVED_1 = 8
    RESERVED_2 = 9
    CHAIN_ID_2 = 10
    FROM = 11
    GAS_PER_PUBDATA = 12
    FACTORY_DEPS = 13
    CUSTOM_SIGNATURE = 14
    PAYMASTER_PARAMS = 15


class SigningField(IntEnum):
    NONCE = 0
    MAX_PRIORITY_FEE_PER_GAS = 1
    MAX_FEE_PER_GAS = 2
    GAS_LIMIT = 3
    TO = 4
    FROM = 5
    VALUE = 6
    DATA = 7
    CHAIN_ID = 8
    GAS_PRICE = 9
    ACCESS_LIST = 10
    META = 11


BROADCAST_FIELD_COUNT = len(BroadcastField)
SIGNING_FIELD_COUNT = len(SigningField)
