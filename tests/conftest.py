"""Pytest configuration and shared fixtures for all tests."""

import pytest

from zkcodec.common.config import ERA_SEPOLIA
from zkcodec.transaction.envelope import build_envelope
from zkcodec.transaction.meta import PaymasterParams

from tests.fixtures.addresses import CONTRACT_ADDRESS, PAYMASTER_ADDRESS
from tests.fixtures.keys import ALICE_ADDRESS, ALICE_PRIVATE_KEY, BOB_ADDRESS, sign_hash


# =============================================================================
# Envelope Fixtures
# =============================================================================

@pytest.fixture
def unsigned_envelope():
    """ERC-20 style call from Alice to a contract with a paymaster."""
    return build_envelope(
        ERA_SEPOLIA,
        to=CONTRACT_ADDRESS,
        nonce=7,
        value=10**15,
        data=bytes.fromhex("a9059cbb") + b"\x00" * 64,
        gas_limit=250_000,
        max_fee_per_gas=250_000_000,
        max_priority_fee_per_gas=1_000_000,
        from_address=ALICE_ADDRESS,
        paymaster_params=PaymasterParams(
            paymaster=PAYMASTER_ADDRESS,
            paymaster_input=bytes.fromhex("8c5a3445") + b"\x00" * 32,
        ),
        factory_deps=(b"\x60\x80\x60\x40", b"\x00" * 32),
    )


@pytest.fixture
def signed_envelope(unsigned_envelope):
    """Envelope signed by Alice over its signing hash."""
    v, r, s = sign_hash(ALICE_PRIVATE_KEY, unsigned_envelope.signing_hash())
    return unsigned_envelope.with_signature(v, r, s)


@pytest.fixture
def envelope_json():
    """Transaction object as returned by eth_getTransactionByHash."""
    return {
        "hash": "0x" + "ab" * 32,
        "type": "0x71",
        "nonce": "0x7",
        "from": "0x" + ALICE_ADDRESS.hex(),
        "to": "0x" + BOB_ADDRESS.hex(),
        "value": "0x38d7ea4c68000",
        "chainId": "0x12c",
        "input": "0xa9059cbb",
        "gas": "0x3d090",
        "gasPrice": "0xee6b280",
        "maxFeePerGas": "0xee6b280",
        "maxPriorityFeePerGas": "0x0",
        "v": "0x1",
        "r": "0x" + "12" * 32,
        "s": "0x" + "34" * 32,
    }
