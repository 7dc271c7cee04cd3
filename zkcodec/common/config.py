"""
Protocol constants and network presets for zkSync-style L2 chains.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_typing import Address


# ---------------------------------------------------------------------------
# Envelope constants
# ---------------------------------------------------------------------------

EIP712_TX_TYPE = 0x71

# Default L2 gas charged per byte of published data
DEFAULT_GAS_PER_PUBDATA_LIMIT = 50_000

# Destination of a contract-creation transaction. Encoded on the wire as a
# zero-length RLP string.
CONTRACT_DEPLOYMENT_ADDRESS = Address(b"")

ADDRESS_BYTE_SIZE = 20
SIGNATURE_BYTE_SIZE = 65


# ---------------------------------------------------------------------------
# Network presets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    chain_name: str
    gas_per_pubdata: int = DEFAULT_GAS_PER_PUBDATA_LIMIT


ERA_MAINNET = ChainConfig(chain_id=324, chain_name="zksync-era")
ERA_SEPOLIA = ChainConfig(chain_id=300, chain_name="zksync-era-sepolia")

CHAIN_CONFIGS: dict[int, ChainConfig] = {
    ERA_MAINNET.chain_id: ERA_MAINNET,
    ERA_SEPOLIA.chain_id: ERA_SEPOLIA,
}


def get_chain_config(chain_id: int) -> ChainConfig:
    """Return the preset for a known chain id, or a bare config with defaults."""
    config = CHAIN_CONFIGS.get(chain_id)
    if config is not None:
        return config
    return ChainConfig(chain_id=chain_id, chain_name=f"chain-{chain_id}")
