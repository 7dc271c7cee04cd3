"""
L2 metadata attached to EIP-712 envelopes: gas per pubdata, custom signature,
paymaster parameters and factory dependencies.

JSON decoding is permissive (every member optional). The RLP decoders for the
paymaster pair and factory deps follow the wire rules:

- paymaster: absent/scalar -> None; list -> elements classified by length
  (20 bytes is the paymaster, anything else is the input); the pair only
  materializes when both are present.
- factory deps: absent/scalar -> empty; list -> every element must be a
  byte string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from eth_typing import Address

from zkcodec.common import rlp
from zkcodec.common.address import format_address, parse_address
from zkcodec.common.config import ADDRESS_BYTE_SIZE
from zkcodec.common.errors import UnexpectedVariantShape
from zkcodec.common.hexutil import (
    bytes_to_hex,
    decode_byte_array,
    decode_hex_bytes_if_present,
    decode_hex_int_if_present,
    int_to_hex,
)
from zkcodec.common.rlp import Items, NoItem, RLPContent, Scalar


# ---------------------------------------------------------------------------
# Paymaster
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PaymasterParams:
    paymaster: Optional[Address] = None
    paymaster_input: Optional[bytes] = None

    @property
    def is_complete(self) -> bool:
        return self.paymaster is not None and self.paymaster_input is not None

    def to_json(self) -> dict:
        result: dict = {}
        if self.paymaster is not None:
            result["paymaster"] = format_address(self.paymaster)
        if self.paymaster_input is not None:
            result["paymasterInput"] = list(self.paymaster_input)
        return result

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> PaymasterParams:
        if not isinstance(obj, Mapping):
            raise UnexpectedVariantShape("paymasterParams must be an object")
        paymaster = None
        if obj.get("paymaster") is not None:
            paymaster = parse_address(obj["paymaster"])
        paymaster_input = None
        if obj.get("paymasterInput") is not None:
            paymaster_input = decode_byte_array(obj["paymasterInput"], "paymasterInput")
        return cls(paymaster=paymaster, paymaster_input=paymaster_input)

    def to_rlp_list(self) -> list:
        if not self.is_complete:
            return []
        return [self.paymaster, self.paymaster_input]

    @classmethod
    def from_rlp(cls, content: RLPContent) -> Optional[PaymasterParams]:
        if isinstance(content, (NoItem, Scalar)):
            return None
        if not isinstance(content, Items):
            raise UnexpectedVariantShape(f"paymasterParams: unknown RLP content {content!r}")

        paymaster: Optional[Address] = None
        paymaster_input: Optional[bytes] = None
        for index in range(len(content)):
            element = rlp.require_scalar(content.content_at(index), "paymasterParams")
            if len(element) == ADDRESS_BYTE_SIZE:
                if paymaster is not None:
                    raise UnexpectedVariantShape("paymasterParams: more than one paymaster address")
                paymaster = Address(element)
            else:
                if paymaster_input is not None:
                    raise UnexpectedVariantShape("paymasterParams: more than one paymaster input")
                paymaster_input = element

        if paymaster is None or paymaster_input is None:
            return None
        return cls(paymaster=paymaster, paymaster_input=paymaster_input)


# ---------------------------------------------------------------------------
# Factory deps
# ---------------------------------------------------------------------------

def factory_deps_from_rlp(content: RLPContent) -> tuple[bytes, ...]:
    if isinstance(content, (NoItem, Scalar)):
        return ()
    if not isinstance(content, Items):
        raise UnexpectedVariantShape(f"factoryDeps: unknown RLP content {content!r}")
    return tuple(
        rlp.require_scalar(content.content_at(index), "factoryDeps")
        for index in range(len(content))
    )


def _factory_deps_from_json(raw: Any) -> tuple[bytes, ...]:
    if not isinstance(raw, list):
        raise UnexpectedVariantShape("factoryDeps must be a list")
    return tuple(decode_byte_array(dep, "factoryDeps") for dep in raw)


# ---------------------------------------------------------------------------
# Metadata block
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EIP712Meta:
    gas_per_pubdata: Optional[int] = None
    custom_signature: Optional[bytes] = None
    paymaster_params: Optional[PaymasterParams] = None
    factory_deps: tuple[bytes, ...] = ()

    def to_json(self) -> dict:
        """Keyed form; absent members are omitted, never emitted as null."""
        result: dict = {}
        if self.gas_per_pubdata is not None:
            result["gasPerPubdata"] = int_to_hex(self.gas_per_pubdata)
        if self.custom_signature is not None:
            result["customSignature"] = bytes_to_hex(self.custom_signature)
        if self.paymaster_params is not None:
            result["paymasterParams"] = self.paymaster_params.to_json()
        if self.factory_deps:
            result["factoryDeps"] = [list(dep) for dep in self.factory_deps]
        return result

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> EIP712Meta:
        if not isinstance(obj, Mapping):
            raise UnexpectedVariantShape("eip712Meta must be an object")
        paymaster_params = None
        if obj.get("paymasterParams") is not None:
            paymaster_params = PaymasterParams.from_json(obj["paymasterParams"])
        factory_deps: tuple[bytes, ...] = ()
        if obj.get("factoryDeps") is not None:
            factory_deps = _factory_deps_from_json(obj["factoryDeps"])
        return cls(
            gas_per_pubdata=decode_hex_int_if_present(obj, "gasPerPubdata", None),
            custom_signature=decode_hex_bytes_if_present(obj, "customSignature", None),
            paymaster_params=paymaster_params,
            factory_deps=factory_deps,
        )

    def to_rlp_list(self) -> list:
        """Nested list used as the last slot of the signing layout."""
        paymaster = self.paymaster_params.to_rlp_list() if self.paymaster_params else []
        return [
            rlp.encode_uint(self.gas_per_pubdata or 0),
            self.custom_signature or b"",
            paymaster,
            list(self.factory_deps),
        ]
