"""
EIP-712 (type 0x71) transaction envelope.

Three representations round-trip through this module:

- JSON-RPC keyed objects (``from_json`` / ``to_json``)
- the broadcast wire form ``0x71 || RLP(16 fields)`` (``encode_for_broadcast``
  / ``decode_rlp`` / ``from_raw``)
- the signing form ``0x71 || RLP(12 fields)`` (``encode_for_signing``)

Raw decoding reads both chain id slots (7 and 10) and keeps the second one;
the two are not compared. Slots 8 and 9 are read and discarded. The signature
triplet is always re-derived from slot 14 and is not kept as a custom
signature override. A metadata block holding nothing but defaults decodes
as ``meta=None``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Mapping, Optional

from eth_typing import Address

from zkcodec.common import rlp
from zkcodec.common.address import (
    address_from_rlp,
    destination_from_rlp,
    format_address,
    is_deployment,
    parse_address,
    parse_destination,
)
from zkcodec.common.config import (
    ADDRESS_BYTE_SIZE,
    CONTRACT_DEPLOYMENT_ADDRESS,
    EIP712_TX_TYPE,
    ChainConfig,
)
from zkcodec.common.crypto import keccak256, pack_signature, unmarshal_signature
from zkcodec.common.errors import (
    CodecError,
    FieldCountMismatch,
    MalformedAddress,
    UnexpectedVariantShape,
    WrongTypeDiscriminant,
)
from zkcodec.common.hexutil import (
    bytes_to_hex,
    decode_hex_bytes,
    decode_hex_int,
    decode_hex_int_if_present,
    hex_to_bytes,
    int_to_hex,
)
from zkcodec.common.types import AccessListEntry, access_list_from_json
from zkcodec.transaction.layout import (
    BROADCAST_FIELD_COUNT,
    SIGNING_FIELD_COUNT,
    BroadcastField,
    SigningField,
)
from zkcodec.transaction.meta import EIP712Meta, PaymasterParams, factory_deps_from_rlp

logger = logging.getLogger(__name__)

# Keys that must exist (null allowed) for a JSON object to be this envelope
_REQUIRED_JSON_KEYS = ("to", "nonce", "value", "chainId", "v", "r", "s")

# Decoded metadata that carries nothing beyond the wire defaults
_EMPTY_META = (EIP712Meta(), EIP712Meta(gas_per_pubdata=0))


def _access_list_or_empty(raw: Any) -> tuple[AccessListEntry, ...]:
    if raw is None:
        return ()
    try:
        return access_list_from_json(raw)
    except CodecError as e:
        logger.debug("Ignoring malformed accessList: %s", e)
        return ()


@dataclass(frozen=True)
class EIP712Envelope:
    """zkSync-style transaction carrying L2 metadata."""

    to: Address = CONTRACT_DEPLOYMENT_ADDRESS
    nonce: int = 0
    chain_id: int = 0
    value: int = 0
    data: bytes = b""

    # Signature
    v: int = 1
    r: int = 0
    s: int = 0

    # Fee fields
    gas_limit: int = 0
    max_priority_fee_per_gas: int = 0
    max_fee_per_gas: int = 0
    gas_price: int = 0

    access_list: tuple[AccessListEntry, ...] = ()

    # Sender hint, not covered by the signature
    from_address: Optional[Address] = None
    meta: Optional[EIP712Meta] = None

    tx_type: ClassVar[int] = EIP712_TX_TYPE

    def __post_init__(self) -> None:
        if self.to is None:
            object.__setattr__(self, "to", CONTRACT_DEPLOYMENT_ADDRESS)
        elif len(self.to) not in (0, ADDRESS_BYTE_SIZE):
            raise MalformedAddress(f"Destination must be empty or 20 bytes, got {len(self.to)}")
        if self.from_address is not None and len(self.from_address) != ADDRESS_BYTE_SIZE:
            raise MalformedAddress(f"Sender must be 20 bytes, got {len(self.from_address)}")

    # -- Signature --

    def signature_bytes(self) -> bytes:
        """Bytes placed in the signature slot: the custom override, else r || s || v."""
        if self.meta is not None and self.meta.custom_signature is not None:
            return self.meta.custom_signature
        return pack_signature(self.v, self.r, self.s)

    def with_signature(self, v: int, r: int, s: int) -> EIP712Envelope:
        return replace(self, v=v, r=r, s=s)

    # -- Broadcast layout --

    def to_broadcast_list(self) -> list:
        meta = self.meta or EIP712Meta()
        paymaster = meta.paymaster_params.to_rlp_list() if meta.paymaster_params else []
        chain_id = rlp.encode_uint(self.chain_id)
        fields: list = [b""] * BROADCAST_FIELD_COUNT
        fields[BroadcastField.NONCE] = rlp.encode_uint(self.nonce)
        fields[BroadcastField.MAX_PRIORITY_FEE_PER_GAS] = rlp.encode_uint(self.max_priority_fee_per_gas)
        fields[BroadcastField.MAX_FEE_PER_GAS] = rlp.encode_uint(self.max_fee_per_gas)
        fields[BroadcastField.GAS_LIMIT] = rlp.encode_uint(self.gas_limit)
        fields[BroadcastField.TO] = self.to
        fields[BroadcastField.VALUE] = rlp.encode_uint(self.value)
        fields[BroadcastField.DATA] = self.data
        fields[BroadcastField.CHAIN_ID_1] = chain_id
        fields[BroadcastField.RESERVED_1] = b""
        fields[BroadcastField.RESERVED_2] = b""
        fields[BroadcastField.CHAIN_ID_2] = chain_id
        fields[BroadcastField.FROM] = self.from_address or b""
        fields[BroadcastField.GAS_PER_PUBDATA] = rlp.encode_uint(meta.gas_per_pubdata or 0)
        fields[BroadcastField.FACTORY_DEPS] = list(meta.factory_deps)
        fields[BroadcastField.CUSTOM_SIGNATURE] = self.signature_bytes()
        fields[BroadcastField.PAYMASTER_PARAMS] = paymaster
        return fields

    def encode_for_broadcast(self) -> bytes:
        """Encode the signed envelope for eth_sendRawTransaction."""
        return bytes([self.tx_type]) + rlp.encode(self.to_broadcast_list())

    # -- Signing layout --

    def to_signing_list(self) -> list:
        fields: list = [b""] * SIGNING_FIELD_COUNT
        fields[SigningField.NONCE] = rlp.encode_uint(self.nonce)
        fields[SigningField.MAX_PRIORITY_FEE_PER_GAS] = rlp.encode_uint(self.max_priority_fee_per_gas)
        fields[SigningField.MAX_FEE_PER_GAS] = rlp.encode_uint(self.max_fee_per_gas)
        fields[SigningField.GAS_LIMIT] = rlp.encode_uint(self.gas_limit)
        fields[SigningField.TO] = self.to
        fields[SigningField.FROM] = self.from_address or b""
        fields[SigningField.VALUE] = rlp.encode_uint(self.value)
        fields[SigningField.DATA] = self.data
        fields[SigningField.CHAIN_ID] = rlp.encode_uint(self.chain_id)
        fields[SigningField.GAS_PRICE] = rlp.encode_uint(self.gas_price)
        fields[SigningField.ACCESS_LIST] = [e.to_rlp_list() for e in self.access_list]
        fields[SigningField.META] = self.meta.to_rlp_list() if self.meta is not None else []
        return fields

    def encode_for_signing(self) -> bytes:
        """Encode the unsigned payload (signature fields excluded)."""
        return bytes([self.tx_type]) + rlp.encode(self.to_signing_list())

    def signing_hash(self) -> bytes:
        return keccak256(self.encode_for_signing())

    # -- Raw decoding --

    @classmethod
    def decode_rlp(cls, data: bytes | bytearray | memoryview) -> EIP712Envelope:
        """Decode broadcast bytes, raising a CodecError on any malformed input."""
        view = memoryview(data)
        if len(view) == 0:
            raise WrongTypeDiscriminant(cls.tx_type, None)
        if view[0] != cls.tx_type:
            raise WrongTypeDiscriminant(cls.tx_type, view[0])

        decoded = rlp.decode(view[1:])
        if not isinstance(decoded, list):
            raise UnexpectedVariantShape("Envelope payload is not an RLP list")
        if len(decoded) != BROADCAST_FIELD_COUNT:
            raise FieldCountMismatch(BROADCAST_FIELD_COUNT, len(decoded))
        fields = rlp.Items(tuple(decoded))

        def scalar(position: BroadcastField) -> bytes:
            return rlp.require_scalar(fields.content_at(position), position.name.lower())

        chain_id = rlp.decode_uint(scalar(BroadcastField.CHAIN_ID_1))
        chain_id = rlp.decode_uint(scalar(BroadcastField.CHAIN_ID_2))
        fields.content_at(BroadcastField.RESERVED_1)
        fields.content_at(BroadcastField.RESERVED_2)

        # Slot 14 is exactly r || s || v; the triplet carries all of it
        signature = scalar(BroadcastField.CUSTOM_SIGNATURE)
        v, r, s = unmarshal_signature(signature)

        gas_per_pubdata = None
        pubdata_content = fields.content_at(BroadcastField.GAS_PER_PUBDATA)
        if isinstance(pubdata_content, rlp.Scalar):
            gas_per_pubdata = rlp.decode_uint(pubdata_content.data)

        meta: Optional[EIP712Meta] = EIP712Meta(
            gas_per_pubdata=gas_per_pubdata,
            custom_signature=None,
            paymaster_params=PaymasterParams.from_rlp(
                fields.content_at(BroadcastField.PAYMASTER_PARAMS)
            ),
            factory_deps=factory_deps_from_rlp(fields.content_at(BroadcastField.FACTORY_DEPS)),
        )
        if meta in _EMPTY_META:
            meta = None

        return cls(
            to=destination_from_rlp(fields.content_at(BroadcastField.TO)),
            nonce=rlp.decode_uint(scalar(BroadcastField.NONCE)),
            chain_id=chain_id,
            value=rlp.decode_uint(scalar(BroadcastField.VALUE)),
            data=scalar(BroadcastField.DATA),
            v=v,
            r=r,
            s=s,
            gas_limit=rlp.decode_uint(scalar(BroadcastField.GAS_LIMIT)),
            max_priority_fee_per_gas=rlp.decode_uint(scalar(BroadcastField.MAX_PRIORITY_FEE_PER_GAS)),
            max_fee_per_gas=rlp.decode_uint(scalar(BroadcastField.MAX_FEE_PER_GAS)),
            access_list=(),
            from_address=address_from_rlp(fields.content_at(BroadcastField.FROM)),
            meta=meta,
        )

    @classmethod
    def from_raw(cls, data: bytes | bytearray | memoryview) -> Optional[EIP712Envelope]:
        """Decode broadcast bytes, returning None instead of raising."""
        try:
            return cls.decode_rlp(data)
        except CodecError as e:
            logger.debug("Failed to decode EIP-712 envelope: %s", e)
            return None

    # -- JSON --

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> Optional[EIP712Envelope]:
        """Decode a JSON-RPC transaction object.

        Returns None when a required key is missing (the object is not this
        envelope type). Once every required key is present, malformed content
        raises a CodecError.
        """
        if not isinstance(obj, Mapping):
            return None
        if any(key not in obj for key in _REQUIRED_JSON_KEYS):
            return None
        if "data" not in obj and "input" not in obj:
            return None

        if obj.get("input") is not None:
            data = hex_to_bytes(obj["input"], "input")
        else:
            data = decode_hex_bytes(obj, "data")

        gas_key = "gas" if obj.get("gas") is not None else "gasLimit"

        from_address = None
        if obj.get("from") is not None:
            from_address = parse_address(obj["from"])

        meta = None
        if obj.get("eip712Meta") is not None:
            meta = EIP712Meta.from_json(obj["eip712Meta"])

        return cls(
            to=parse_destination(obj.get("to")),
            nonce=decode_hex_int(obj, "nonce"),
            chain_id=decode_hex_int_if_present(obj, "chainId", 0),
            value=decode_hex_int_if_present(obj, "value", 0),
            data=data,
            v=decode_hex_int(obj, "v"),
            r=decode_hex_int(obj, "r"),
            s=decode_hex_int(obj, "s"),
            gas_limit=decode_hex_int_if_present(obj, gas_key, 0),
            max_priority_fee_per_gas=decode_hex_int_if_present(obj, "maxPriorityFeePerGas", 0),
            max_fee_per_gas=decode_hex_int_if_present(obj, "maxFeePerGas", 0),
            gas_price=decode_hex_int_if_present(obj, "gasPrice", 0),
            access_list=_access_list_or_empty(obj.get("accessList")),
            from_address=from_address,
            meta=meta,
        )

    def to_json(self) -> dict:
        result: dict = {
            "type": int_to_hex(self.tx_type),
            "nonce": int_to_hex(self.nonce),
            "to": format_address(self.to),
            "value": int_to_hex(self.value),
            "chainId": int_to_hex(self.chain_id),
            "data": bytes_to_hex(self.data),
            "gas": int_to_hex(self.gas_limit),
            "gasPrice": int_to_hex(self.gas_price),
            "maxFeePerGas": int_to_hex(self.max_fee_per_gas),
            "maxPriorityFeePerGas": int_to_hex(self.max_priority_fee_per_gas),
            "accessList": [e.to_json() for e in self.access_list],
            "v": int_to_hex(self.v),
            "r": int_to_hex(self.r),
            "s": int_to_hex(self.s),
        }
        if self.from_address is not None:
            result["from"] = format_address(self.from_address)
        if self.meta is not None:
            result["eip712Meta"] = self.meta.to_json()
        return result

    def describe(self) -> str:
        to = "contract deployment" if is_deployment(self.to) else format_address(self.to)
        lines = [
            f"Type: 0x{self.tx_type:02x}",
            f"chainID: {self.chain_id}",
            f"Nonce: {self.nonce}",
            f"Gas limit: {self.gas_limit}",
            f"Max priority fee per gas: {self.max_priority_fee_per_gas}",
            f"Max fee per gas: {self.max_fee_per_gas}",
            f"To: {to}",
            f"Value: {self.value}",
            f"Data: {bytes_to_hex(self.data)}",
            f"Access List: {[e.to_json() for e in self.access_list]}",
            f"v: {self.v}",
            f"r: {self.r}",
            f"s: {self.s}",
        ]
        return "\n".join(lines)


def build_envelope(
    config: ChainConfig,
    to: Optional[Address] = None,
    nonce: int = 0,
    value: int = 0,
    data: bytes = b"",
    gas_limit: int = 0,
    max_fee_per_gas: int = 0,
    max_priority_fee_per_gas: int = 0,
    from_address: Optional[Address] = None,
    paymaster_params: Optional[PaymasterParams] = None,
    factory_deps: tuple[bytes, ...] = (),
    custom_signature: Optional[bytes] = None,
) -> EIP712Envelope:
    """Build an unsigned envelope for a network preset."""
    return EIP712Envelope(
        to=to if to is not None else CONTRACT_DEPLOYMENT_ADDRESS,
        nonce=nonce,
        chain_id=config.chain_id,
        value=value,
        data=data,
        gas_limit=gas_limit,
        max_fee_per_gas=max_fee_per_gas,
        max_priority_fee_per_gas=max_priority_fee_per_gas,
        from_address=from_address,
        meta=EIP712Meta(
            gas_per_pubdata=config.gas_per_pubdata,
            custom_signature=None,
            paymaster_params=paymaster_params,
            factory_deps=tuple(factory_deps),
        ),
    )
