"""
Transaction receipt decoding for eth_getTransactionReceipt responses.

Mandatory fields are decoded strictly. A fixed set of optional fields
(L1 batch info, contract address, L2->L1 logs, bloom, effective gas price)
is decoded best-effort: a malformed value there degrades to its default
instead of failing the whole receipt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, TypeVar

from eth_typing import Address

from zkcodec.common.address import parse_address
from zkcodec.common.errors import CodecError, MissingField, UnexpectedVariantShape
from zkcodec.common.hexutil import (
    decode_hex_bytes,
    decode_hex_int,
    decode_hex_int_if_present,
    hex_to_int,
)
from zkcodec.common.types import Log, LogsBloom, logs_from_json

logger = logging.getLogger(__name__)

T = TypeVar("T")


def best_effort(field_name: str, decode: Callable[[], T], default: T) -> T:
    """Run ``decode``; on a CodecError log it and return ``default``."""
    try:
        return decode()
    except CodecError as e:
        logger.debug("Ignoring malformed receipt field %s: %s", field_name, e)
        return default


class TxStatus(Enum):
    NOT_YET_PROCESSED = "notYetProcessed"
    OK = "ok"
    FAILED = "failed"


def _decode_status(obj: Mapping[str, Any]) -> TxStatus:
    raw = obj.get("status")
    if raw is None:
        return TxStatus.NOT_YET_PROCESSED
    try:
        status = hex_to_int(raw, "status")
    except CodecError:
        return TxStatus.FAILED
    return TxStatus.OK if status == 1 else TxStatus.FAILED


def _require_str(obj: Mapping[str, Any], key: str) -> str:
    value = obj.get(key)
    if value is None:
        raise MissingField(key)
    if not isinstance(value, str):
        raise UnexpectedVariantShape(f"{key} must be a string")
    return value


# ---------------------------------------------------------------------------
# L2 -> L1 log
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class L2ToL1Log:
    block_number: int
    block_hash: bytes
    l1_batch_number: int
    transaction_index: int
    shard_id: int
    is_service: bool
    sender: Address
    key: str
    value: str
    transaction_hash: str
    log_index: int

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> L2ToL1Log:
        if not isinstance(obj, Mapping):
            raise UnexpectedVariantShape("l2ToL1Logs entry must be an object")
        if obj.get("isService") is None:
            raise MissingField("isService")
        if not isinstance(obj["isService"], bool):
            raise UnexpectedVariantShape("isService must be a boolean")
        if obj.get("sender") is None:
            raise MissingField("sender")
        return cls(
            block_number=decode_hex_int(obj, "blockNumber"),
            block_hash=decode_hex_bytes(obj, "blockHash"),
            l1_batch_number=decode_hex_int(obj, "l1BatchNumber"),
            transaction_index=decode_hex_int(obj, "transactionIndex"),
            shard_id=decode_hex_int(obj, "shardId"),
            is_service=obj["isService"],
            sender=parse_address(obj["sender"]),
            key=_require_str(obj, "key"),
            value=_require_str(obj, "value"),
            transaction_hash=_require_str(obj, "transactionHash"),
            log_index=decode_hex_int(obj, "logIndex"),
        )


def _l2_to_l1_logs_from_json(raw: Any) -> Optional[tuple[L2ToL1Log, ...]]:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise UnexpectedVariantShape("l2ToL1Logs must be a list")
    return tuple(L2ToL1Log.from_json(item) for item in raw)


def _contract_address_from_json(raw: Any) -> Optional[Address]:
    if raw is None:
        return None
    return parse_address(raw)


def _logs_bloom_from_json(raw: Any) -> Optional[LogsBloom]:
    if raw is None:
        return None
    return LogsBloom.from_hex(raw)


# ---------------------------------------------------------------------------
# Receipt
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TransactionReceipt:
    transaction_hash: bytes
    block_hash: bytes
    block_number: int
    transaction_index: int
    cumulative_gas_used: int
    gas_used: int
    effective_gas_price: int = 0
    l1_batch_number: Optional[int] = None
    l1_batch_tx_index: Optional[int] = None
    contract_address: Optional[Address] = None
    logs: tuple[Log, ...] = ()
    l2_to_l1_logs: Optional[tuple[L2ToL1Log, ...]] = None
    status: TxStatus = TxStatus.NOT_YET_PROCESSED
    logs_bloom: Optional[LogsBloom] = None

    @property
    def succeeded(self) -> bool:
        return self.status is TxStatus.OK

    @property
    def is_pending(self) -> bool:
        return self.status is TxStatus.NOT_YET_PROCESSED

    @classmethod
    def not_processed(cls, transaction_hash: bytes) -> TransactionReceipt:
        """Placeholder receipt for a transaction the node has not executed yet."""
        return cls(
            transaction_hash=transaction_hash,
            block_hash=b"",
            block_number=0,
            transaction_index=0,
            cumulative_gas_used=0,
            gas_used=0,
            effective_gas_price=0,
            l1_batch_number=0,
            l1_batch_tx_index=0,
            contract_address=None,
            logs=(),
            l2_to_l1_logs=None,
            status=TxStatus.NOT_YET_PROCESSED,
            logs_bloom=None,
        )

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> TransactionReceipt:
        """Decode a receipt object, raising CodecError if a mandatory field is bad."""
        if not isinstance(obj, Mapping):
            raise UnexpectedVariantShape("receipt must be an object")
        if obj.get("logs") is None:
            raise MissingField("logs")

        return cls(
            transaction_hash=decode_hex_bytes(obj, "transactionHash"),
            block_hash=decode_hex_bytes(obj, "blockHash"),
            block_number=decode_hex_int(obj, "blockNumber"),
            transaction_index=decode_hex_int(obj, "transactionIndex"),
            cumulative_gas_used=decode_hex_int(obj, "cumulativeGasUsed"),
            gas_used=decode_hex_int(obj, "gasUsed"),
            effective_gas_price=best_effort(
                "effectiveGasPrice",
                lambda: decode_hex_int(obj, "effectiveGasPrice"),
                0,
            ),
            l1_batch_number=best_effort(
                "l1BatchNumber",
                lambda: decode_hex_int_if_present(obj, "l1BatchNumber", None),
                None,
            ),
            l1_batch_tx_index=best_effort(
                "l1BatchTxIndex",
                lambda: decode_hex_int_if_present(obj, "l1BatchTxIndex", None),
                None,
            ),
            contract_address=best_effort(
                "contractAddress",
                lambda: _contract_address_from_json(obj.get("contractAddress")),
                None,
            ),
            logs=logs_from_json(obj["logs"]),
            l2_to_l1_logs=best_effort(
                "l2ToL1Logs",
                lambda: _l2_to_l1_logs_from_json(obj.get("l2ToL1Logs")),
                None,
            ),
            status=_decode_status(obj),
            logs_bloom=best_effort(
                "logsBloom",
                lambda: _logs_bloom_from_json(obj.get("logsBloom")),
                None,
            ),
        )
