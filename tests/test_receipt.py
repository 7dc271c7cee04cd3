"""Tests for transaction receipt and L2->L1 log decoding."""

import pytest

from zkcodec.common.errors import MalformedHex, MissingField, UnexpectedVariantShape
from zkcodec.common.types import LogsBloom
from zkcodec.rpc.receipt import L2ToL1Log, TransactionReceipt, TxStatus, best_effort

from tests.fixtures.addresses import CHECKSUMMED, CHECKSUMMED_BYTES
from tests.fixtures.receipts import BLOCK_HASH, L2_TO_L1_LOG, LOG, TX_HASH, receipt


class TestReceiptDecode:
    def test_full_receipt(self):
        result = TransactionReceipt.from_json(receipt())
        assert result.transaction_hash == bytes.fromhex(TX_HASH[2:])
        assert result.block_hash == bytes.fromhex(BLOCK_HASH[2:])
        assert result.block_number == 16
        assert result.transaction_index == 0
        assert result.cumulative_gas_used == 0
        assert result.gas_used == 120_000
        assert result.effective_gas_price == 25_000_000
        assert result.l1_batch_number == 5
        assert result.l1_batch_tx_index == 2
        assert result.contract_address is None
        assert len(result.logs) == 1
        assert len(result.l2_to_l1_logs) == 1
        assert result.status is TxStatus.OK
        assert result.logs_bloom == LogsBloom()
        assert result.succeeded
        assert not result.is_pending

    @pytest.mark.parametrize(
        "key",
        ["blockNumber", "blockHash", "transactionIndex", "transactionHash",
         "cumulativeGasUsed", "gasUsed", "logs"],
    )
    def test_mandatory_field_missing(self, key):
        with pytest.raises(MissingField):
            TransactionReceipt.from_json(receipt(**{key: ...}))

    def test_mandatory_field_malformed(self):
        with pytest.raises(MalformedHex):
            TransactionReceipt.from_json(receipt(gasUsed="gas"))

    def test_malformed_log_is_fatal(self):
        with pytest.raises(MissingField):
            TransactionReceipt.from_json(receipt(logs=[{"address": CHECKSUMMED}]))

    def test_logs_not_a_list(self):
        with pytest.raises(UnexpectedVariantShape):
            TransactionReceipt.from_json(receipt(logs="0x"))

    def test_not_an_object(self):
        with pytest.raises(UnexpectedVariantShape):
            TransactionReceipt.from_json([])

    def test_minimal_receipt(self):
        result = TransactionReceipt.from_json(
            receipt(
                l1BatchNumber=...,
                l1BatchTxIndex=...,
                contractAddress=...,
                effectiveGasPrice=...,
                l2ToL1Logs=...,
                logsBloom=...,
                status=...,
            )
        )
        assert result.l1_batch_number is None
        assert result.l1_batch_tx_index is None
        assert result.contract_address is None
        assert result.effective_gas_price == 0
        assert result.l2_to_l1_logs is None
        assert result.logs_bloom is None
        assert result.status is TxStatus.NOT_YET_PROCESSED


class TestReceiptStatus:
    def test_missing(self):
        assert TransactionReceipt.from_json(receipt(status=...)).status is TxStatus.NOT_YET_PROCESSED

    def test_null(self):
        assert TransactionReceipt.from_json(receipt(status=None)).status is TxStatus.NOT_YET_PROCESSED

    def test_success(self):
        assert TransactionReceipt.from_json(receipt(status="0x1")).status is TxStatus.OK

    @pytest.mark.parametrize("status", ["0x0", "0x2", "0x01ff", "failed"])
    def test_failure(self, status):
        assert TransactionReceipt.from_json(receipt(status=status)).status is TxStatus.FAILED


class TestReceiptTolerance:
    def test_contract_address(self):
        result = TransactionReceipt.from_json(receipt(contractAddress=CHECKSUMMED))
        assert result.contract_address == CHECKSUMMED_BYTES

    @pytest.mark.parametrize("value", ["0x1234", "0x", 42])
    def test_malformed_contract_address(self, value):
        assert TransactionReceipt.from_json(receipt(contractAddress=value)).contract_address is None

    def test_malformed_effective_gas_price(self):
        assert TransactionReceipt.from_json(receipt(effectiveGasPrice="xyz")).effective_gas_price == 0

    def test_malformed_batch_fields(self):
        result = TransactionReceipt.from_json(receipt(l1BatchNumber="batch", l1BatchTxIndex=7))
        assert result.l1_batch_number is None
        assert result.l1_batch_tx_index is None

    def test_malformed_bloom(self):
        assert TransactionReceipt.from_json(receipt(logsBloom="0x00")).logs_bloom is None

    def test_incomplete_l2_to_l1_log(self):
        log = dict(L2_TO_L1_LOG)
        del log["shardId"]
        assert TransactionReceipt.from_json(receipt(l2ToL1Logs=[log])).l2_to_l1_logs is None

    def test_l2_to_l1_logs_not_a_list(self):
        assert TransactionReceipt.from_json(receipt(l2ToL1Logs={})).l2_to_l1_logs is None

    def test_empty_l2_to_l1_logs(self):
        assert TransactionReceipt.from_json(receipt(l2ToL1Logs=[])).l2_to_l1_logs == ()


class TestNotProcessed:
    def test_placeholder(self):
        tx_hash = bytes.fromhex(TX_HASH[2:])
        result = TransactionReceipt.not_processed(tx_hash)
        assert result.transaction_hash == tx_hash
        assert result.status is TxStatus.NOT_YET_PROCESSED
        assert result.block_number == 0
        assert result.gas_used == 0
        assert result.logs == ()
        assert result.contract_address is None
        assert result.is_pending


class TestL2ToL1Log:
    def test_decode(self):
        log = L2ToL1Log.from_json(L2_TO_L1_LOG)
        assert log.block_number == 16
        assert log.l1_batch_number == 5
        assert log.shard_id == 0
        assert log.is_service is True
        assert log.sender == bytes.fromhex("00" * 18 + "8008")
        assert log.key == L2_TO_L1_LOG["key"]
        assert log.value == L2_TO_L1_LOG["value"]
        assert log.transaction_hash == TX_HASH
        assert log.log_index == 0

    @pytest.mark.parametrize("key", sorted(L2_TO_L1_LOG))
    def test_every_field_required(self, key):
        log = dict(L2_TO_L1_LOG)
        del log[key]
        with pytest.raises(MissingField):
            L2ToL1Log.from_json(log)

    def test_is_service_must_be_bool(self):
        log = dict(L2_TO_L1_LOG, isService="true")
        with pytest.raises(UnexpectedVariantShape):
            L2ToL1Log.from_json(log)

    def test_key_must_be_string(self):
        log = dict(L2_TO_L1_LOG, key=1)
        with pytest.raises(UnexpectedVariantShape):
            L2ToL1Log.from_json(log)


class TestBestEffort:
    def test_value(self):
        assert best_effort("x", lambda: 5, 0) == 5

    def test_codec_error_defaults(self):
        def fail():
            raise MalformedHex("x", "zz")

        assert best_effort("x", fail, None) is None

    def test_other_errors_propagate(self):
        def fail():
            raise KeyError("x")

        with pytest.raises(KeyError):
            best_effort("x", fail, None)


class TestReceiptLogs:
    def test_log_fields(self):
        log = TransactionReceipt.from_json(receipt()).logs[0]
        assert log.address == bytes.fromhex("00" * 18 + "800a")
        assert len(log.topics) == 2
        assert log.data == b"\x00" * 31 + b"\x2a"
        assert log.block_number == 16
        assert log.log_index == 3
        assert log.removed is False

    def test_log_without_block_context(self):
        log = {"address": LOG["address"], "topics": [], "data": "0x"}
        result = TransactionReceipt.from_json(receipt(logs=[log])).logs[0]
        assert result.block_number is None
        assert result.topics == ()
