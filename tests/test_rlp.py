"""Tests for the RLP content model."""

import pytest
import rlp as pyrlp

from zkcodec.common.errors import RLPDecodingError, UnexpectedVariantShape
from zkcodec.common.rlp import (
    Items,
    NoItem,
    Scalar,
    classify,
    content_at,
    decode,
    decode_list,
    decode_uint,
    encode,
    encode_fixed,
    encode_uint,
    require_scalar,
)


class TestClassify:
    def test_none_is_no_item(self):
        assert classify(None) == NoItem()

    def test_bytes_is_scalar(self):
        assert classify(b"dog") == Scalar(b"dog")

    def test_empty_bytes_is_scalar(self):
        # Zero-length strings are still scalars; consumers decide what they mean
        assert classify(b"") == Scalar(b"")

    def test_list_is_items(self):
        content = classify([b"a", [b"b"]])
        assert isinstance(content, Items)
        assert len(content) == 2
        assert content.content_at(1) == Items((b"b",))

    def test_unknown_type(self):
        with pytest.raises(UnexpectedVariantShape):
            classify(42)

    def test_content_past_end(self):
        assert content_at([b"a"], 1) == NoItem()
        assert content_at([b"a"], 0) == Scalar(b"a")


class TestRequireScalar:
    def test_scalar(self):
        assert require_scalar(Scalar(b"\x01"), "nonce") == b"\x01"

    def test_list_rejected(self):
        with pytest.raises(UnexpectedVariantShape, match="nonce"):
            require_scalar(Items((b"",)), "nonce")

    def test_missing_rejected(self):
        with pytest.raises(UnexpectedVariantShape):
            require_scalar(NoItem(), "nonce")


class TestEncodeDecode:
    def test_matches_pyrlp(self):
        item = [b"cat", [b"dog", b""], b"\x80"]
        assert encode(item) == pyrlp.encode(item)

    def test_nested_list(self):
        assert encode([[], [[]], [[], [[]]]]) == b"\xc7\xc0\xc1\xc0\xc3\xc0\xc1\xc0"

    def test_decode_memoryview(self):
        data = b"\x00" + encode([b"cat", b"dog"])
        assert decode(memoryview(data)[1:]) == [b"cat", b"dog"]

    def test_decode_list_rejects_bytes(self):
        with pytest.raises(UnexpectedVariantShape):
            decode_list(encode(b"dog"))

    def test_truncated_input(self):
        with pytest.raises(RLPDecodingError):
            decode(b"\x83do")

    def test_trailing_bytes(self):
        with pytest.raises(RLPDecodingError):
            decode(encode(b"dog") + b"\x00")


class TestUint:
    def test_zero_is_empty(self):
        assert encode_uint(0) == b""
        assert decode_uint(b"") == 0

    def test_values(self):
        assert encode_uint(1) == b"\x01"
        assert encode_uint(1024) == b"\x04\x00"
        assert decode_uint(b"\x04\x00") == 1024

    def test_negative(self):
        with pytest.raises(ValueError):
            encode_uint(-1)

    def test_leading_zeros_tolerated(self):
        assert decode_uint(b"\x00\x01") == 1

    def test_fixed(self):
        assert encode_fixed(1, 32) == b"\x00" * 31 + b"\x01"
