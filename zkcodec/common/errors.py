"""
Codec error taxonomy.

Every decode path raises one of these; callers that only need an absence
signal catch CodecError and treat it as "not this envelope".
"""

from __future__ import annotations

from typing import Optional


class CodecError(Exception):
    pass


class MissingField(CodecError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Missing required field: {key}")
        self.key = key


class MalformedHex(CodecError):
    def __init__(self, key: Optional[str], value: object) -> None:
        where = f" in field {key}" if key else ""
        super().__init__(f"Malformed hex{where}: {value!r}")
        self.key = key
        self.value = value


class MalformedAddress(CodecError):
    pass


class UnexpectedVariantShape(CodecError):
    pass


class WrongTypeDiscriminant(CodecError):
    def __init__(self, expected: int, actual: Optional[int]) -> None:
        got = "empty input" if actual is None else f"0x{actual:02x}"
        super().__init__(f"Expected type byte 0x{expected:02x}, got {got}")
        self.expected = expected
        self.actual = actual


class FieldCountMismatch(CodecError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Expected {expected} RLP fields, got {actual}")
        self.expected = expected
        self.actual = actual


class SignatureUnmarshalFailure(CodecError):
    pass


class RLPDecodingError(CodecError):
    pass
