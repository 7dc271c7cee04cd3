"""RLP/JSON codec for zkSync-style EIP-712 transaction envelopes and receipts."""

from zkcodec.common.config import (
    CONTRACT_DEPLOYMENT_ADDRESS,
    EIP712_TX_TYPE,
    ERA_MAINNET,
    ERA_SEPOLIA,
    ChainConfig,
)
from zkcodec.common.errors import (
    CodecError,
    FieldCountMismatch,
    MalformedAddress,
    MalformedHex,
    MissingField,
    SignatureUnmarshalFailure,
    UnexpectedVariantShape,
    WrongTypeDiscriminant,
)
from zkcodec.rpc.receipt import L2ToL1Log, TransactionReceipt, TxStatus
from zkcodec.transaction.envelope import EIP712Envelope, build_envelope
from zkcodec.transaction.meta import EIP712Meta, PaymasterParams

__version__ = "0.1.0"
