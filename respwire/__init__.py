"""
respwire: RESP Client Core

A synchronous client for the REdis Serialization Protocol (RESP2):
command encoding, frame decoding, incremental frame scanning and
pipelined / MULTI-EXEC execution over a plain TCP socket.
"""

__version__ = "1.0.0"

from .client.client import RespClient
from .client.pipeline import PendingCommand, Pipeline
from .client.transaction import Transaction
from .exceptions import (
    ConnectionError,
    DataError,
    ProtocolError,
    RespError,
    ServerError,
    TransactionAborted,
    TransactionError,
)
from .network.connection import Connection
from .protocol import (
    FrameScanner,
    RespParser,
    Value,
    ValueType,
    decode,
    encode_command,
    encode_value,
)

__all__ = [
    "RespClient",
    "Pipeline",
    "PendingCommand",
    "Transaction",
    "Connection",
    "Value",
    "ValueType",
    "RespParser",
    "FrameScanner",
    "decode",
    "encode_command",
    "encode_value",
    "RespError",
    "ProtocolError",
    "ConnectionError",
    "ServerError",
    "TransactionError",
    "TransactionAborted",
    "DataError",
]
