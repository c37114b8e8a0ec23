"""Protocol module for respwire."""

from .encoder import encode_argument, encode_command, encode_value
from .parser import RespParser, decode
from .scanner import FrameScanner, scan
from .values import NULL, Value, ValueType

__all__ = [
    "Value",
    "ValueType",
    "NULL",
    "encode_argument",
    "encode_command",
    "encode_value",
    "RespParser",
    "decode",
    "FrameScanner",
    "scan",
]
