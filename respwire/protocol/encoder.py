"""
RESP Encoder Module

Formats outgoing commands (always an array of bulk strings) and, for
completeness, any Value into its RESP2 wire form.

Both functions are pure: no state, no I/O.
"""

from typing import Union

from ..config.settings import settings
from ..exceptions import DataError
from .constants import (
    ARRAY,
    BULK_STRING,
    CRLF,
    ERROR,
    INTEGER,
    NULL_ARRAY,
    NULL_BULK_STRING,
    SIMPLE_STRING,
)
from .values import Value, ValueType

Argument = Union[bytes, bytearray, memoryview, str, int, float]


def encode_argument(arg: Argument) -> bytes:
    """
    Convert a single command argument into raw bytes.

    Args:
        arg: bytes-like objects are sent as-is, str is encoded with
            settings.ENCODING, int and float use their decimal repr.

    Raises:
        DataError: for bool, None and any other type
    """
    if isinstance(arg, (bytes, bytearray, memoryview)):
        return bytes(arg)
    if isinstance(arg, str):
        return arg.encode(settings.ENCODING)
    # bool is an int subclass; True/False are almost always a caller mistake
    if isinstance(arg, bool):
        raise DataError(f"invalid argument {arg!r}: convert bools to bytes, str or int first")
    if isinstance(arg, (int, float)):
        return repr(arg).encode("ascii")
    raise DataError(f"invalid argument of type {type(arg).__name__}: {arg!r}")


def _bulk(payload: bytes) -> bytes:
    return BULK_STRING + str(len(payload)).encode("ascii") + CRLF + payload + CRLF


def encode_command(name: Argument, *args: Argument) -> bytes:
    """
    Encode a command as a RESP array of bulk strings.

    Examples:
        >>> encode_command("SET", "key", "value")
        b'*3\\r\\n$3\\r\\nSET\\r\\n$3\\r\\nkey\\r\\n$5\\r\\nvalue\\r\\n'
        >>> encode_command("PING")
        b'*1\\r\\n$4\\r\\nPING\\r\\n'

    Lengths are byte counts, so non-ASCII text and binary payloads are
    framed correctly.
    """
    parts = [ARRAY, str(len(args) + 1).encode("ascii"), CRLF, _bulk(encode_argument(name))]
    for arg in args:
        parts.append(_bulk(encode_argument(arg)))
    return b"".join(parts)


def encode_value(value: Value) -> bytes:
    """
    Encode any Value into its RESP2 frame.

    Null bulk strings and the bare NULL encode as $-1, null arrays as *-1.
    """
    if value.type == ValueType.NULL:
        return NULL_BULK_STRING
    if value.type == ValueType.SIMPLE_STRING:
        return SIMPLE_STRING + value.data.encode(settings.ENCODING) + CRLF
    if value.type == ValueType.ERROR:
        return ERROR + value.data.encode(settings.ENCODING) + CRLF
    if value.type == ValueType.INTEGER:
        return INTEGER + str(value.data).encode("ascii") + CRLF
    if value.type == ValueType.BULK_STRING:
        if value.data is None:
            return NULL_BULK_STRING
        return _bulk(value.data)
    if value.type == ValueType.ARRAY:
        if value.data is None:
            return NULL_ARRAY
        header = ARRAY + str(len(value.data)).encode("ascii") + CRLF
        return header + b"".join(encode_value(item) for item in value.data)
    raise DataError(f"cannot encode value of type {value.type!r}")
