"""
RESP Parser Module

Decoder for buffers that already hold at least one complete frame (see
scanner.py for deciding *when* that is the case). Nested arrays are
built with an explicit stack of open arrays, so nesting depth is not
bounded by the interpreter's recursion limit.

Malformed input does not abort the caller: the offending top-level
frame decodes to an ERROR value carrying a diagnostic, so one bad reply
in a pipeline cannot shift the replies that follow it.
"""

import logging
from typing import List, Tuple, Union

from ..config.settings import settings
from ..exceptions import ProtocolError
from .constants import ARRAY, BULK_STRING, CRLF, ERROR, INTEGER, SIMPLE_STRING
from .values import Value, ValueType, int_literal

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]


class RespParser:
    """
    Decoder for RESP2 frames.

    Frame grammar:
        +<text>\\r\\n                 Simple string
        -<text>\\r\\n                 Error
        :<signed int>\\r\\n           Integer
        $<len>\\r\\n<bytes>\\r\\n      Bulk string ($-1\\r\\n is null)
        *<count>\\r\\n<elements...>   Array (*-1\\r\\n is null)

    The cursor only moves forward: each element of an array starts where
    the previous one ended.

    Attributes:
        strict: Raise ProtocolError instead of returning ERROR values
        encoding: Codec for simple strings and errors
    """

    def __init__(self, strict: bool = False, encoding: str = None):
        self.strict = strict
        self.encoding = encoding if encoding is not None else settings.ENCODING

    def parse(self, data: Buffer) -> Value:
        """
        Decode the first frame in data.

        Examples:
            >>> RespParser().parse(b":-50\\r\\n")
            Value(type=<ValueType.INTEGER: 4>, data=-50)
            >>> RespParser().parse(b"$-1\\r\\n").is_null()
            True
        """
        value, _ = self.parse_frame(data, 0)
        return value

    def parse_frame(self, data: Buffer, pos: int = 0) -> Tuple[Value, int]:
        """
        Decode one frame starting at pos.

        Returns:
            (value, next_pos) where next_pos is the offset just past the
            frame. For malformed frames next_pos is the best place to
            resume: past the broken header, or the end of data if the
            frame was truncated.
        """
        data = bytes(data)
        try:
            return self._read(data, pos)
        except ProtocolError as e:
            if self.strict:
                raise
            logger.warning(f"Malformed frame at offset {pos}: {e}")
            resume = e.position if e.position is not None else len(data)
            return Value.error(f"Protocol error: {e}"), max(resume, pos + 1)

    def parse_all(self, data: Buffer) -> List[Value]:
        """Decode every frame in a complete buffer, in order."""
        data = bytes(data)
        values = []
        pos = 0
        while pos < len(data):
            value, pos = self.parse_frame(data, pos)
            values.append(value)
        return values

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def _read(self, data: bytes, pos: int) -> Tuple[Value, int]:
        # Arrays still being filled, innermost last: (items, expected count)
        open_arrays: List[Tuple[List[Value], int]] = []

        while True:
            if pos >= len(data):
                raise ProtocolError("unexpected end of input", len(data))

            prefix = data[pos:pos + 1]
            line, pos = self._read_line(data, pos + 1)

            if prefix == ARRAY:
                count = self._to_int(line, "array length", pos)
                if count < -1:
                    raise ProtocolError(f"invalid array length {count}", pos)
                if count > 0:
                    open_arrays.append(([], count))
                    continue
                value = Value.null(ValueType.ARRAY) if count == -1 else Value.array([])
            else:
                value, pos = self._read_scalar(data, prefix, line, pos)

            while open_arrays:
                items, count = open_arrays[-1]
                items.append(value)
                if len(items) < count:
                    break
                open_arrays.pop()
                value = Value.array(items)

            if not open_arrays:
                return value, pos

    def _read_scalar(self, data: bytes, prefix: bytes, line: bytes, after: int) -> Tuple[Value, int]:
        if prefix == SIMPLE_STRING:
            return Value.simple(line.decode(self.encoding, errors="replace")), after
        if prefix == ERROR:
            return Value.error(line.decode(self.encoding, errors="replace")), after
        if prefix == INTEGER:
            return Value.integer(self._to_int(line, "integer", after)), after
        if prefix == BULK_STRING:
            return self._read_bulk(data, line, after)

        raise ProtocolError(f"invalid type prefix {prefix!r}", after)

    def _read_line(self, data: bytes, start: int) -> Tuple[bytes, int]:
        """Return the bytes up to the next CRLF and the offset after it."""
        end = data.find(CRLF, start)
        if end == -1:
            raise ProtocolError("unexpected end of input, expected CRLF", len(data))
        return data[start:end], end + 2

    @staticmethod
    def _to_int(field: bytes, what: str, resume: int) -> int:
        number = int_literal(field)
        if number is None:
            raise ProtocolError(f"invalid {what} {field!r}", resume)
        return number

    def _read_bulk(self, data: bytes, header: bytes, start: int) -> Tuple[Value, int]:
        length = self._to_int(header, "bulk string length", start)
        if length == -1:
            return Value.null(ValueType.BULK_STRING), start
        if length < -1:
            raise ProtocolError(f"invalid bulk string length {length}", start)

        end = start + length
        if end + 2 > len(data):
            raise ProtocolError(
                f"bulk string truncated: need {length + 2} bytes, have {len(data) - start}",
                len(data),
            )
        if data[end:end + 2] != CRLF:
            raise ProtocolError("bulk string not terminated by CRLF", end + 2)
        return Value.bulk(data[start:end]), end + 2


_default_parser = RespParser()


def decode(data: Buffer) -> Value:
    """Decode the first frame of a complete buffer with default settings."""
    return _default_parser.parse(data)
