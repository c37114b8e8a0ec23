"""RESP2 wire constants."""

SIMPLE_STRING = b"+"
ERROR = b"-"
INTEGER = b":"
BULK_STRING = b"$"
ARRAY = b"*"

CRLF = b"\r\n"

NULL_BULK_STRING = b"$-1\r\n"
NULL_ARRAY = b"*-1\r\n"

# Prefixes whose frame is a single CRLF-terminated line
LINE_PREFIXES = frozenset((SIMPLE_STRING, ERROR, INTEGER))
