"""
RESP Value Definitions

This module defines the single data structure every decoded reply and
every encodable datum is expressed in: a tagged Value.

BULK_STRING and ARRAY values have a null state (data is None) that is
distinct from their empty state (b"" / []). The bare NULL type is used
for "no value at all" and for replies that carry nothing else.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, List, Optional, Union

from ..config.settings import settings
from ..exceptions import ServerError


class ValueType(Enum):
    """Enumeration of RESP2 value types."""
    NULL = auto()
    SIMPLE_STRING = auto()
    ERROR = auto()
    INTEGER = auto()
    BULK_STRING = auto()
    ARRAY = auto()


def int_literal(field: Union[bytes, bytearray]) -> Optional[int]:
    """
    Parse an optionally signed decimal integer; None for anything else.

    int() alone would also accept surrounding whitespace and underscores.
    """
    digits = field[1:] if field[:1] in (b"-", b"+") else field
    if not digits or not digits.isdigit():
        return None
    return int(field)


@dataclass(frozen=True)
class Value:
    """
    Represents one RESP datum.

    Attributes:
        type: The variant of the value
        data: Payload for the variant:
            NULL          -> None
            SIMPLE_STRING -> str
            ERROR         -> str (raw server text)
            INTEGER       -> int
            BULK_STRING   -> bytes, or None for a null bulk string
            ARRAY         -> list of Value, or None for a null array

    Values compare by content but are not hashable, since array payloads
    are lists.
    """
    type: ValueType
    data: Any = None

    __hash__ = None

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def null(cls, kind: ValueType = ValueType.NULL) -> "Value":
        """Create a null value; pass BULK_STRING or ARRAY for their null states."""
        if kind not in (ValueType.NULL, ValueType.BULK_STRING, ValueType.ARRAY):
            raise ValueError(f"{kind.name} has no null state")
        return cls(type=kind)

    @classmethod
    def simple(cls, text: str) -> "Value":
        return cls(type=ValueType.SIMPLE_STRING, data=text)

    @classmethod
    def error(cls, message: str) -> "Value":
        return cls(type=ValueType.ERROR, data=message)

    @classmethod
    def integer(cls, number: int) -> "Value":
        return cls(type=ValueType.INTEGER, data=number)

    @classmethod
    def bulk(cls, payload: Union[bytes, str]) -> "Value":
        if isinstance(payload, str):
            payload = payload.encode(settings.ENCODING)
        return cls(type=ValueType.BULK_STRING, data=bytes(payload))

    @classmethod
    def array(cls, items: List["Value"]) -> "Value":
        return cls(type=ValueType.ARRAY, data=list(items))

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def is_null(self) -> bool:
        """True for NULL and for null bulk strings / null arrays."""
        return self.data is None and self.type in (
            ValueType.NULL, ValueType.BULK_STRING, ValueType.ARRAY
        )

    def is_error(self) -> bool:
        return self.type == ValueType.ERROR

    def is_array(self) -> bool:
        return self.type == ValueType.ARRAY

    # ------------------------------------------------------------------
    # Conversions (total: they never raise)
    # ------------------------------------------------------------------

    def as_string(self) -> str:
        """
        Text form of the value.

        NULL and null bulk strings give "", integers their decimal text,
        bulk payloads are decoded with settings.ENCODING (undecodable
        bytes are replaced). Arrays have no text form and give "".
        """
        if self.data is None:
            return ""
        if self.type == ValueType.INTEGER:
            return str(self.data)
        if self.type == ValueType.BULK_STRING:
            return self.data.decode(settings.ENCODING, errors="replace")
        if self.type in (ValueType.SIMPLE_STRING, ValueType.ERROR):
            return self.data
        return ""

    def as_bytes(self) -> bytes:
        """Raw bytes of the value; the text form encoded for non-bulk types."""
        if self.type == ValueType.BULK_STRING and self.data is not None:
            return self.data
        return self.as_string().encode(settings.ENCODING)

    def as_int(self) -> int:
        """
        Integer form of the value.

        String-typed values that are not a valid integer literal give 0,
        as do NULL, errors and arrays.
        """
        if self.type == ValueType.INTEGER:
            return self.data
        if self.type in (ValueType.SIMPLE_STRING, ValueType.BULK_STRING) and self.data is not None:
            number = int_literal(self.as_bytes())
            return number if number is not None else 0
        return 0

    def as_bool(self) -> bool:
        """True for "OK" / "1" strings and non-zero integers."""
        if self.type == ValueType.INTEGER:
            return self.data != 0
        if self.type in (ValueType.SIMPLE_STRING, ValueType.BULK_STRING) and self.data is not None:
            return self.as_string() in ("OK", "1")
        return False

    def to_python(self) -> Any:
        """
        Convert recursively into plain Python objects.

        Bulk strings become bytes, simple strings str, integers int,
        arrays lists, nulls None. Errors become (unraised) ServerError
        instances so they stay distinguishable inside nested results.
        """
        if self.is_null():
            return None
        if self.type == ValueType.ARRAY:
            return [item.to_python() for item in self.data]
        if self.type == ValueType.ERROR:
            return ServerError(self.data)
        return self.data

    def raise_for_error(self) -> "Value":
        """Raise ServerError if this is an error value, else return self."""
        if self.type == ValueType.ERROR:
            raise ServerError(self.data)
        return self

    def __iter__(self):
        if self.type == ValueType.ARRAY and self.data is not None:
            return iter(self.data)
        return iter(())

    def __getitem__(self, index: int) -> "Value":
        if self.type != ValueType.ARRAY or self.data is None:
            raise TypeError(f"{self.type.name} value is not subscriptable")
        return self.data[index]


NULL = Value.null()
