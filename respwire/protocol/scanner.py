"""
Frame Scanner Module

Decides whether the front of a growing receive buffer holds one complete
RESP frame, and where that frame ends.

Replies to a pipeline arrive in arbitrary chunks: a frame can be cut in
the middle of a header, of a bulk payload, or between two elements of a
nested array. The scanner applies the same grammar as the parser, but
only to measure:

    + - :   complete once the line's CRLF is present
    $<n>    complete once the header CRLF plus n bytes plus CRLF are present
            ($-1 completes right after its header)
    *<n>    complete once n child frames are each complete, the end of
            one child being the start of the next (*-1 and *0 complete
            right after their header)

Array nesting is tracked with an explicit stack of "children still
missing" counters instead of recursion, which lets a scan that ran out
of bytes pick up exactly where it stopped on the next call: elements
that were already measured are never looked at again.
"""

from typing import List, Optional, Union

from .constants import ARRAY, BULK_STRING, CRLF
from .values import int_literal

Buffer = Union[bytes, bytearray]


class FrameScanner:
    """
    Incremental frame boundary detector.

    Usage:
        scanner = FrameScanner()
        buffer = bytearray()
        while True:
            buffer += transport.receive(4096)
            end = scanner.scan(buffer)
            if end is not None:
                frame = bytes(buffer[:end])
                del buffer[:end]
                break

    Between two calls the caller may only append to the buffer. Once a
    frame is reported complete the scanner resets itself, so the next
    call measures the frame that now sits at offset 0 (after the caller
    removed the consumed bytes).
    """

    def __init__(self):
        self._pos = 0
        self._search = 0
        self._pending: List[int] = []

    def reset(self) -> None:
        """Forget any partial progress."""
        self._pos = 0
        self._search = 0
        self._pending = []

    @property
    def in_progress(self) -> bool:
        """True if part of a frame has already been measured."""
        return self._pos > 0 or bool(self._pending)

    @property
    def depth(self) -> int:
        """Number of arrays currently open around the scan position."""
        return len(self._pending)

    def scan(self, buffer: Buffer) -> Optional[int]:
        """
        Measure the frame at the front of buffer.

        Args:
            buffer: Accumulated bytes; must start with the frame being
                measured and only ever grow between calls

        Returns:
            The offset just past the frame if it is complete, or None if
            more bytes are needed.
        """
        size = len(buffer)

        while True:
            pos = self._pos
            if pos >= size:
                return None

            header_end = buffer.find(CRLF, max(self._search, pos + 1))
            if header_end == -1:
                # A CR at the very end may be the first half of the CRLF
                self._search = max(pos + 1, size - 1)
                return None

            prefix = bytes(buffer[pos:pos + 1])
            after = header_end + 2

            if prefix == BULK_STRING:
                length = int_literal(buffer[pos + 1:header_end])
                if length is not None and length >= 0:
                    if after + length + 2 > size:
                        # Header stays unconsumed; remember where its CRLF is
                        self._search = header_end
                        return None
                    after += length + 2
            elif prefix == ARRAY:
                count = int_literal(buffer[pos + 1:header_end])
                if count is not None and count > 0:
                    self._pending.append(count)
                    self._pos = after
                    self._search = 0
                    continue

            # Anything else (including malformed headers) is one line; the
            # parser reports it as an error value.
            self._pos = after
            self._search = 0

            while self._pending:
                self._pending[-1] -= 1
                if self._pending[-1]:
                    break
                self._pending.pop()

            if not self._pending:
                end = self._pos
                self.reset()
                return end


def scan(buffer: Buffer) -> Optional[int]:
    """One-shot scan of buffer with a fresh FrameScanner."""
    return FrameScanner().scan(buffer)
