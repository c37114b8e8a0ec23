"""
Pipeline Module

Batches commands into a single write and correlates the replies back to
the commands by position.

Replies are read into one accumulating buffer. After every read the
FrameScanner is asked repeatedly whether the front of the buffer holds
a complete reply; each complete reply is decoded, appended to the
results and cut off the buffer. A reply split across reads simply waits
for the next read. Reply i always belongs to command i.
"""

import logging
from dataclasses import dataclass
from typing import List

from ..config.settings import settings
from ..exceptions import ConnectionError
from ..protocol.encoder import encode_command
from ..protocol.parser import RespParser
from ..protocol.scanner import FrameScanner
from ..protocol.values import Value
from .commands import CommandsMixin

logger = logging.getLogger(__name__)


@dataclass
class PendingCommand:
    """
    A queued, already-encoded command.

    Attributes:
        payload: The RESP frame to send
        name: Command name, for logging and inspection
    """
    payload: bytes
    name: str


def _command_name(command) -> str:
    if isinstance(command, (bytes, bytearray)):
        return bytes(command).decode(settings.ENCODING, errors="replace").upper()
    return str(command).upper()


class Pipeline(CommandsMixin):
    """
    FIFO queue of commands executed in one round trip.

    Usage:
        pipe = Pipeline(connection)
        pipe.set("a", 1).incr("a").get("a")
        pipe.execute()   # [+OK, :2, $1 "2"] as Values

    A Pipeline is not thread-safe and must not be shared between
    concurrent callers.

    Attributes:
        connection: Transport with send(bytes) and receive(max_bytes)
        parser: RespParser used to decode each reply
        read_size: Maximum bytes requested per receive() call
    """

    def __init__(self, connection, parser: RespParser = None, read_size: int = None):
        self.connection = connection
        self.parser = parser if parser is not None else RespParser()
        self.read_size = read_size if read_size is not None else settings.READ_BUFFER_SIZE
        self._queue: List[PendingCommand] = []

    def __len__(self) -> int:
        return len(self._queue)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.reset()

    @property
    def command_names(self) -> List[str]:
        """Names of the queued commands, in execution order."""
        return [pending.name for pending in self._queue]

    def enqueue(self, command, *args) -> "Pipeline":
        """Encode a command and append it to the queue. No I/O happens here."""
        payload = encode_command(command, *args)
        self._queue.append(PendingCommand(payload=payload, name=_command_name(command)))
        return self

    def execute_command(self, name, *args) -> "Pipeline":
        return self.enqueue(name, *args)

    def reset(self) -> None:
        """Drop every queued command without sending anything."""
        self._queue = []

    def execute(self, raise_on_error: bool = False) -> List[Value]:
        """
        Send every queued command in one write and read one reply per command.

        Args:
            raise_on_error: After all replies were read, raise ServerError
                for the first ERROR reply instead of returning the list

        Returns:
            Replies in the same order as the queued commands. Empty if
            nothing was queued (no I/O is performed then).

        Raises:
            ConnectionError: on a failed or short write, a failed read, or
                the server closing the connection before every reply
                arrived. The queue is kept in that case.
        """
        if not self._queue:
            return []

        payload = b"".join(pending.payload for pending in self._queue)
        expected = len(self._queue)
        logger.debug(f"Executing pipeline of {expected} commands ({len(payload)} bytes)")

        written = self.connection.send(payload)
        if written != len(payload):
            raise ConnectionError(f"short write: sent {written} of {len(payload)} bytes")

        replies = self._read_replies(expected)
        self._queue = []

        if raise_on_error:
            for reply in replies:
                reply.raise_for_error()
        return replies

    def _read_replies(self, expected: int) -> List[Value]:
        buffer = bytearray()
        scanner = FrameScanner()
        replies: List[Value] = []

        while len(replies) < expected:
            chunk = self.connection.receive(self.read_size)
            if not chunk:
                raise ConnectionError(
                    f"connection closed with {expected - len(replies)} "
                    f"of {expected} replies outstanding"
                )
            buffer += chunk

            while len(replies) < expected:
                end = scanner.scan(buffer)
                if end is None:
                    break
                replies.append(self.parser.parse(buffer[:end]))
                del buffer[:end]

        if buffer:
            logger.warning(f"Discarding {len(buffer)} bytes received after the last reply")
        logger.debug(f"Pipeline received {len(replies)} replies")
        return replies

    def __repr__(self) -> str:
        return f"<Pipeline {len(self._queue)} queued>"
