"""
TCP Connection Module

Blocking socket transport used by pipelines and transactions. It only
moves bytes: framing is the scanner's job and decoding the parser's.

Every socket failure (including timeouts) is re-raised as
respwire.exceptions.ConnectionError and leaves the connection closed.
"""

import logging
import socket
from typing import Optional

from ..config.settings import settings
from ..exceptions import ConnectionError

logger = logging.getLogger(__name__)


class Connection:
    """
    Blocking TCP connection to a RESP server.

    Usage:
        with Connection("127.0.0.1", 6379) as conn:
            conn.send(b"*1\\r\\n$4\\r\\nPING\\r\\n")
            conn.receive(4096)   # b"+PONG\\r\\n"

    Attributes:
        host: Server address
        port: Server port
        timeout: Socket timeout in seconds (None or 0 = block forever)
    """

    def __init__(self, host: str = None, port: int = None, timeout: float = None):
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout if timeout is not None else settings.TIMEOUT
        self._sock: Optional[socket.socket] = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def is_connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        """Open the socket; a no-op if already connected."""
        if self._sock is not None:
            return

        try:
            sock = socket.create_connection(
                (self.host, self.port), timeout=self.timeout or None
            )
        except OSError as e:
            logger.error(f"Connection to {self.address} failed: {e}")
            raise ConnectionError(f"cannot connect to {self.address}: {e}") from e

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        self._sock = sock
        logger.debug(f"Connected to {self.address}")

    def send(self, data: bytes) -> int:
        """
        Write all of data.

        Returns:
            Number of bytes written (always len(data) on success)

        Raises:
            ConnectionError: if the write fails or times out
        """
        self.connect()
        try:
            self._sock.sendall(data)
        except OSError as e:
            logger.error(f"Write of {len(data)} bytes to {self.address} failed: {e}")
            self.close()
            raise ConnectionError(f"error writing to {self.address}: {e}") from e
        return len(data)

    def receive(self, max_bytes: int = None) -> bytes:
        """
        Read up to max_bytes.

        Returns:
            The bytes read; b"" means the server closed the connection.

        Raises:
            ConnectionError: if not connected, or the read fails or times out
        """
        if self._sock is None:
            raise ConnectionError(f"not connected to {self.address}")

        try:
            return self._sock.recv(max_bytes or settings.READ_BUFFER_SIZE)
        except OSError as e:
            logger.error(f"Read from {self.address} failed: {e}")
            self.close()
            raise ConnectionError(f"error reading from {self.address}: {e}") from e

    def close(self) -> None:
        """Close the socket; safe to call more than once."""
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError:
            pass
        self._sock = None
        logger.debug(f"Disconnected from {self.address}")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        state = "connected" if self._sock is not None else "disconnected"
        return f"<Connection {self.address} {state}>"
