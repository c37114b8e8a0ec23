"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import random
import socket
import threading
from collections import deque
from contextlib import closing
from typing import Callable, Dict, Generator, Iterable, List, Optional

import pytest

from respwire.client.client import RespClient
from respwire.exceptions import ConnectionError
from respwire.protocol.encoder import encode_value
from respwire.protocol.parser import RespParser
from respwire.protocol.scanner import FrameScanner
from respwire.protocol.values import Value, ValueType


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Chunking helpers
# ============================================================================

def split_every(data: bytes, size: int) -> List[bytes]:
    """Split data into chunks of at most size bytes."""
    return [data[i:i + size] for i in range(0, len(data), size)]


def split_randomly(data: bytes, seed: int) -> List[bytes]:
    """Split data at random offsets (reproducible for a given seed)."""
    rng = random.Random(seed)
    chunks = []
    pos = 0
    while pos < len(data):
        size = rng.randint(1, 7)
        chunks.append(data[pos:pos + size])
        pos += size
    return chunks


def chunkings(data: bytes) -> Dict[str, List[bytes]]:
    """The chunk layouts every reply stream is replayed with."""
    layouts = {
        "whole": [data],
        "bytewise": split_every(data, 1),
        "pairs": split_every(data, 2),
    }
    for seed in range(5):
        layouts[f"random-{seed}"] = split_randomly(data, seed)
    return layouts


# ============================================================================
# Scripted transport
# ============================================================================

class ScriptedTransport:
    """
    In-memory stand-in for Connection.

    Records everything sent and replays a scripted reply stream, one
    scripted chunk per receive() call. When the script runs out,
    receive() returns b"" (connection closed).

    Usage:
        transport = ScriptedTransport([b"+OK\\r\\n", b":1\\r\\n"])
        Pipeline(transport).set("a", 1).incr("b").execute()
    """

    def __init__(
            self,
            chunks: Iterable[bytes] = (),
            short_write: Optional[int] = None,
            fail_send: bool = False,
    ):
        self._chunks = deque(chunks)
        self.short_write = short_write
        self.fail_send = fail_send
        self.sent: List[bytes] = []
        self.receive_calls = 0

    @property
    def sent_bytes(self) -> bytes:
        return b"".join(self.sent)

    def send(self, data: bytes) -> int:
        if self.fail_send:
            raise ConnectionError("scripted write failure")
        self.sent.append(bytes(data))
        if self.short_write is not None:
            return self.short_write
        return len(data)

    def receive(self, max_bytes: int) -> bytes:
        self.receive_calls += 1
        if not self._chunks:
            return b""
        chunk = self._chunks.popleft()
        if len(chunk) > max_bytes:
            self._chunks.appendleft(chunk[max_bytes:])
            chunk = chunk[:max_bytes]
        return chunk


@pytest.fixture
def transport_factory() -> Callable[..., ScriptedTransport]:
    """
    Factory fixture to create scripted transports.

    Usage:
        def test_something(transport_factory):
            transport = transport_factory([b"+PONG\\r\\n"])
    """
    return ScriptedTransport


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> RespParser:
    """Create a RespParser instance."""
    return RespParser()


@pytest.fixture
def strict_parser() -> RespParser:
    """Create a RespParser that raises ProtocolError."""
    return RespParser(strict=True)


@pytest.fixture
def scanner() -> FrameScanner:
    """Create a FrameScanner instance."""
    return FrameScanner()


# ============================================================================
# Test server
# ============================================================================

class _Session:
    """Per-connection MULTI/WATCH state."""

    def __init__(self):
        self.queued: Optional[List[List[bytes]]] = None
        self.dirty = False
        self.watched: Dict[bytes, int] = {}


class MiniRedisServer:
    """
    Small RESP2 server for end-to-end tests.

    Runs an asyncio server on a background thread and understands just
    enough commands (strings, lists, hashes, MULTI/EXEC/DISCARD/WATCH)
    to exercise the client. Requests are framed and decoded with the
    library's own FrameScanner and RespParser.

    Attributes:
        chunk_size: If set, every reply is written in pieces of this many
            bytes, each flushed separately
    """

    def __init__(self, host: str = '127.0.0.1', port: int = 0, chunk_size: int = None):
        self.host = host
        self.port = port or find_free_port()
        self.chunk_size = chunk_size
        self.data: Dict[bytes, object] = {}
        self.versions: Dict[bytes, int] = {}
        self.connections = 0

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._commands = {
            "PING": self._ping,
            "ECHO": self._echo,
            "SET": self._set,
            "GET": self._get,
            "DEL": self._del,
            "EXISTS": self._exists,
            "INCR": self._incr,
            "LPUSH": self._lpush,
            "RPUSH": self._rpush,
            "LRANGE": self._lrange,
            "HSET": self._hset,
            "HGET": self._hget,
            "HGETALL": self._hgetall,
            "WATCH": self._watch,
            "UNWATCH": self._unwatch,
        }

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        if not self._ready.wait(5):
            raise RuntimeError("test server did not start")

    def stop(self) -> None:
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread is not None:
            self._thread.join(5)

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        server = loop.run_until_complete(
            asyncio.start_server(self.handle_client, self.host, self.port)
        )
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            server.close()
            tasks = asyncio.all_tasks(loop)
            for task in tasks:
                task.cancel()
            loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))
            loop.close()

    # -- connection handling ------------------------------------------------

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.connections += 1
        session = _Session()
        scanner = FrameScanner()
        parser = RespParser()
        buffer = bytearray()

        try:
            while True:
                data = await reader.read(4096)
                if not data:
                    break
                buffer += data

                while True:
                    end = scanner.scan(buffer)
                    if end is None:
                        break
                    request = parser.parse(buffer[:end])
                    del buffer[:end]
                    reply = self.dispatch(session, [item.as_bytes() for item in request])
                    await self._write(writer, encode_value(reply))
        except ConnectionResetError:
            pass
        finally:
            writer.close()

    async def _write(self, writer: asyncio.StreamWriter, data: bytes) -> None:
        if not self.chunk_size:
            writer.write(data)
            await writer.drain()
            return
        for piece in split_every(data, self.chunk_size):
            writer.write(piece)
            await writer.drain()
            await asyncio.sleep(0.001)

    # -- command dispatch ---------------------------------------------------

    def dispatch(self, session: _Session, args: List[bytes]) -> Value:
        if not args:
            return Value.error("ERR empty command")
        name = args[0].decode().upper()

        if name == "MULTI":
            if session.queued is not None:
                return Value.error("ERR MULTI calls can not be nested")
            session.queued = []
            return Value.simple("OK")
        if name == "EXEC":
            return self._exec(session)
        if name == "DISCARD":
            if session.queued is None:
                return Value.error("ERR DISCARD without MULTI")
            session.queued = None
            session.dirty = False
            session.watched = {}
            return Value.simple("OK")

        if session.queued is not None:
            if name not in self._commands:
                session.dirty = True
                return Value.error(f"ERR unknown command '{name}'")
            session.queued.append(args)
            return Value.simple("QUEUED")
        return self.run(session, args)

    def run(self, session: _Session, args: List[bytes]) -> Value:
        name = args[0].decode().upper()
        handler = self._commands.get(name)
        if handler is None:
            return Value.error(f"ERR unknown command '{name}'")
        try:
            return handler(session, *args[1:])
        except TypeError:
            return Value.error(f"ERR wrong number of arguments for '{name.lower()}' command")

    def _exec(self, session: _Session) -> Value:
        if session.queued is None:
            return Value.error("ERR EXEC without MULTI")
        queued, dirty, watched = session.queued, session.dirty, session.watched
        session.queued, session.dirty, session.watched = None, False, {}

        if dirty:
            return Value.error("EXECABORT Transaction discarded because of previous errors.")
        if any(self.versions.get(key, 0) != version for key, version in watched.items()):
            return Value.null(ValueType.ARRAY)
        return Value.array([self.run(session, args) for args in queued])

    def _touch(self, key: bytes) -> None:
        self.versions[key] = self.versions.get(key, 0) + 1

    # -- commands -----------------------------------------------------------

    def _ping(self, session, message=None):
        return Value.simple("PONG") if message is None else Value.bulk(message)

    def _echo(self, session, message):
        return Value.bulk(message)

    def _set(self, session, key, value):
        self.data[key] = value
        self._touch(key)
        return Value.simple("OK")

    def _get(self, session, key):
        value = self.data.get(key)
        if value is None:
            return Value.null(ValueType.BULK_STRING)
        if not isinstance(value, bytes):
            return Value.error("WRONGTYPE Operation against a key holding the wrong kind of value")
        return Value.bulk(value)

    def _del(self, session, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                self._touch(key)
                removed += 1
        return Value.integer(removed)

    def _exists(self, session, *keys):
        return Value.integer(sum(1 for key in keys if key in self.data))

    def _incr(self, session, key):
        current = self.data.get(key, b"0")
        if not isinstance(current, bytes) or not current.lstrip(b"-").isdigit():
            return Value.error("ERR value is not an integer or out of range")
        number = int(current) + 1
        self.data[key] = str(number).encode()
        self._touch(key)
        return Value.integer(number)

    def _push(self, key, values, left):
        items = self.data.setdefault(key, [])
        if not isinstance(items, list):
            return Value.error("WRONGTYPE Operation against a key holding the wrong kind of value")
        for value in values:
            if left:
                items.insert(0, value)
            else:
                items.append(value)
        self._touch(key)
        return Value.integer(len(items))

    def _lpush(self, session, key, *values):
        return self._push(key, values, left=True)

    def _rpush(self, session, key, *values):
        return self._push(key, values, left=False)

    def _lrange(self, session, key, start, stop):
        items = self.data.get(key, [])
        start, stop = int(start), int(stop)
        stop = len(items) if stop == -1 else stop + 1
        return Value.array([Value.bulk(item) for item in items[start:stop]])

    def _hset(self, session, key, field, value):
        mapping = self.data.setdefault(key, {})
        added = 0 if field in mapping else 1
        mapping[field] = value
        self._touch(key)
        return Value.integer(added)

    def _hget(self, session, key, field):
        value = self.data.get(key, {}).get(field)
        return Value.null(ValueType.BULK_STRING) if value is None else Value.bulk(value)

    def _hgetall(self, session, key):
        items = []
        for field, value in self.data.get(key, {}).items():
            items.extend((Value.bulk(field), Value.bulk(value)))
        return Value.array(items)

    def _watch(self, session, *keys):
        for key in keys:
            session.watched[key] = self.versions.get(key, 0)
        return Value.simple("OK")

    def _unwatch(self, session):
        session.watched = {}
        return Value.simple("OK")


@pytest.fixture
def server() -> Generator[MiniRedisServer, None, None]:
    """Start a MiniRedisServer on a free port for the duration of a test."""
    srv = MiniRedisServer()
    srv.start()
    yield srv
    srv.stop()


@pytest.fixture
def chunked_server() -> Generator[MiniRedisServer, None, None]:
    """A MiniRedisServer that writes every reply one byte at a time."""
    srv = MiniRedisServer(chunk_size=1)
    srv.start()
    yield srv
    srv.stop()


@pytest.fixture
def client(server: MiniRedisServer) -> Generator[RespClient, None, None]:
    """A RespClient connected to the test server."""
    with RespClient('127.0.0.1', server.port, timeout=5.0) as c:
        yield c


@pytest.fixture
def client_factory(server: MiniRedisServer):
    """
    Factory fixture to create additional clients for the same server.

    Usage:
        def test_something(server, client_factory):
            with client_factory() as other:
                other.set("key", "value")
    """
    def factory() -> RespClient:
        return RespClient('127.0.0.1', server.port, timeout=5.0)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
