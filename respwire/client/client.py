"""
RESP Client Module

RespClient ties a Connection to the command surface: single commands
run as one-command pipelines, and pipeline()/transaction() hand out
batches bound to the same connection.
"""

from urllib.parse import urlsplit

from ..network.connection import Connection
from ..protocol.parser import RespParser
from ..protocol.values import Value
from .commands import CommandsMixin
from .pipeline import Pipeline
from .transaction import Transaction


class RespClient(CommandsMixin):
    """
    Synchronous client for a RESP2 server.

    Usage:
        with RespClient("127.0.0.1", 6379) as client:
            client.set("key", "value")
            client.get("key").as_string()   # "value"

            pipe = client.pipeline()
            pipe.incr("hits").incr("hits")
            pipe.execute()

    Replies are returned as Values; server errors come back as ERROR
    values and are not raised (see Value.raise_for_error()).

    Attributes:
        connection: The owned Connection
        parser: RespParser shared by every batch this client creates
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            timeout: float = None,
            connection: Connection = None,
    ):
        self.connection = connection if connection is not None else Connection(host, port, timeout)
        self.parser = RespParser()

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RespClient":
        """
        Create a client from a redis://host:port URL.

        Examples:
            >>> RespClient.from_url("redis://localhost:6380").connection.port
            6380
        """
        parts = urlsplit(url)
        if parts.scheme not in ("redis", "resp", "tcp"):
            raise ValueError(f"unsupported URL scheme {parts.scheme!r} in {url!r}")
        return cls(host=parts.hostname, port=parts.port, **kwargs)

    def execute_command(self, name, *args) -> Value:
        """Send one command and return its reply."""
        return self.pipeline().enqueue(name, *args).execute()[0]

    def pipeline(self) -> Pipeline:
        return Pipeline(self.connection, parser=self.parser)

    def transaction(self) -> Transaction:
        return Transaction(self.connection, parser=self.parser)

    def close(self) -> None:
        self.connection.close()

    def __enter__(self):
        self.connection.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"<RespClient {self.connection.address}>"
