"""
Exception hierarchy for respwire.

By default decode-level problems do not raise: the parser turns them
into ERROR values so that a pipeline keeps correlating the remaining
replies. ProtocolError is only raised by a RespParser created with
strict=True.
"""

import builtins


class RespError(Exception):
    """Base class for all respwire errors."""


class ProtocolError(RespError):
    """
    A frame violated the RESP grammar.

    Attributes:
        position: Offset in the parsed buffer where decoding can resume
    """

    def __init__(self, message: str, position: int = None):
        super().__init__(message)
        self.position = position


class ConnectionError(RespError, builtins.ConnectionError):
    """
    The transport failed while a command was in flight.

    The connection must be treated as unusable after this is raised;
    nothing is retried.
    """


class DataError(RespError):
    """A command argument could not be encoded."""


class ServerError(RespError):
    """
    The server answered with a RESP error frame.

    Attributes:
        message: Raw error text as sent by the server (without the '-')
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransactionError(ServerError):
    """EXEC was rejected by the server, or the transaction was reused."""


class TransactionAborted(RespError):
    """EXEC returned a null reply: a watched key changed and nothing ran."""
