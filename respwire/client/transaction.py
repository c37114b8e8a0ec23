"""
Transaction Module

MULTI/EXEC on top of a private Pipeline. Nothing is sent until
execute() or discard(); the whole transaction then goes out in one
write as:

    MULTI, cmd1, ..., cmdN, EXEC     (or DISCARD)

and comes back as +OK, +QUEUED x N, then the EXEC reply.
"""

import logging
from typing import List

from ..exceptions import TransactionAborted, TransactionError
from ..protocol.parser import RespParser
from ..protocol.values import Value
from .commands import CommandsMixin
from .pipeline import Pipeline

logger = logging.getLogger(__name__)


class Transaction(CommandsMixin):
    """
    A batch of commands the server applies atomically.

    Usage:
        tx = Transaction(connection)
        tx.incr("counter").get("counter")
        tx.execute()   # [:1, $1 "1"]

    A Transaction can be executed or discarded once; afterwards every
    call raises TransactionError.
    """

    def __init__(self, connection, parser: RespParser = None):
        self._pipeline = Pipeline(connection, parser=parser)
        self._pipeline.enqueue("MULTI")
        self._finished = False

    def __len__(self) -> int:
        """Number of commands queued between MULTI and EXEC."""
        return max(len(self._pipeline) - 1, 0)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Nothing has been sent yet unless execute()/discard() ran
        if not self._finished:
            self._pipeline.reset()
            self._finished = True

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def command_names(self) -> List[str]:
        return self._pipeline.command_names

    def _check_open(self) -> None:
        if self._finished:
            raise TransactionError("transaction already executed or discarded")

    def enqueue(self, command, *args) -> "Transaction":
        self._check_open()
        self._pipeline.enqueue(command, *args)
        return self

    def execute_command(self, name, *args) -> "Transaction":
        return self.enqueue(name, *args)

    def execute(self) -> List[Value]:
        """
        Send MULTI ... EXEC and return the per-command results.

        Returns:
            The elements of the EXEC reply, one per queued command. The
            MULTI and QUEUED acknowledgements are not included.

        Raises:
            TransactionError: EXEC was answered with an error (for example
                EXECABORT after a command failed to queue)
            TransactionAborted: EXEC was answered with a null reply because
                a watched key changed
            ConnectionError: the transport failed
        """
        self._check_open()
        self._pipeline.enqueue("EXEC")
        self._finished = True

        names = self._pipeline.command_names[1:-1]
        replies = self._pipeline.execute()
        for name, reply in zip(names, replies[1:-1]):
            if reply.is_error():
                logger.warning(f"{name} was rejected while queueing: {reply.data}")

        result = replies[-1]
        if result.is_error():
            raise TransactionError(result.data)
        if result.is_null():
            raise TransactionAborted("transaction aborted: a watched key was modified")
        if not result.is_array():
            raise TransactionError(f"unexpected EXEC reply: {result.as_string()!r}")
        return list(result.data)

    def discard(self) -> Value:
        """
        Send MULTI ... DISCARD so none of the queued commands run.

        Returns:
            The server's reply to DISCARD (normally +OK).
        """
        self._check_open()
        self._pipeline.enqueue("DISCARD")
        self._finished = True

        replies = self._pipeline.execute()
        logger.debug(f"Discarded transaction of {len(replies) - 2} commands")
        return replies[-1]

    def __repr__(self) -> str:
        state = "finished" if self._finished else f"{len(self)} queued"
        return f"<Transaction {state}>"
