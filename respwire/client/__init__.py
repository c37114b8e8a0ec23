"""Client module for respwire."""

from .client import RespClient
from .commands import CommandsMixin
from .pipeline import PendingCommand, Pipeline
from .transaction import Transaction

__all__ = ["RespClient", "CommandsMixin", "Pipeline", "PendingCommand", "Transaction"]
