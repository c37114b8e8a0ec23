"""Network module for respwire."""

from .connection import Connection

__all__ = ["Connection"]
