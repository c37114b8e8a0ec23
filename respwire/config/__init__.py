"""Configuration module for respwire."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
