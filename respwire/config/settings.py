"""
respwire Configuration Settings

Defaults for the transport and the codec. Every value can be overridden
through the environment or by passing explicit arguments to the
Connection / RespClient constructors.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("RESPWIRE_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("RESPWIRE_PORT", "6379"))
    TIMEOUT: float = float(os.environ.get("RESPWIRE_TIMEOUT", "5.0"))  # 0 = blocking

    # Transport settings
    READ_BUFFER_SIZE: int = 4096  # Max bytes per receive() call

    # Codec settings
    ENCODING: str = "utf-8"

    # Logging settings
    DEBUG: bool = os.environ.get("RESPWIRE_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("RESPWIRE_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
