"""
=============================================================================
MESSAGE CONFIGURATION
=============================================================================

Centralized configuration for the message model.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. set_config(MessageConfig(...)) from code / CLI flags           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTPMESSAGE_LOG_LEVEL=DEBUG python -m httpmessage ...     │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The active configuration is read lazily by the components that need it:

    Message           → protocol_version (default for new messages)
    Stream.create()   → temp_memory_limit (in-memory buffer before spilling
                        to a temporary file)
    Response          → default_cookie_path
    configure_logging → log_level, log_format

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class MessageConfig:
    """
    Configuration for the message model.

    Example:
        set_config(MessageConfig(protocol_version="1.0", log_level="DEBUG"))
    """

    # ─────────────────────────────────────────────────────────────────────
    # MESSAGE DEFAULTS
    # ─────────────────────────────────────────────────────────────────────

    protocol_version: str = "1.1"
    """HTTP protocol version given to messages built without one."""

    default_cookie_path: str = "/"
    """Path attribute emitted for cookies created without an explicit path."""

    # ─────────────────────────────────────────────────────────────────────
    # STREAMS
    # ─────────────────────────────────────────────────────────────────────

    temp_memory_limit: int = 2 * 1024 * 1024  # 2 MB
    """
    Bytes an in-memory stream may hold before it spills to a temporary
    file on disk.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "WARNING"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Log format: 'json' or 'text'."""

    @classmethod
    def from_env(cls) -> "MessageConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTPMESSAGE_PROTOCOL_VERSION   Default protocol version (1.1)
        HTTPMESSAGE_TEMP_MEMORY_LIMIT  In-memory stream limit in bytes
        HTTPMESSAGE_LOG_LEVEL          Logging level (WARNING)
        HTTPMESSAGE_LOG_FORMAT         text or json (text)

        =====================================================================
        """
        return cls(
            protocol_version=os.getenv("HTTPMESSAGE_PROTOCOL_VERSION", "1.1"),
            temp_memory_limit=int(
                os.getenv("HTTPMESSAGE_TEMP_MEMORY_LIMIT", str(2 * 1024 * 1024))
            ),
            log_level=os.getenv("HTTPMESSAGE_LOG_LEVEL", "WARNING"),
            log_format=os.getenv("HTTPMESSAGE_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """Validate configuration values, failing fast on the first problem."""
        if not self.protocol_version:
            raise ValueError("protocol_version must not be empty")

        if self.temp_memory_limit < 0:
            raise ValueError(
                f"Invalid temp_memory_limit: {self.temp_memory_limit}. Must be >= 0."
            )

        if not self.default_cookie_path.startswith("/"):
            raise ValueError("default_cookie_path must start with '/'")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format}. Use 'text' or 'json'.")


_active_config: Optional[MessageConfig] = None


def get_config() -> MessageConfig:
    """Return the active configuration, loading it from the environment once."""
    global _active_config
    if _active_config is None:
        config = MessageConfig.from_env()
        config.validate()
        _active_config = config
    return _active_config


def set_config(config: Optional[MessageConfig]) -> None:
    """
    Replace the active configuration.

    Passing None resets it, so the next get_config() reloads from the
    environment.
    """
    global _active_config
    if config is not None:
        config.validate()
    _active_config = config
