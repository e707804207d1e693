"""
=============================================================================
LOGGING SETUP
=============================================================================

Every module logs through its own namespaced logger:

    httpmessage.core.stream          stream open / close / failures
    httpmessage.http.uploaded_file   upload moves
    httpmessage.http.request         Host synchronisation

configure_logging() attaches one handler to the "httpmessage" parent
logger, in one of two formats:

    TEXT:
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 2026-10-19 12:00:00,123 DEBUG httpmessage.core.stream: Opened ...  │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (one object per line, for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"timestamp": "...", "level": "DEBUG",                              │
    │  "logger": "httpmessage.core.stream", "message": "Opened ..."}      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from .config import MessageConfig, get_config


LOGGER_NAME = "httpmessage"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(
    config: Optional[MessageConfig] = None,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """
    Configure the package logger from a MessageConfig.

    Calling it again replaces the handler installed by the previous call
    instead of stacking a second one.

    Args:
        config: Configuration to apply (defaults to the active config).
        handler: Handler to install (defaults to a StreamHandler on stderr).

    Returns:
        The configured "httpmessage" logger.
    """
    config = config or get_config()
    logger = logging.getLogger(LOGGER_NAME)

    for existing in list(logger.handlers):
        if getattr(existing, "_httpmessage_handler", False):
            logger.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler._httpmessage_handler = True
    if config.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(config.log_level.upper())
    return logger
