"""
Logging configuration and filters.

Provides the application log format and a filter that drops the server's
duplicate traceback for errors the reporter has already logged.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ServerErrorEchoFilter(logging.Filter):
    """Filter out the ASGI server's own log line for unhandled app errors."""

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter log records that repeat an already reported error.

        Args:
            record: The log record to filter

        Returns:
            False if the record should be filtered out, True otherwise
        """
        # uvicorn logs this with the traceback after our handler responded
        return not record.getMessage().startswith("Exception in ASGI application")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure application-wide logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
    logging.getLogger("uvicorn.error").addFilter(ServerErrorEchoFilter())
