"""Core utilities for hubgate."""

from hubgate.app.core.config import settings
from hubgate.app.core.http_client import (
    create_http_client,
    init_http_client,
)
from hubgate.app.core.logging import get_log_context, get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "get_log_context",
    "setup_logging",
    "init_http_client",
    "create_http_client",
]
