"""
Utility modules for the BRIO Smart Tech train controller.

Provides logging configuration and protocol constants.
"""

from .logging_config import (
    setup_logging,
    get_logger,
    LogContext,
    JSONFormatter,
    TextFormatter,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "LogContext",
    "JSONFormatter",
    "TextFormatter",
]
