"""
Logging for the Phlag client
============================

Usage:
    from phlag_client.logging import configure_logging, get_logger

    configure_logging(log_level="DEBUG")
    logger = get_logger("PhlagClient")
    logger.info("Loaded flags")
"""

from .logger import (
    ROOT_LOGGER_NAME,
    ConsoleFormatter,
    FileFormatter,
    configure_logging,
    get_logger,
    shutdown_logging,
)

__all__ = [
    "ROOT_LOGGER_NAME",
    "ConsoleFormatter",
    "FileFormatter",
    "configure_logging",
    "get_logger",
    "shutdown_logging",
]
