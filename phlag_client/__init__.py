"""
phlag_client - async client for the Phlag feature flag service.

Usage:
    from phlag_client import ClientConfig, PhlagClient

    async with PhlagClient(ClientConfig(
        base_url="http://localhost:8000",
        api_key="your-api-key",
        environment="production",
        cache=True,
    )) as flags:
        if await flags.is_enabled("feature_checkout"):
            ...
"""

from .config import ClientConfig, load_client_config
from .core.errors import (
    AuthenticationError,
    EnvironmentNotFoundError,
    FlagNotFoundError,
    InvalidEnvironmentError,
    InvalidFlagError,
    NetworkError,
    PhlagAPIError,
    PhlagConfigError,
    PhlagError,
)
from .logging import configure_logging, get_logger
from .services.flags import FlagSnapshot, FlagTransport, FlagValue, PhlagClient

__version__ = "1.0.0"

__all__ = [
    "AuthenticationError",
    "ClientConfig",
    "EnvironmentNotFoundError",
    "FlagNotFoundError",
    "FlagSnapshot",
    "FlagTransport",
    "FlagValue",
    "InvalidEnvironmentError",
    "InvalidFlagError",
    "NetworkError",
    "PhlagAPIError",
    "PhlagClient",
    "PhlagConfigError",
    "PhlagError",
    "configure_logging",
    "get_logger",
    "load_client_config",
    "__version__",
]
