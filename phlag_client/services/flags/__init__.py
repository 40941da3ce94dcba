"""
Phlag feature flag service client.

Usage:
    from phlag_client.services.flags import PhlagClient
"""

from .cache import (
    BaseCacheStore,
    FileCacheStore,
    NullCacheStore,
    build_cache_store,
    derive_cache_location,
    is_file_cache_available,
)
from .client import PhlagClient
from .http_client import FlagTransport
from .types import FlagSnapshot, FlagValue

__all__ = [
    "BaseCacheStore",
    "FileCacheStore",
    "FlagSnapshot",
    "FlagTransport",
    "FlagValue",
    "NullCacheStore",
    "PhlagClient",
    "build_cache_store",
    "derive_cache_location",
    "is_file_cache_available",
]
