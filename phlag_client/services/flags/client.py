# -*- coding: utf-8 -*-
"""
Phlag Client
============

Primary entry point for reading feature flags from a Phlag server. The
environment is fixed at construction; use with_environment() to query
another one.

With caching enabled the client fetches every flag of the environment once
through the all-flags endpoint and answers later lookups from memory. The
snapshot is also persisted to a cache file (when the runtime has a
filesystem) so other processes pointed at the same server and environment
skip the fetch until the file is older than the TTL. Flag changes on the
server are therefore not visible until the cache expires or is cleared.

Usage:
    config = ClientConfig(
        base_url="http://localhost:8000",
        api_key="your-api-key",
        environment="production",
        cache=True,
    )
    async with PhlagClient(config) as flags:
        if await flags.is_enabled("feature_checkout"):
            ...
        max_items = await flags.get_flag("max_items")  # int or None
"""

from __future__ import annotations

from types import TracebackType

from phlag_client.config import ClientConfig, build_client_config, load_client_config
from phlag_client.logging import get_logger

from .cache import BaseCacheStore, build_cache_store
from .http_client import FlagTransport
from .types import FlagSnapshot, FlagValue


class PhlagClient:
    """
    Feature flag client for one Phlag environment.

    Cache states are Empty (no snapshot yet, or cleared) and Loaded. The
    snapshot is only ever replaced as a whole. Two lookups that both start
    while Empty each run a load; there is no shared in-flight request.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: FlagTransport | None = None,
        file_cache: bool | None = None,
    ):
        """
        Args:
            config: Client configuration; loaded from PHLAG_* variables if omitted
            transport: Transport to use instead of building one from config
            file_cache: Force the cache-file capability on or off (None detects)

        Raises:
            PhlagConfigError: If no usable configuration is available
        """
        self.config = config or load_client_config()
        self.logger = get_logger("PhlagClient")
        self._transport = transport or FlagTransport(
            self.config.base_url,
            self.config.api_key,
            timeout=self.config.timeout,
        )
        self._file_cache = file_cache
        self._store: BaseCacheStore = build_cache_store(self.config, file_cache)
        self._flags: FlagSnapshot | None = None

        self.logger.debug(
            f"Initialized client for {self.config.environment} "
            f"(cache={self.config.cache}, store={type(self._store).__name__})"
        )

    async def __aenter__(self) -> "PhlagClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying HTTP connections."""
        await self._transport.aclose()

    async def get_flag(self, name: str) -> FlagValue:
        """
        Get the value of a flag.

        SWITCH flags return a bool; INTEGER, FLOAT and STRING flags return
        their value, or None when the flag is inactive or not configured.

        With caching enabled the value comes from the snapshot (loaded on the
        first call) and unknown names resolve to None. With caching disabled
        every call hits ``flag/{environment}/{name}``.

        Raises:
            AuthenticationError: The API key is invalid
            FlagNotFoundError: The flag does not exist (cache disabled only)
            EnvironmentNotFoundError: The environment does not exist
            NetworkError: The request timed out or could not connect
            PhlagAPIError: Any other API failure
        """
        if not self.config.cache:
            return await self._transport.fetch_one(self.config.environment, name)

        snapshot = self._flags if self._flags is not None else await self._load()
        return snapshot.get(name)

    async def is_enabled(self, name: str) -> bool:
        """
        Check whether a SWITCH flag is on.

        Only a value of exactly True counts. Querying a non-SWITCH flag here
        yields False rather than an error.
        """
        value = await self.get_flag(name)
        return value is True

    async def _load(self) -> FlagSnapshot:
        # Returns the adopted snapshot; a concurrent clear_cache may reset _flags
        cached = await self._store.read(self.config.cache_ttl)
        if cached is not None:
            self._flags = cached
            self.logger.debug(f"Cache hit for {self.config.environment} ({len(cached)} flags)")
            return cached

        flags = await self._transport.fetch_all(self.config.environment)
        self._flags = flags
        self.logger.info(f"Loaded {len(flags)} flags for {self.config.environment}")

        await self._store.write(flags)
        return flags

    async def warm_cache(self) -> None:
        """
        Load the snapshot now instead of on the first lookup.

        Always runs a load, even when a snapshot is already in memory. No-op
        when caching is disabled.
        """
        if self.config.cache:
            await self._load()

    async def clear_cache(self) -> None:
        """
        Drop the in-memory snapshot and delete the cache file.

        The next lookup fetches fresh values. No-op when caching is disabled.
        """
        if self.config.cache:
            self._flags = None
            await self._store.delete()

    def with_environment(self, environment: str) -> "PhlagClient":
        """
        Create a client for another environment.

        Server, API key, timeout and cache settings carry over; the new client
        starts with an empty snapshot and derives its own cache file. This
        client is left untouched.

        Raises:
            PhlagConfigError: If the environment name is invalid
        """
        values = self.config.model_dump()
        values.update(environment=environment, cache_file=None)
        return PhlagClient(build_client_config(**values), file_cache=self._file_cache)

    def get_environment(self) -> str:
        return self.config.environment

    def is_cache_enabled(self) -> bool:
        return self.config.cache

    def get_cache_file(self) -> str:
        """Cache file path, whether or not the file exists yet."""
        return self._store.location

    def get_cache_ttl(self) -> int:
        return self.config.cache_ttl
