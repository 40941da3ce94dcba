"""
File-backed flag cache.

One JSON object per (server, environment) pair holds the complete flag
snapshot. Freshness comes from the file's modification time; the document
itself carries no timestamp. The cache is a pure optimization: reads fail
closed and write failures are logged, never raised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import hashlib
import json
import os
from pathlib import Path
import sys
import tempfile
import time
import uuid

import aiofiles

from phlag_client.config.schema import ClientConfig
from phlag_client.logging import get_logger

from .types import FlagSnapshot, is_flag_snapshot

logger = get_logger("FlagCache")

CACHE_FILE_PREFIX = "phlag_cache_"
MEMORY_ONLY_ENV = "PHLAG_MEMORY_ONLY_CACHE"
_NO_FILESYSTEM_PLATFORMS = ("emscripten", "wasi")


def derive_cache_location(base_url: str, environment: str, override: str | None = None) -> str:
    """
    Work out where the cache file for a server/environment pair lives.

    An override is used verbatim. Otherwise the name is an MD5 digest of
    ``"{base_url}|{environment}"`` inside the system temp directory, so every
    client pointed at the same pair shares one file.

    Args:
        base_url: Phlag server base URL
        environment: Environment name
        override: Explicit cache file path

    Returns:
        Absolute path of the cache file (it may not exist yet)
    """
    if override:
        return override

    digest = hashlib.md5(f"{base_url}|{environment}".encode("utf-8")).hexdigest()
    return os.path.join(tempfile.gettempdir(), f"{CACHE_FILE_PREFIX}{digest}.json")


def is_file_cache_available() -> bool:
    """Whether this runtime can persist the cache to a local filesystem."""
    if sys.platform in _NO_FILESYSTEM_PLATFORMS:
        return False
    return os.getenv(MEMORY_ONLY_ENV, "").lower() not in ("true", "1", "yes", "on")


class BaseCacheStore(ABC):
    """Contract for durable snapshot storage."""

    location: str

    @abstractmethod
    async def read(self, ttl: float) -> FlagSnapshot | None:
        """Return the stored snapshot, or None when missing, invalid or expired."""
        ...

    @abstractmethod
    async def write(self, snapshot: FlagSnapshot) -> bool:
        """Persist a snapshot. Returns False on failure instead of raising."""
        ...

    @abstractmethod
    async def delete(self) -> bool:
        """Remove the stored snapshot. A missing record is not a failure."""
        ...


class NullCacheStore(BaseCacheStore):
    """Store for memory-only runtimes: always misses, never persists."""

    def __init__(self, location: str):
        self.location = location

    async def read(self, ttl: float) -> FlagSnapshot | None:
        return None

    async def write(self, snapshot: FlagSnapshot) -> bool:
        return False

    async def delete(self) -> bool:
        return True


class FileCacheStore(BaseCacheStore):
    """
    Stores a flag snapshot as a JSON file.

    Writes go to a process-unique temporary sibling first and are then moved
    over the final path, so a reader sees either the previous document or the
    new one. When several processes write concurrently the last one wins,
    which is fine since all of them fetched the same upstream data.
    """

    def __init__(self, location: str | Path):
        self.location = str(location)
        self._path = Path(location)

    def _temp_path(self) -> Path:
        # Unique per process and per write so concurrent loads never share it
        return self._path.with_name(f"{self._path.name}.{os.getpid()}.{uuid.uuid4().hex[:8]}.tmp")

    async def read(self, ttl: float) -> FlagSnapshot | None:
        """
        Load the cached snapshot if it is younger than ``ttl`` seconds.

        Any doubt about the file (missing, unreadable, not JSON, not an
        object, too old) yields None so the caller goes back to the API.
        """
        try:
            stat = await asyncio.to_thread(self._path.stat)
            age = time.time() - stat.st_mtime
            if age >= ttl:
                logger.debug(f"Cache file expired ({age:.1f}s >= {ttl}s): {self.location}")
                return None

            async with aiofiles.open(self._path, encoding="utf-8") as f:
                content = await f.read()
            data = json.loads(content)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable cache file {self.location}: {e}")
            return None

        if not is_flag_snapshot(data):
            logger.debug(f"Ignoring cache file that is not a flag snapshot: {self.location}")
            return None

        logger.debug(f"Loaded {len(data)} flags from {self.location}")
        return data

    async def write(self, snapshot: FlagSnapshot) -> bool:
        """
        Replace the cache file with ``snapshot``.

        Failures (permissions, full disk, a directory vanishing underneath)
        are logged and reported through the return value only.
        """
        tmp_path = self._temp_path()
        try:
            payload = json.dumps(snapshot, ensure_ascii=False)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await asyncio.to_thread(self._path.unlink, missing_ok=True)
            await asyncio.to_thread(tmp_path.replace, self._path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Unable to write cache file {self.location}: {e}")
            return False
        finally:
            await asyncio.to_thread(_discard, tmp_path)

        logger.debug(f"Wrote {len(snapshot)} flags to {self.location}")
        return True

    async def delete(self) -> bool:
        try:
            await asyncio.to_thread(self._path.unlink, missing_ok=True)
        except OSError as e:
            logger.warning(f"Unable to delete cache file {self.location}: {e}")
            return False
        return True


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.debug(f"Could not remove temporary cache file {path}")


def build_cache_store(config: ClientConfig, file_cache: bool | None = None) -> BaseCacheStore:
    """
    Pick the store for a client.

    Args:
        config: Client configuration
        file_cache: Force the filesystem capability on or off; None detects it

    Returns:
        FileCacheStore when caching is enabled and files can be used,
        NullCacheStore otherwise
    """
    location = derive_cache_location(config.base_url, config.environment, config.cache_file)
    if file_cache is None:
        file_cache = is_file_cache_available()

    if config.cache and file_cache:
        return FileCacheStore(location)
    return NullCacheStore(location)
