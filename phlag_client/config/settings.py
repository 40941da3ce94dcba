# -*- coding: utf-8 -*-
"""
Client Settings
===============

Builds a ClientConfig from PHLAG_* environment variables, after loading any
.env file found from the working directory. Variables already present in the
process environment win over the file.

    PHLAG_BASE_URL      Server base URL (may include a path prefix)
    PHLAG_API_KEY       API key sent as a bearer token
    PHLAG_ENVIRONMENT   Environment to query (e.g. production)
    PHLAG_TIMEOUT       Request timeout in seconds (default: 10)
    PHLAG_CACHE         Enable caching (true/false, default: false)
    PHLAG_CACHE_FILE    Cache file path override
    PHLAG_CACHE_TTL     Cache TTL in seconds (default: 300)
"""

import os
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from phlag_client.core.errors import PhlagConfigError
from phlag_client.logging import get_logger

from .schema import DEFAULT_CACHE_TTL, DEFAULT_TIMEOUT, ClientConfig

logger = get_logger("Settings")

ENV_PREFIX = "PHLAG_"


def _strip_value(value: str | None) -> str | None:
    """Remove leading/trailing whitespace and quotes from string."""
    if value is None:
        return None
    return value.strip().strip("\"'")


def _to_int(value: str | None, default: int) -> int:
    """Convert environment variable to int, fallback to default value on failure."""
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        logger.warning(f"Invalid integer value '{value}', defaulting to {default}")
        return default


def _to_float(value: str | None, default: float) -> float:
    """Convert environment variable to float, fallback to default value on failure."""
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        logger.warning(f"Invalid number '{value}', defaulting to {default}")
        return default


def _to_bool(value: str | None, default: bool) -> bool:
    """Convert environment variable to bool."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _env(name: str) -> str | None:
    value = _strip_value(os.getenv(f"{ENV_PREFIX}{name}"))
    return value or None


def load_client_config(env_file: str | Path | None = None, **overrides: Any) -> ClientConfig:
    """
    Load the client configuration from the environment.

    Args:
        env_file: Explicit dotenv file; defaults to the nearest .env
        **overrides: ClientConfig fields that take priority over the environment

    Returns:
        ClientConfig: Validated, immutable configuration

    Raises:
        PhlagConfigError: If a required value is missing or a value is invalid
    """
    dotenv_path = str(env_file) if env_file is not None else find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)

    values: dict[str, Any] = {
        "base_url": _env("BASE_URL"),
        "api_key": _env("API_KEY"),
        "environment": _env("ENVIRONMENT"),
        "timeout": _to_float(_env("TIMEOUT"), DEFAULT_TIMEOUT),
        "cache": _to_bool(_env("CACHE"), False),
        "cache_file": _env("CACHE_FILE"),
        "cache_ttl": _to_int(_env("CACHE_TTL"), DEFAULT_CACHE_TTL),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    missing = [
        f"{ENV_PREFIX}{key.upper()}"
        for key in ("base_url", "api_key", "environment")
        if not values.get(key)
    ]
    if missing:
        raise PhlagConfigError(
            f"Missing Phlag configuration: {', '.join(missing)}",
            details={"missing": missing},
        )

    return build_client_config(**values)


def build_client_config(**values: Any) -> ClientConfig:
    """
    Validate raw values into a ClientConfig.

    Raises:
        PhlagConfigError: If pydantic rejects any value
    """
    try:
        return ClientConfig(**values)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise PhlagConfigError(
            f"Invalid Phlag configuration: {', '.join(fields)}",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
