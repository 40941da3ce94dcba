"""Map HTTP responses and httpx failures to Phlag exceptions."""

from __future__ import annotations

import asyncio

import httpx

from phlag_client.core.errors import (
    AuthenticationError,
    EnvironmentNotFoundError,
    FlagNotFoundError,
    NetworkError,
    PhlagAPIError,
    PhlagError,
)
from phlag_client.logging import get_logger

logger = get_logger("ErrorMapping")

FLAG_ENDPOINT_PREFIX = "flag/"


def map_status_error(status_code: int, endpoint: str, body: str = "") -> PhlagError:
    """
    Build the exception for a non-success response.

    A 404 means different things per endpoint shape: on ``flag/...`` the flag
    is unknown, anywhere else the environment is.

    Args:
        status_code: HTTP status of the response
        endpoint: Relative endpoint that was requested
        body: Response text, appended to generic errors

    Returns:
        The exception to raise
    """
    if status_code == 401:
        return AuthenticationError("Invalid API key", details={"endpoint": endpoint})

    if status_code == 404:
        if endpoint.startswith(FLAG_ENDPOINT_PREFIX):
            return FlagNotFoundError(f"Flag not found: {endpoint}")
        return EnvironmentNotFoundError(f"Environment not found: {endpoint}")

    message = f"HTTP error {status_code}"
    if body:
        message += f": {body}"
    return PhlagAPIError(message, status_code=status_code)


def map_transport_error(exc: BaseException, timeout: float) -> BaseException:
    """
    Map a failure raised while sending a request.

    Notes:
        - PhlagError instances are returned unchanged.
        - Timeouts become NetworkError so callers never hang or see httpx types.
        - Programming errors (KeyError/TypeError/...) are surfaced as-is.
    """
    if isinstance(exc, PhlagError):
        return exc

    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return NetworkError(f"Request timeout after {timeout:g}s", cause=exc)

    if isinstance(exc, (httpx.HTTPError, OSError)):
        return NetworkError(f"Network error: {exc}", cause=exc)

    logger.debug(f"Not mapping unexpected {type(exc).__name__}: {exc}")
    return exc
