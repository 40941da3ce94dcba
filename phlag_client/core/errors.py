"""
Exception hierarchy for the Phlag client.

Every failure raised by the client derives from PhlagError so callers can
catch everything at once, or branch on the specific subclass:

- AuthenticationError: the API key was rejected (401)
- FlagNotFoundError: the single-flag endpoint does not know the flag (404)
- EnvironmentNotFoundError: the environment does not exist (404)
- NetworkError: timeout, refused connection or other transport fault
- PhlagAPIError: any other non-success HTTP status

A flag value of None is never an error; it means the flag is inactive or
not configured for the environment.
"""

from __future__ import annotations

from typing import Any


class PhlagError(Exception):
    """Base class for all Phlag client errors."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    @property
    def is_retryable(self) -> bool:
        """Whether the caller may reasonably retry the request."""
        return False

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class PhlagConfigError(PhlagError):
    """Raised when the client configuration is missing or invalid."""

    pass


class AuthenticationError(PhlagError):
    """
    Raised when the API key is invalid or has been revoked.

    Check that the client uses the key issued by the Phlag admin.
    """

    def __init__(self, message: str = "Invalid API key", details: dict[str, Any] | None = None):
        super().__init__(message, code=401, details=details)


class FlagNotFoundError(PhlagError):
    """
    Raised when the single-flag endpoint reports an unknown flag.

    Only raised with caching disabled. With caching enabled a missing flag
    simply resolves to None.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code=404, details=details)


class EnvironmentNotFoundError(PhlagError):
    """Raised when the requested environment is not configured on the server."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code=404, details=details)


class NetworkError(PhlagError):
    """
    Raised when the request never produced an HTTP response.

    Covers timeouts, DNS failures and refused connections. The underlying
    exception, when there is one, is kept on ``cause``.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause

    @property
    def is_retryable(self) -> bool:
        return True


class PhlagAPIError(PhlagError):
    """Raised for any other non-success HTTP status; ``code`` holds the status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=status_code, details=details)

    @property
    def status_code(self) -> int | None:
        return self.code

    @property
    def is_retryable(self) -> bool:
        if self.code is None:
            return False
        return self.code >= 500


# Names used by the Phlag service documentation
InvalidFlagError = FlagNotFoundError
InvalidEnvironmentError = EnvironmentNotFoundError


__all__ = [
    "PhlagError",
    "PhlagConfigError",
    "AuthenticationError",
    "FlagNotFoundError",
    "EnvironmentNotFoundError",
    "NetworkError",
    "PhlagAPIError",
    "InvalidFlagError",
    "InvalidEnvironmentError",
]
