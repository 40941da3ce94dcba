"""Async HTTP transport for the Phlag API."""

from __future__ import annotations

import asyncio
import json
from urllib.parse import quote

import httpx

from phlag_client.core.errors import PhlagAPIError
from phlag_client.logging import get_logger

from .error_mapping import map_status_error, map_transport_error
from .types import FlagSnapshot, FlagValue

logger = get_logger("Transport")


class FlagTransport:
    """
    Thin wrapper over ``httpx.AsyncClient`` for the two Phlag endpoints.

    - ``fetch_one`` → ``GET {base_url}/flag/{environment}/{name}``
    - ``fetch_all`` → ``GET {base_url}/all-flags/{environment}``

    The base URL is stored without its trailing slash and endpoints are
    appended as relative paths, so base URLs that include a subdirectory
    keep working. Every request carries the API key as a bearer token and is
    bounded by ``timeout`` seconds.

    Usage:
        transport = FlagTransport("https://flags.example.com", api_key, timeout=5)
        value = await transport.fetch_one("production", "feature_checkout")
        await transport.aclose()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Phlag server base URL (e.g. http://localhost:8000)
            api_key: API key for bearer authentication
            timeout: Request timeout in seconds
            client: Pre-built AsyncClient; the caller keeps ownership
            transport: httpx transport for a client built here (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._http_transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        """Returns the active client, initializing if necessary."""
        if self._client is None or self._client.is_closed:
            logger.debug(f"Initializing HTTPX client for {self.base_url}")
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._http_transport,
                follow_redirects=True,
                event_hooks={"response": [self._log_error_responses]},
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the client if this transport created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None if self._owns_client else self._client

    async def _log_error_responses(self, response: httpx.Response) -> None:
        """Network-layer observability for failed requests."""
        if response.status_code >= 400:
            await response.aread()
            logger.warning(
                f"HTTP {response.status_code} from {response.url}: "
                f"{response.text[:200]}"
            )

    async def fetch_one(self, environment: str, name: str) -> FlagValue:
        """
        Fetch a single flag value.

        Raises:
            AuthenticationError: The API key was rejected
            FlagNotFoundError: The flag does not exist
            NetworkError: Timeout or connection failure
            PhlagAPIError: Any other non-success status
        """
        endpoint = f"flag/{_segment(environment)}/{_segment(name)}"
        return await self.get(endpoint)

    async def fetch_all(self, environment: str) -> FlagSnapshot:
        """
        Fetch every flag of an environment in one request.

        Raises:
            AuthenticationError: The API key was rejected
            EnvironmentNotFoundError: The environment does not exist
            NetworkError: Timeout or connection failure
            PhlagAPIError: Any other non-success status, or a body that is
                not a JSON object
        """
        endpoint = f"all-flags/{_segment(environment)}"
        data = await self.get(endpoint)
        if not isinstance(data, dict):
            raise PhlagAPIError(
                f"Malformed response from {endpoint}: expected a JSON object",
                details={"type": type(data).__name__},
            )
        return data

    async def get(self, endpoint: str):
        """
        GET a relative endpoint and decode the body.

        Empty bodies decode to None and bodies that are not JSON are
        returned as text.
        """
        url = f"{self.base_url}/{endpoint}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

        logger.debug(f"GET {url}")
        try:
            # httpx limits each phase separately; wait_for bounds the whole exchange
            response = await asyncio.wait_for(
                self._get_client().get(url, headers=headers), timeout=self.timeout
            )
        except Exception as e:
            mapped = map_transport_error(e, self.timeout)
            if mapped is e:
                raise
            raise mapped from e

        if not response.is_success:
            raise map_status_error(response.status_code, endpoint, response.text)

        return _decode_body(response.text)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _decode_body(text: str):
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text
