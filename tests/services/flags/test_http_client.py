"""Tests for the Phlag HTTP transport."""

import asyncio
import time

import httpx
import pytest

from phlag_client.core.errors import (
    AuthenticationError,
    EnvironmentNotFoundError,
    FlagNotFoundError,
    NetworkError,
    PhlagAPIError,
)
from phlag_client.services.flags import FlagTransport


@pytest.mark.asyncio
async def test_fetch_one_decodes_json(make_transport):
    """Scenario A: a body of `true` becomes the boolean True."""
    transport, handler = make_transport(lambda request: httpx.Response(200, text="true"))

    assert await transport.fetch_one("production", "feature_x") is True
    assert handler.paths == ["/api/flag/production/feature_x"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ("42", 42),
        ("3.5", 3.5),
        ('"blue"', "blue"),
        ("null", None),
        ("", None),
        ("not json", "not json"),
    ],
)
async def test_fetch_one_value_types(make_transport, body, expected):
    transport, _ = make_transport(lambda request: httpx.Response(200, text=body))
    assert await transport.fetch_one("production", "flag") == expected


@pytest.mark.asyncio
async def test_request_headers(make_transport):
    transport, handler = make_transport(lambda request: httpx.Response(200, text="true"))
    await transport.fetch_one("production", "feature_x")

    request = handler.requests[0]
    assert request.method == "GET"
    assert request.headers["Authorization"] == f"Bearer {'a' * 64}"
    assert request.headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_base_url_trailing_slash_and_prefix(make_transport):
    transport, handler = make_transport(
        lambda request: httpx.Response(200, json={}),
        base_url="http://phlag.test/services/phlag/",
    )
    await transport.fetch_all("production")
    assert handler.paths == ["/services/phlag/all-flags/production"]


@pytest.mark.asyncio
async def test_path_segments_are_encoded(make_transport):
    transport, handler = make_transport(lambda request: httpx.Response(200, text="1"))
    await transport.fetch_one("prod eu", "a/b")
    assert handler.requests[0].url.raw_path == b"/api/flag/prod%20eu/a%2Fb"


@pytest.mark.asyncio
async def test_fetch_all_returns_snapshot(make_transport):
    transport, handler = make_transport(
        lambda request: httpx.Response(200, json={"a": True, "b": 5, "c": None})
    )
    assert await transport.fetch_all("production") == {"a": True, "b": 5, "c": None}
    assert handler.paths == ["/api/all-flags/production"]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["[1, 2]", "true", ""])
async def test_fetch_all_rejects_non_objects(make_transport, body):
    transport, _ = make_transport(lambda request: httpx.Response(200, text=body))
    with pytest.raises(PhlagAPIError, match="Malformed response"):
        await transport.fetch_all("production")


@pytest.mark.asyncio
async def test_401_raises_authentication_error(make_transport):
    transport, _ = make_transport(lambda request: httpx.Response(401))
    with pytest.raises(AuthenticationError) as exc_info:
        await transport.fetch_one("production", "feature_x")
    assert exc_info.value.code == 401


@pytest.mark.asyncio
async def test_404_on_flag_endpoint(make_transport):
    """Scenario B: 404 on flag/prod/missing is a missing flag."""
    transport, _ = make_transport(lambda request: httpx.Response(404))
    with pytest.raises(FlagNotFoundError, match="flag/prod/missing"):
        await transport.fetch_one("prod", "missing")


@pytest.mark.asyncio
async def test_404_on_bulk_endpoint(make_transport):
    transport, _ = make_transport(lambda request: httpx.Response(404))
    with pytest.raises(EnvironmentNotFoundError, match="all-flags/nowhere"):
        await transport.fetch_all("nowhere")


@pytest.mark.asyncio
async def test_other_status_raises_api_error(make_transport):
    transport, _ = make_transport(lambda request: httpx.Response(503, text="maintenance"))
    with pytest.raises(PhlagAPIError) as exc_info:
        await transport.fetch_all("production")

    assert exc_info.value.code == 503
    assert "maintenance" in exc_info.value.message
    assert exc_info.value.is_retryable


@pytest.mark.asyncio
async def test_timeout_raises_network_error(make_transport):
    def _timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    transport, _ = make_transport(_timeout, timeout=1.5)
    with pytest.raises(NetworkError, match="timeout after 1.5s") as exc_info:
        await transport.fetch_one("production", "feature_x")
    assert isinstance(exc_info.value.cause, httpx.ReadTimeout)


@pytest.mark.asyncio
async def test_timeout_bounds_slow_body():
    """A server trickling its body must not outlast the configured timeout."""
    body = b'{"a": true, "b": 12}'
    handlers = []

    async def _trickle(reader, writer):
        handlers.append(asyncio.current_task())
        await reader.readuntil(b"\r\n\r\n")
        writer.write(
            b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
            + f"Content-Length: {len(body)}\r\n\r\n".encode()
        )
        try:
            for byte in body:
                writer.write(bytes([byte]))
                await writer.drain()
                await asyncio.sleep(0.3)
        except ConnectionError:
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(_trickle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    client = httpx.AsyncClient(trust_env=False)
    transport = FlagTransport(f"http://127.0.0.1:{port}", "key", timeout=1.0, client=client)
    try:
        started = time.monotonic()
        with pytest.raises(NetworkError, match="timeout after 1s"):
            await transport.fetch_all("production")
        assert time.monotonic() - started < 3.0
    finally:
        await client.aclose()
        for task in handlers:
            task.cancel()
        await asyncio.gather(*handlers, return_exceptions=True)
        server.close()
        await server.wait_closed()


@pytest.mark.asyncio
async def test_connection_error_raises_network_error(make_transport):
    def _refused(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport, _ = make_transport(_refused)
    with pytest.raises(NetworkError, match="connection refused"):
        await transport.fetch_all("production")


@pytest.mark.asyncio
async def test_aclose_and_reopen(make_transport):
    transport, handler = make_transport(lambda request: httpx.Response(200, text="1"))
    await transport.fetch_one("production", "a")
    await transport.aclose()

    # A closed transport builds a fresh client on the next request
    assert await transport.fetch_one("production", "a") == 1
    assert len(handler.requests) == 2
    await transport.aclose()


@pytest.mark.asyncio
async def test_injected_client_is_not_closed():
    from phlag_client.services.flags import FlagTransport

    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, text="1")))
    transport = FlagTransport("http://phlag.test", "key", client=client)

    assert await transport.fetch_one("production", "a") == 1
    await transport.aclose()
    assert not client.is_closed
    await client.aclose()
