import logging
import os
from typing import Any, Callable, Generator
from unittest.mock import patch

import httpx
import pytest

from phlag_client.config import ClientConfig
from phlag_client.logging import ROOT_LOGGER_NAME, shutdown_logging
from phlag_client.services.flags import FlagTransport

BASE_URL = "http://phlag.test/api"
API_KEY = "a" * 64


@pytest.fixture(autouse=True)
def isolated_env() -> Generator[None, None, None]:
    """
    Run every test without PHLAG_* variables from the real environment.

    patch.dict restores os.environ afterwards, including anything a .env
    file loaded during the test.
    """
    with patch.dict(os.environ):
        for key in [k for k in os.environ if k.startswith("PHLAG_")]:
            del os.environ[key]
        yield


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    yield
    shutdown_logging()
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.NOTSET)


@pytest.fixture
def cache_file(tmp_path) -> str:
    return str(tmp_path / "flags.json")


@pytest.fixture
def make_config() -> Callable[..., ClientConfig]:
    def _make(**overrides: Any) -> ClientConfig:
        values: dict[str, Any] = {
            "base_url": BASE_URL,
            "api_key": API_KEY,
            "environment": "production",
        }
        values.update(overrides)
        return ClientConfig(**values)

    return _make


class RecordingHandler:
    """httpx MockTransport handler that records requests and replays responses."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def make_transport() -> Callable[..., tuple[FlagTransport, RecordingHandler]]:
    def _make(
        responder: Callable[[httpx.Request], httpx.Response],
        base_url: str = BASE_URL,
        timeout: float = 10.0,
    ) -> tuple[FlagTransport, RecordingHandler]:
        handler = RecordingHandler(responder)
        transport = FlagTransport(
            base_url,
            API_KEY,
            timeout=timeout,
            transport=httpx.MockTransport(handler),
        )
        return transport, handler

    return _make
