from .schema import DEFAULT_CACHE_TTL, DEFAULT_TIMEOUT, ClientConfig
from .settings import build_client_config, load_client_config

__all__ = [
    "ClientConfig",
    "DEFAULT_CACHE_TTL",
    "DEFAULT_TIMEOUT",
    "build_client_config",
    "load_client_config",
]
