from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TIMEOUT = 10.0
DEFAULT_CACHE_TTL = 300


class ClientConfig(BaseModel):
    """
    Immutable per-client configuration.

    A client never changes its configuration after construction. Querying a
    different environment means deriving a new config (and a new client).
    """

    base_url: str = Field(min_length=1)
    api_key: str = Field(min_length=1)
    environment: str = Field(min_length=1)
    # Seconds
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    cache: bool = False
    cache_file: str | None = None
    # Seconds; 0 makes every cache file count as expired
    cache_ttl: int = Field(default=DEFAULT_CACHE_TTL, ge=0)
    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("base_url", "environment")
    @classmethod
    def _strip_whitespace(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

