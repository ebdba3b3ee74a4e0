from pydantic import AnyUrl, AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    SERVICE_PORT: int = 8080
    MAX_EVENT_SIZE: int = 65536
    LOG_JSON: bool = True
    # Store backend selection: "memory" or "redis"
    STORE_ADAPTER: Literal["memory", "redis"] = "memory"
    REDIS_URL: AnyUrl | None = None
    REDIS_KEY_PREFIX: str = "channelgate"
    # Table every direct-resolution namespace writes to
    CHANNEL_TABLE: str = "sample-table"
    # Channel namespaces, comma-separated
    DIRECT_NAMESPACES: str = "bar"
    COMPUTE_NAMESPACES: str = "foo"
    # External compute endpoint for COMPUTE_NAMESPACES
    COMPUTE_ENDPOINT_URL: AnyHttpUrl | None = None
    COMPUTE_TIMEOUT_SECONDS: float = 60.0

    def direct_namespaces(self) -> list[str]:
        return _split(self.DIRECT_NAMESPACES)

    def compute_namespaces(self) -> list[str]:
        return _split(self.COMPUTE_NAMESPACES)


def _split(value: str) -> list[str]:
    return [part.strip().strip("/") for part in value.split(",") if part.strip().strip("/")]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
