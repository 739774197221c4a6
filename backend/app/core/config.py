from typing import Literal

from pydantic import HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "docsandbox"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    SENTRY_DSN: HttpUrl | None = None

    # Sandbox: which script dialect transform scripts are written in.
    SANDBOX_ENGINE: Literal["javascript", "python"] = "javascript"
    # Per-invocation wall-clock budget in milliseconds. None = unbounded.
    SANDBOX_TIMEOUT_MS: int | None = None
    # Per-context heap cap in bytes (javascript only). None = engine default.
    SANDBOX_MAX_MEMORY_BYTES: int | None = None

    # Server config JSON holding the per-tenant identity factory script.
    SERVER_CONFIG_FILE: str = "server-config.json"


settings = Settings()  # type: ignore
