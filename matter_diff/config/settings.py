# matter_diff/config/settings.py

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "matter-diff"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Backend (system of record) ---
    backend_api_url: str
    backend_timeout_seconds: float = Field(10.0, gt=0, le=120)

    # --- Diff store (Redis) ---
    redis_url: str
    store_timeout_seconds: float = Field(5.0, gt=0, le=60)

    # --- Correlation ---
    actor_header: str = "X-User-ID"
    # Await the correlation worker inside the request when the host cannot run post-response work.
    correlation_inline: bool = False
    shutdown_drain_seconds: float = Field(5.0, ge=0, le=60)

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
