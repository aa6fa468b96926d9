from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # DB
    database_url: str = Field(
        default="sqlite+pysqlite:///./chpp_snapshot.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = False

    log_level: str = "INFO"

    # Fetch / retry policy
    max_retries: int = 3
    retry_initial_backoff_s: float = 1.0
    retry_max_backoff_s: float = 32.0
    fetch_workers: int = 4

    # Promotion / retention
    retention_keep_previous: int = 2
    allow_partial_promotion: bool = False
    abandoned_after_hours: int = 24

    # HTTP (avatars)
    avatar_base_url: str = "https://www.hattrick.org"
    http_timeout_s: float = 30.0
    http_connect_timeout_s: float = 10.0


settings = Settings()
