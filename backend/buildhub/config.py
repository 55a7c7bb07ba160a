"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Notification delivery is bounded: notify_max_attempts x notify_timeout_seconds

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - matrix_axis_keys is configurable, defaulting to the classic rvm/gemfile/env vocabulary
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://buildhub:buildhub@db:5432/buildhub"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Build matrix
    matrix_axis_keys: list[str] = ["rvm", "gemfile", "env"]

    # Pub/sub (Pusher-compatible REST API)
    pubsub_url: str = "https://api.pusherapp.com"
    pubsub_app_id: str = "buildhub"
    pubsub_key: str = "pubsub-key-placeholder"
    pubsub_secret: str = "pubsub-secret-placeholder"
    pubsub_channel: str = "repositories"
    notify_max_attempts: int = 3
    notify_timeout_seconds: float = 5.0
    notify_base_delay_ms: int = 200
    notify_max_delay_ms: int = 2_000

    @property
    def notify_deadline_seconds(self) -> float:
        """Upper bound on one dispatch: every attempt times out and backs off fully."""
        per_attempt = self.notify_timeout_seconds + self.notify_max_delay_ms * 1.25 / 1000
        return per_attempt * self.notify_max_attempts

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
