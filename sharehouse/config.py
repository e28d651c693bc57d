"""Settings shared by the users, spaces and bookings services."""
from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Read from the environment, then from ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # storage
    database_url: str = Field(
        default="sqlite:///./sharehouse.db",
        description="SQLAlchemy URL of the house database. PostgreSQL in deployment.",
    )
    run_db_migrations: bool = Field(default=False, description="Create missing tables when a service starts.")

    # residents' sessions
    jwt_secret: str = Field(default="super-secret", description="Secret signing resident session tokens")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60, description="Session token lifetime in minutes")

    # HTTP surface
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    default_rate_limit: str = Field(default="30/minute", description="Limit applied to routes without their own")
    rate_limiting_enabled: bool = Field(default=True, description="Turn SlowAPI off, e.g. under pytest")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics on /metrics")
    log_dir: str = Field(default="logs", description="Directory receiving one audit log per service")
    space_cache_ttl: int = Field(default=60, description="Seconds a shared space listing is served from cache")

    # booking events
    notifications_backend: Literal["rabbitmq", "memory", "disabled"] = Field(default="rabbitmq")
    rabbitmq_host: str = Field(default="rabbitmq")
    rabbitmq_queue: str = Field(default="booking-events", description="Durable queue receiving booking events")

    # display
    display_timezone: str = Field(
        default="Asia/Tokyo",
        description="Zone of the local time strings in booking views. Working hours are checked in UTC.",
    )
    range_padding_days: int = Field(default=1, ge=0, description="Days added on each side of a range listing")
    media_base_url: str = Field(default="http://localhost:9000/sharehouse", description="Prefix of stored picture keys")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""

    get_settings.cache_clear()
