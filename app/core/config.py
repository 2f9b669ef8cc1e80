from __future__ import annotations

from typing import Any, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CACHE_DAYS = 10
SECONDS_PER_DAY = 86400


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    # Comma-separated list of accepted client credentials
    secret_key: str = ""

    # Redis
    redis_url: Optional[str] = None
    redis_token: Optional[str] = None
    redis_cache_days: int = DEFAULT_CACHE_DAYS

    # HTTP fetcher
    http_timeout: float = 15.0
    http_verify_ssl: bool = True
    fetch_user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/114.0.0.0 Safari/537.36"
    )
    fetch_challenge_retries: int = 2

    # Share one fetch/extract cycle between concurrent misses on the same URL
    coalesce_requests: bool = False

    environment: str = "development"

    # Logging
    log_level: str = "INFO"

    @field_validator("redis_cache_days", mode="before")
    @classmethod
    def _fallback_cache_days(cls, value: Any) -> int:
        """Bad or missing values fall back to the default instead of failing."""
        try:
            days = int(value)
        except (TypeError, ValueError):
            return DEFAULT_CACHE_DAYS
        return days if days > 0 else DEFAULT_CACHE_DAYS

    @property
    def credentials(self) -> frozenset[str]:
        return frozenset(k.strip() for k in self.secret_key.split(",") if k.strip())

    @property
    def cache_ttl_seconds(self) -> int:
        return self.redis_cache_days * SECONDS_PER_DAY

    @property
    def redis_configured(self) -> bool:
        return bool(self.redis_url)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
