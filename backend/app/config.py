from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    # Webex API Configuration
    webex_token: Optional[str] = None
    webex_base_url: str = "https://webexapis.com/v1"
    webex_api_version: str = "v1"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: str = "public"
    cors_origins: List[str] = ["*"]
    verify_on_startup: bool = True
    log_level: str = "INFO"

    # Upstream request behaviour
    request_timeout_seconds: float = 30.0
    max_retries: int = 2
    rate_limit_retry_delay: float = 2.0  # seconds, after a 429
    server_error_retry_delay: float = 1.0  # seconds, after a 5xx

    # Result limits
    default_limit: int = 100
    upstream_max_limit: int = 1000

    @field_validator("port")
    @classmethod
    def _check_port_range(cls, value: int) -> int:
        if not 0 <= value <= 65535:
            raise ValueError(f"PORT must be between 0 and 65535, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got {value}")
        return level

    @property
    def has_token(self) -> bool:
        return bool(self.webex_token and self.webex_token.strip())

    @property
    def masked_token(self) -> str:
        """First characters of the token, for log lines."""
        if not self.has_token:
            return "<not set>"
        return f"{self.webex_token[:10]}..."

    def clamp_limit(self, limit: Optional[int]) -> int:
        """Apply the default and the upstream maximum to a requested page size."""
        if limit is None:
            limit = self.default_limit
        return min(limit, self.upstream_max_limit)

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
