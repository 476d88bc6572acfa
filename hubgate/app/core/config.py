from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _strip_token(raw: Any) -> str:
    if raw is None:
        return ""
    token = str(raw).strip()
    # Tokens pasted into .env files often keep their surrounding quotes.
    if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
        token = token[1:-1]
    return token.strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    Quota constants of the rate limiter are compiled in and not listed here.
    """

    # GitHub API settings
    github_api_base_url: str = "https://api.github.com"
    github_token: str = ""
    github_user_agent: str = "hubgate"
    github_request_timeout: float = 10.0  # Per-request timeout in seconds

    # HTTP Client connection pool settings
    httpx_connect_timeout: float = 10.0  # Time to establish connection
    httpx_read_timeout: float = 30.0  # Time to read response data
    httpx_write_timeout: float = 10.0  # Time to send request data
    httpx_pool_timeout: float = 5.0  # Time to acquire connection from pool
    httpx_keepalive_expiry: float = 30.0
    httpx_max_connections: int = 20
    httpx_max_keepalive_connections: int = 10

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator("github_token", mode="before")
    @classmethod
    def strip_github_token(cls, v: Any) -> str:
        return _strip_token(v)

    @field_validator("github_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator(
        "github_request_timeout",
        "httpx_connect_timeout",
        "httpx_read_timeout",
        "httpx_write_timeout",
        "httpx_pool_timeout",
    )
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        """Validate timeout values are positive."""
        if v <= 0:
            raise ValueError("Timeout values must be positive")
        return v

    @field_validator("httpx_max_connections", "httpx_max_keepalive_connections")
    @classmethod
    def validate_pool_size_positive(cls, v: int) -> int:
        """Validate pool sizes are positive."""
        if v < 1:
            raise ValueError("pool size values must be at least 1")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        value = v.lower()
        if value not in ("text", "structured", "json"):
            raise ValueError("log_format must be one of: text, structured, json")
        return value

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
