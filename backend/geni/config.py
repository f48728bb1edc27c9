"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - jwt_secret has no usable default; token signing and report encryption
      refuse to run with an empty secret

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "postgresql+asyncpg://geni:geni@db:5432/geni"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Managed Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Session tokens + report encryption (same secret, different derivations)
    jwt_secret: str = ""
    token_expiry_days: int = 7
    kdf_iterations: int = 310_000

    # Auth cookie
    auth_cookie_name: str = "geni_auth"
    auth_cookie_secure: bool = True

    # Magic links
    magic_link_expiry_minutes: int = 15

    # Resend (email)
    resend_api_key: str = ""
    resend_base_url: str = "https://api.resend.com"
    from_email: str = "support@geni.health"
    app_base_url: str = "http://localhost:5173"

    # Polar (purchases)
    polar_access_token: str = ""
    polar_mode: Literal["sandbox", "production"] = "production"

    # Outbound HTTP
    http_timeout_seconds: float = 15.0
    http_max_retries: int = 3
    http_base_delay_ms: int = 500
    http_max_delay_ms: int = 8_000

    # Reports
    max_upload_bytes: int = 50 * 1024 * 1024
    preview_insight_count: int = 3

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def polar_base_url(self) -> str:
        if self.polar_mode == "sandbox":
            return "https://sandbox-api.polar.sh"
        return "https://api.polar.sh"


@lru_cache
def get_settings() -> Settings:
    return Settings()
