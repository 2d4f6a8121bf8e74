"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEVELOPMENT_JWT_SECRET = "dev-only-change-me"


class Settings(BaseSettings):
    """Environment-driven configuration for the API and its tooling."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = Field(default="development", description="development, test or production")
    database_url: str = Field(
        default="sqlite:///./gymhub.db",
        description="SQLAlchemy database URL. Defaults to local SQLite for development.",
    )
    run_db_migrations: bool = Field(
        default=True,
        description="Whether the API should create missing database tables on startup.",
    )
    jwt_secret: str = Field(default=DEVELOPMENT_JWT_SECRET, description="JWT signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(default=24 * 60, description="Token lifetime in minutes")
    port: int = Field(default=3001, description="Listening port for the API server")
    frontend_url: Optional[str] = Field(default=None, description="Deployed frontend origin")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "https://localhost:5173"],
        description="Allowed CORS origins",
    )
    default_rate_limit: str = Field(default="120/minute", description="Global rate limiting rule")
    login_rate_limit: str = Field(default="10/minute", description="Rate limit for login endpoints")
    request_rate_limit: str = Field(default="5/minute", description="Rate limit for public membership requests")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    trust_proxy_headers: bool = Field(
        default=False, description="Throttle on the first X-Forwarded-For hop instead of the peer address"
    )
    stats_cache_ttl: int = Field(default=30, description="TTL (s) for cached dashboard statistics")
    marketplace_cache_ttl: int = Field(default=60, description="TTL (s) for the cached public gym listing")
    log_dir: str = Field(default="logs", description="Directory for audit log files")
    log_level: str = Field(default="INFO", description="Console log level for application modules")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics on /metrics")

    @property
    def allowed_origins(self) -> List[str]:
        origins = list(self.cors_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate_for_startup(self) -> None:
        """Refuse to boot a production deployment on development defaults."""

        if self.is_production and self.jwt_secret == DEVELOPMENT_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be set explicitly in production")


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
