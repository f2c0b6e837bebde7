"""MovieCatalog Configuration - environment-driven settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SECRET_LENGTH = 16


class Settings(BaseSettings):
    """Application settings loaded from environment variables (or .env)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "MovieCatalog"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    log_format: Literal["structured", "dev"] = "dev"

    # Database
    database_url: str = "sqlite+aiosqlite:///./moviecatalog.db"
    db_echo: bool = False

    # JWT - access and refresh tokens are signed with distinct secrets
    access_token_secret: str = Field(..., description="Secret for signing access tokens")
    refresh_token_secret: str = Field(..., description="Secret for signing refresh tokens")
    jwt_algorithm: str = "HS256"
    access_token_expire_seconds: int = Field(default=300, ge=1)
    refresh_token_expire_hours: int = Field(default=24, ge=1)
    # Verified payloads are cached until this many seconds before token expiry
    verified_cache_margin_seconds: int = Field(default=30, ge=0)

    # Pagination
    pagination_default_take: int = Field(default=10, ge=1)
    pagination_max_take: int = Field(default=100, ge=1)

    # Cache
    recent_movies_cache_ttl_ms: int = Field(default=1000, ge=1)
    cache_cleanup_interval_seconds: int = Field(default=300, ge=1)

    # CORS
    cors_origins: str = "http://localhost:3000"

    @field_validator("access_token_secret", "refresh_token_secret")
    @classmethod
    def validate_secret_length(cls, v: str) -> str:
        if len(v) < MIN_SECRET_LENGTH:
            raise ValueError(f"Token secrets must be at least {MIN_SECRET_LENGTH} characters")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def check_security_configuration(self) -> list[str]:
        """Return warnings for insecure but technically valid settings."""
        warnings: list[str] = []
        if self.access_token_secret == self.refresh_token_secret:
            warnings.append(
                "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET have the same value; "
                "a leaked access secret would also forge refresh tokens"
            )
        if self.debug:
            warnings.append("DEBUG is enabled; API docs are exposed")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


settings = get_settings()
