"""Configuration management for the Todo API.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SeedUser(BaseModel):
    """An identity entry for the credential store.

    Either ``password_hash`` (an Argon2id hash, see ``todoapi hash-password``)
    or ``password`` must be given. A plaintext password is hashed once when
    the store is built and is never kept on the resulting identity.
    """

    id: int
    username: str = Field(..., min_length=1)
    password_hash: str | None = None
    password: str | None = None
    roles: list[str] = Field(default_factory=list)
    enabled: bool = True

    @model_validator(mode="after")
    def validate_secret(self) -> "SeedUser":
        """Require exactly one way of deriving the password hash."""
        if not self.password_hash and not self.password:
            raise ValueError(f"User '{self.username}' needs a password_hash or a password")
        return self


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TODOAPI_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "Todo API"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8080
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./data/todos.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_echo: bool = False

    # JWT Settings
    secret_key: str = Field(
        default="change-me-in-production-use-openssl-rand-hex-32",
        description="Process-wide secret for JWT signing",
    )
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    token_lifetime_seconds: int = 5 * 60 * 60
    refresh_grace_seconds: int = 60 * 60
    refresh_max_age_seconds: int = 7 * 24 * 60 * 60
    token_leeway_seconds: int = 0
    token_uri: str = "/authenticate"
    refresh_token_uri: str = "/refresh"
    token_header: str = "Authorization"

    # Identity Settings
    users: list[SeedUser] = Field(default_factory=list)
    users_file: str | None = Field(
        default=None,
        description="JSON file with identities; re-read when it changes",
    )

    # CORS Settings
    cors_origins: list[str] = Field(default=["http://localhost:4200"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Reject an empty signing secret."""
        if not v:
            raise ValueError("secret_key must not be empty")
        return v

    @field_validator("token_lifetime_seconds", "refresh_max_age_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Lifetimes must be positive."""
        if v <= 0:
            raise ValueError("must be a positive number of seconds")
        return v

    @field_validator("refresh_grace_seconds", "token_leeway_seconds")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Grace and leeway may be zero but not negative."""
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("token_uri", "refresh_token_uri")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Endpoint paths are absolute."""
        if not v.startswith("/"):
            raise ValueError("endpoint paths must start with '/'")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
