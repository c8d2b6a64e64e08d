"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Shipped in .env.example so a fresh checkout boots; rejected outside dev mode.
PLACEHOLDER_SECRET_KEY = "change-me-in-production"
MIN_SECRET_KEY_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")

    # Development mode - relaxes the signing secret checks for local runs
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    # Token signing - the secret signs both session and password reset tokens
    secret_key: str = Field(default=PLACEHOLDER_SECRET_KEY, validation_alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    session_token_ttl_minutes: int = Field(
        default=60, ge=1, validation_alias="SESSION_TOKEN_TTL_MINUTES",
    )
    reset_token_ttl_minutes: int = Field(
        default=15, ge=1, validation_alias="RESET_TOKEN_TTL_MINUTES",
    )

    # Redis - profile cache and outstanding reset tokens
    redis_url: str = Field(default="redis://localhost:6379", validation_alias="REDIS_URL")
    redis_enabled: bool = Field(default=True, validation_alias="REDIS_ENABLED")
    redis_pool_size: int = Field(default=20, validation_alias="REDIS_POOL_SIZE")
    profile_cache_ttl_seconds: int = Field(
        default=600, ge=1, validation_alias="PROFILE_CACHE_TTL_SECONDS",
    )

    # Password reset emails link back to the frontend
    app_base_url: str = Field(default="http://localhost:5173", validation_alias="APP_BASE_URL")

    # SMTP
    smtp_host: str = Field(default="localhost", validation_alias="SMTP_HOST")
    smtp_port: int = Field(default=587, validation_alias="SMTP_PORT")
    smtp_username: str = Field(default="", validation_alias="SMTP_USERNAME")
    smtp_password: str = Field(default="", validation_alias="SMTP_PASSWORD")
    smtp_sender: str = Field(default="no-reply@localhost", validation_alias="SMTP_SENDER")
    smtp_use_tls: bool = Field(default=True, validation_alias="SMTP_USE_TLS")
    smtp_timeout_seconds: float = Field(default=10.0, validation_alias="SMTP_TIMEOUT_SECONDS")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """
        Refuse to start with a guessable signing secret.

        Anyone holding the secret can mint session tokens for any user, so the
        placeholder value and short keys are only tolerated in dev mode.
        """
        if self.dev_mode:
            return self
        if self.secret_key == PLACEHOLDER_SECRET_KEY:
            raise ValueError(
                "SECRET_KEY is still the placeholder value. "
                "Set a random secret (at least 32 characters) or enable DEV_MODE.",
            )
        if len(self.secret_key) < MIN_SECRET_KEY_LENGTH:
            raise ValueError(
                f"SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters long.",
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite (tests, local experiments)."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
