import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Decide whether `backend/.env` is read.

    Local development picks up `.env` so SECRET_KEY and the seed admin can
    live there. Under pytest or CI nothing is loaded, so a missing secret
    still fails fast.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', 'production' or 'test'",
    )

    DATABASE_URL: str = "sqlite:///./data/comunidad.db"
    SECRET_KEY: str = Field(
        ...,
        description="JWT secret key - must be set via SECRET_KEY environment variable",
    )
    ALGORITHM: str = "HS256"
    # Sessions last a week, matching the school portal's cookie lifetime
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Seed admin created by init_db.py. No defaults on purpose.
    ADMIN_EMAIL: str = Field(
        ...,
        description="Admin email - must be set via ADMIN_EMAIL environment variable",
    )
    ADMIN_PASSWORD: str = Field(
        ...,
        description="Admin password - must be set via ADMIN_PASSWORD environment variable",
    )

    # Database connection pool settings (ignored for SQLite)
    DB_POOL_SIZE: int = Field(default=5, description="Persistent connections in pool")
    DB_MAX_OVERFLOW: int = Field(
        default=10, description="Extra connections when pool exhausted"
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30, description="Seconds to wait for a pooled connection"
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800, description="Recycle connections after N seconds"
    )

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true, call Base.metadata.create_all on startup",
    )

    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Accounts
    TEACHER_REGISTRATION_CODE: str = Field(
        default="1234",
        description="Code a teacher must provide to self-register with the teacher role",
    )
    AUTO_VERIFY_USERS: bool = Field(
        default=True,
        description="New accounts start verified; set false to route them through admin verification",
    )

    # File library and chat media
    UPLOAD_DIR: str = Field(
        default="data/uploads",
        description="Directory where uploaded files are written",
    )
    MAX_UPLOAD_SIZE_MB: int = Field(
        default=10,
        description="Maximum accepted upload size in megabytes",
    )
    FILES_REQUIRE_APPROVAL: bool = Field(
        default=False,
        description="When true, library uploads wait for admin approval",
    )

    # Events
    EVENT_REAPER_INTERVAL_MINUTES: int = Field(
        default=15,
        description="Period of the background expired-event sweep (0 disables it)",
    )

    # Listing limits
    FEED_LIMIT: int = Field(default=50, description="Posts returned by the main feed")
    NOTIFICATIONS_LIMIT: int = Field(
        default=50, description="Default page size for notifications"
    )
    RECOGNITIONS_LIMIT: int = Field(
        default=10, description="Recognitions shown on the home page"
    )
    MESSAGES_LIMIT: int = Field(
        default=100, description="Messages returned per group chat"
    )

    # Ntfy admin alerts
    NTFY_URL: str = Field(
        default="",
        description="Ntfy server URL (internal Docker: http://ntfy:80)",
    )
    NTFY_TOPIC_PREFIX: str = Field(
        default="loyola-admin",
        description="Prefix for admin alert topics",
    )
    NTFY_AUTH_TOKEN: str = Field(
        default="",
        description="Optional auth token for publishing",
    )
    NTFY_ENABLED: bool = Field(
        default=True,
        description="Enable/disable admin alerts globally",
    )
    APP_URL: str = Field(
        default="http://localhost:5173",
        description="Frontend URL for alert deep links",
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # SENTRY_DSN and friends are read elsewhere
    )


# Raises pydantic.ValidationError when SECRET_KEY or the admin seed is missing.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
