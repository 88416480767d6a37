"""Application configuration using Pydantic Settings."""

import re
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Calculate project root: config.py is in backend/, so go up one level
_CONFIG_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _CONFIG_DIR.parent

DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / "backend" / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="Store Rating Platform", description="Application name")
    app_env: str = Field(default="development", description="Application environment")
    log_level: str = Field(default="INFO", description="Root log level", alias="LOG_LEVEL")
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Origin allowed by CORS",
        alias="FRONTEND_URL",
    )

    # Security
    secret_key: str = Field(
        ...,
        description="Secret key for JWT tokens",
        alias="SECRET_KEY",
    )
    algorithm: str = Field(default="HS256", description="JWT algorithm", alias="JWT_ALGORITHM")
    jwt_expires_in: str = Field(
        default="24h",
        description="Access token lifetime, e.g. 3600, 30m, 24h, 7d",
        alias="JWT_EXPIRES_IN",
    )
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt work factor",
        alias="BCRYPT_ROUNDS",
    )

    # Database
    database_url: str = Field(
        ...,
        description="SQLAlchemy database connection URL",
        alias="DATABASE_URL",
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str:
        """Validate and normalize database URL."""
        if v is None or v == "":
            raise ValueError("DATABASE_URL is required")
        return v.strip()

    @field_validator("jwt_expires_in", mode="before")
    @classmethod
    def validate_jwt_expires_in(cls, v: str | int) -> str:
        """Accept a plain number of seconds or a number with an s/m/h/d suffix."""
        value = str(v).strip().lower()
        if not DURATION_PATTERN.match(value):
            raise ValueError(f"Invalid duration: {v!r}")
        return value

    @field_validator("app_env", mode="before")
    @classmethod
    def normalize_app_env(cls, v: str) -> str:
        """Normalize app environment to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.upper().strip()
        return v


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings: Application settings instance

    Example:
        ```python
        from backend.config import get_settings

        settings = get_settings()
        print(settings.database_url)
        ```
    """
    return Settings()


# Global settings instance
settings = get_settings()
