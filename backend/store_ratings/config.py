"""
Configuration settings for the Store Ratings API.

Loads environment variables from .env file and provides typed configuration.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = Field(
        default="development",
        description="Runtime environment: 'development' or 'production'",
    )
    HOST: str = Field(default="0.0.0.0", description="Listening host")
    PORT: int = Field(default=8080, description="Listening port")
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Security Configuration
    SECRET_KEY: str = Field(
        default="change-me-in-production-7f3c2a91d04b4e6f8a5d",
        description="Secret key for JWT",
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=24 * 60, description="Access token expiration time in minutes"
    )
    BCRYPT_ROUNDS: int = Field(default=12, description="bcrypt cost factor")

    # Database Configuration
    DATABASE_URL: str = Field(
        default="sqlite:///./data/store_ratings.db", description="Database URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False, description="Echo SQL queries (for debugging)"
    )
    DATABASE_POOL_SIZE: int = Field(
        default=5, description="Connection pool size (ignored for SQLite)"
    )
    DATABASE_POOL_TIMEOUT: int = Field(
        default=30, description="Seconds to wait for a pooled connection"
    )

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable rate limiting")
    RATE_LIMIT_DEFAULT: str = Field(
        default="100/15 minutes", description="Per-IP ceiling applied to every endpoint"
    )
    LOGIN_RATE_LIMIT: str = Field(
        default="5/minute", description="Per-IP ceiling for login endpoints"
    )

    # Analytics
    TREND_WINDOW_DAYS: int = Field(
        default=30, description="Rolling window for day-bucketed trends"
    )

    # Seed data
    DEFAULT_ADMIN_NAME: str = "System Administrator"
    DEFAULT_ADMIN_EMAIL: str = "admin@system.com"
    DEFAULT_ADMIN_PASSWORD: str = "Admin@123"
    DEFAULT_ADMIN_ADDRESS: str = "System Address - 123 Admin Street, Admin City, AC 12345"

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
