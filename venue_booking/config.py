"""
Application configuration management
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Venue Booking"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./venue_booking.db"

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if v.startswith('postgresql://'):
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 40
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_ECHO: bool = False

    # Monitoring
    PROMETHEUS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    LOG_FILE: Optional[str] = None

    # Asset store (venue images)
    ASSET_STORE_BACKEND: str = "memory"
    AZURE_STORAGE_CONNECTION_STRING: Optional[str] = None
    AZURE_STORAGE_CONTAINER: str = "venue-images"
    ASSET_MAX_BYTES: int = 5 * 1024 * 1024
    ASSET_ALLOWED_CONTENT_TYPES: List[str] = ["image/jpeg", "image/png", "image/gif"]
    ASSET_STORE_TIMEOUT_SECONDS: float = 10.0

    @field_validator("ASSET_ALLOWED_CONTENT_TYPES", mode="before")
    def parse_content_types(cls, v):
        if isinstance(v, str):
            return [content_type.strip().lower() for content_type in v.split(",") if content_type.strip()]
        return v

    @field_validator("ASSET_STORE_BACKEND")
    @classmethod
    def validate_asset_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "azure"):
            raise ValueError("ASSET_STORE_BACKEND must be 'memory' or 'azure'")
        return v

    @property
    def is_testing(self) -> bool:
        return self.APP_ENV == "testing"


# Create global settings instance
settings = Settings()
