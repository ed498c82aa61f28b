"""
Application configuration using Pydantic Settings
"""

import json
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    APP_NAME: str = "School Portal"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development", description="Environment: development, staging, production")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # Security
    SECRET_KEY: str = Field(..., description="Secret key for JWT tokens")
    JWT_ALGORITHM: str = Field(default="HS256", description="Signing algorithm for access tokens")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24, description="Access token expiration in minutes")

    # CORS
    ALLOWED_HOSTS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:3000", "http://127.0.0.1:5173"],
        description="Allowed CORS origins"
    )

    # Database
    DATABASE_URL: str = Field(..., description="Database URL (postgresql+asyncpg://... or sqlite+aiosqlite://...)")
    DB_POOL_SIZE: int = Field(default=5, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=10, description="Connections allowed above pool size")

    # Uploads
    UPLOAD_DIR: str = Field(default="uploads", description="Root directory for uploaded files")
    NEWS_IMAGE_MAX_BYTES: int = Field(default=5 * 1024 * 1024, description="Maximum news image size in bytes")
    NEWS_IMAGE_ALLOWED_TYPES: List[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"],
        description="Accepted content types for news images"
    )
    NEWS_IMAGE_URL_PREFIX: str = Field(default="/api/v1/news/images", description="Public URL prefix for stored news images")

    # News listings
    NEWS_DEFAULT_PAGE_SIZE: int = Field(default=10, description="Default page size for news listings")
    NEWS_PUBLIC_MAX_PAGE_SIZE: int = Field(default=50, description="Page size ceiling for public listings")
    NEWS_ADMIN_MAX_PAGE_SIZE: int = Field(default=100, description="Page size ceiling for admin listings")

    # Default data
    SEED_DEFAULT_DATA: bool = Field(default=True, description="Insert default admin, school profile and categories on startup")
    DEFAULT_ADMIN_USERNAME: str = Field(default="admin", description="Username of the bootstrap admin")
    DEFAULT_ADMIN_EMAIL: str = Field(default="admin@sekolah.com", description="Email of the bootstrap admin")
    DEFAULT_ADMIN_PASSWORD: str = Field(default="admin123", description="Password of the bootstrap admin")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Log level")

    @field_validator('DEBUG', 'SEED_DEFAULT_DATA', mode='before')
    @classmethod
    def validate_bool_flags(cls, v):
        """Allow boolean flags to be passed as strings"""
        if isinstance(v, str):
            return v.lower() in ('true', '1', 'yes', 'on')
        return bool(v)

    @field_validator('ALLOWED_HOSTS', 'NEWS_IMAGE_ALLOWED_TYPES', mode='before')
    @classmethod
    def validate_string_lists(cls, v):
        """Accept JSON arrays or comma-separated strings"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(',') if item.strip()]
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


# Create settings instance
settings = Settings()
