from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional
import json

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./complaint_desk.db"

    # Database Connection Pool Settings
    DB_POOL_SIZE: int = 10  # Base number of connections in pool
    DB_MAX_OVERFLOW: int = 20  # Extra connections allowed beyond pool_size
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for connection from pool
    DB_POOL_RECYCLE: int = 1800  # Recycle connections after 30 minutes

    # Session token settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    SESSION_MAX_AGE_DAYS: int = 30
    SESSION_COOKIE_NAME: str = "session-token"
    SECURE_COOKIES: bool = False  # Only enable when served over HTTPS
    COOKIE_DOMAIN: Optional[str] = None

    # App Settings
    APP_NAME: str = "Complaint Desk"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    AUTO_CREATE_TABLES: bool = False

    # CORS - accepts JSON string, comma-separated, or list
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
    ]

    # Attachment storage
    UPLOAD_DIR: str = "public"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # First admin account, created on startup when no users exist
    FIRST_ADMIN_EMAIL: Optional[str] = None
    FIRST_ADMIN_PASSWORD: Optional[str] = None
    FIRST_ADMIN_NAME: str = "Administrator"

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(',')]
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@dataclass(frozen=True)
class SessionConfig:
    """Immutable session/cookie policy handed to the session issuer."""

    secret_key: str
    algorithm: str
    max_age: timedelta
    cookie_name: str
    secure: bool
    domain: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionConfig":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            max_age=timedelta(days=settings.SESSION_MAX_AGE_DAYS),
            cookie_name=settings.SESSION_COOKIE_NAME,
            secure=settings.SECURE_COOKIES,
            domain=settings.COOKIE_DOMAIN or None,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
