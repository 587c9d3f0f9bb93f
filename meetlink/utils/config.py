"""
Configuration settings for the application.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from meetlink.constants import DEFAULT_PAGE_SIZE


class Settings(BaseSettings):
    """Application settings."""

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    # Refresh token of the fallback identity used when nobody is signed in
    GOOGLE_REFRESH_TOKEN: Optional[str] = None

    # Security
    COOKIE_SECRET: str = "change-me"
    COOKIE_SECURE: bool = True

    # Keyed store
    KV_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite+aiosqlite:///meet.db"
    KV_PAGE_SIZE: int = DEFAULT_PAGE_SIZE

    # Visibility
    PUBLIC_EMAIL_DOMAINS: str = "gmail.com,googlemail.com"

    # Upstream
    HTTP_TIMEOUT: float = 30.0

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Branding
    APP_NAME: str = "meet"
    APP_URL: str = "https://meet.akshat.pro"
    CONTACT_URL: str = "https://akshat.pro"

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def public_domains(self) -> List[str]:
        """Free consumer email domains, lowercased."""
        return [d.strip().lower() for d in self.PUBLIC_EMAIL_DOMAINS.split(",") if d.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
