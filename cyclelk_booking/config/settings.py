"""
Application settings and configuration.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Cycle.LK Booking"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, env="DEBUG")

    # Rental backend
    api_base_url: str = Field(default="http://localhost:50001/api", env="API_BASE_URL")
    api_timeout: float = Field(default=10.0, env="API_TIMEOUT")
    api_auth_header: str = Field(default="x-auth-token", env="API_AUTH_HEADER")

    # Booking flow
    currency: str = Field(default="LKR", env="CURRENCY")
    redirect_countdown_seconds: int = Field(default=5, env="REDIRECT_COUNTDOWN_SECONDS")
    dashboard_path: str = Field(default="/dashboard", env="DASHBOARD_PATH")
    login_path: str = Field(default="/login", env="LOGIN_PATH")
    session_ttl_seconds: int = Field(default=3600, env="SESSION_TTL_SECONDS")

    # Timezone
    timezone: str = Field(default="Asia/Colombo", env="TIMEZONE")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    event_log_path: Optional[str] = Field(default=None, env="EVENT_LOG_PATH")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
