"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


DEV_JWT_SECRET = "dev-jwt-secret-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    request_timeout_seconds: float = 10.0

    # ==========================================================================
    # Database
    # ==========================================================================

    # Empty means in-memory stores; "sqlite:///path/to/file.db" uses SQLite.
    database_url: str = ""

    # ==========================================================================
    # Authentication
    # ==========================================================================

    jwt_secret_key: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60
    jwt_remember_me_expire_days: int = 30

    # The public /register endpoint accepts an "admin" flag while this is on.
    # Meant for bootstrapping a development instance; refused in production.
    allow_admin_registration: bool = False

    # ==========================================================================
    # Pagination
    # ==========================================================================

    posts_page_size: int = 10
    comments_page_size: int = 10
    comments_max_page_size: int = 50

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def check(self) -> None:
        """Reject settings that must never reach production."""
        if self.is_production and self.jwt_secret_key == DEV_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set in production")
        if self.is_production and self.allow_admin_registration:
            raise ValueError("ALLOW_ADMIN_REGISTRATION must be off in production")
        if self.posts_page_size < 1 or self.comments_page_size < 1:
            raise ValueError("Page sizes must be positive")
        if self.comments_max_page_size < self.comments_page_size:
            raise ValueError("comments_max_page_size must be >= comments_page_size")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
