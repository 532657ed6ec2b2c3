"""
Engine settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from crud_shared.config.constants import Limits


class Settings(BaseSettings):
    """Engine settings with defaults for development."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="CRUD_",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./crud_engine.db"
    database_echo: bool = False

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Paging - page numbers are zero-based on the way in, one-based on the way out
    default_page_size: int = Limits.DEFAULT_PAGE_SIZE
    max_page_size: int = Limits.MAX_PAGE_SIZE

    def validate_production(self) -> list[str]:
        """
        Check settings that must not keep development values in production.
        Returns a list of problems. Empty list means all checks pass.
        """
        errors = []

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if self.database_url.startswith("sqlite"):
                errors.append("DATABASE_URL must not point to SQLite in production")

        if self.default_page_size > self.max_page_size:
            errors.append("DEFAULT_PAGE_SIZE must not exceed MAX_PAGE_SIZE")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

DATABASE_URL = settings.database_url
