"""
Configuration settings for the data-access layer.
"""

from functools import lru_cache
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Data-access settings, read from the environment and .env."""

    # Database
    DATABASE_URL: str = "sqlite:///entity_dao.db"
    SQL_ECHO: bool = False

    # Primary keys are produced by the database unless disabled
    KEYS_GENERATED_BY_DATABASE: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow"
    )

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
