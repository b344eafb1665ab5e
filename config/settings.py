"""Global configuration.

Every user-configurable value is read from the ``.env`` file or the process
environment at start-up.

Usage:
    1. Run ``python scripts/setup_env.py`` to generate a ``.env`` file
    2. Or create ``.env`` by hand with the keys below
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings - every field can be overridden via .env or env vars"""

    # ========== Database ==========
    database_url: str = "sqlite:///data/events.db"

    # ========== Web API ==========
    web_host: str = "0.0.0.0"
    web_port: int = 8080
    web_username: str = "admin"
    web_password: str = "admin123"
    auth_enabled: bool = True
    token_ttl_hours: int = 24

    # ========== Logging ==========
    log_level: str = "INFO"

    # ========== Organization defaults ==========
    default_timezone: str = "Europe/Rome"
    default_language: str = "it"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
