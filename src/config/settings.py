"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.
"""

from datetime import timedelta
from functools import lru_cache
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.domain.schemas import PhoneFormat, SchemaOptions


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Database configuration: either a full URI, or Atlas credentials
    mongo_uri: str | None = None
    user_db: str | None = None
    pass_db: str | None = None
    server_db: str | None = None
    db_name: str = "adopciones"

    # Security settings
    jwt_token_secret: str = "development-only-secret-change-me-0123456789"
    jwt_expires_seconds: int = 3600  # Bearer token lifetime
    bcrypt_cost: int = 10  # bcrypt work factor

    # Validation choices
    phone_format: PhoneFormat = "international"
    require_surname: bool = False

    @property
    def database_url(self) -> str:
        """MongoDB URI: MONGO_URI if set, else an Atlas SRV URI built from credentials."""
        if self.mongo_uri:
            return self.mongo_uri
        if self.user_db and self.pass_db and self.server_db:
            return (
                f"mongodb+srv://{quote_plus(self.user_db)}:{quote_plus(self.pass_db)}"
                f"@{self.server_db}/?retryWrites=true&w=majority&appName=Cluster0"
            )
        return "mongodb://localhost:27017"

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(seconds=self.jwt_expires_seconds)

    @property
    def schema_options(self) -> SchemaOptions:
        return SchemaOptions(phone_format=self.phone_format, require_surname=self.require_surname)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
