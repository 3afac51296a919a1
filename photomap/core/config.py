"""Application configuration using Pydantic Settings.

This module provides type-safe environment variable management
with validation and computed properties for database URIs.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        APP_ENV: Application environment (development, staging, production).
        DEBUG: Enable debug mode.
        API_PREFIX: Prefix for all API routes.
        LOG_LEVEL: Minimum level for log output.
        POSTGRES_USER: PostgreSQL username.
        POSTGRES_PASSWORD: PostgreSQL password.
        POSTGRES_DB: PostgreSQL database name.
        POSTGRES_HOST: PostgreSQL host address.
        POSTGRES_PORT: PostgreSQL port number.
        DATABASE_URL: Full async database URL, overrides the POSTGRES_* values.
        AUTO_CREATE_TABLES: Create missing tables on startup.
        CORS_ORIGINS: Comma-separated list of allowed CORS origins.
        JWT_SECRET_KEY: Secret shared with the identity provider.
        JWT_ALGORITHM: Signing algorithm of bearer tokens.
        UPLOAD_DIR: Directory holding uploaded image files.
        MAX_UPLOAD_BYTES: Upload size ceiling in bytes.
        VISION_PROVIDER: Description backend, ``mock`` or ``remote``.
        MOCK_PROVIDER_DELAY: Simulated latency of the mock backend in seconds.
        OLLAMA_BASE_URL: Base address of the remote inference endpoint.
        OLLAMA_MODEL: Multimodal model name used by the remote backend.
        VISION_REQUEST_TIMEOUT: Optional request timeout for the remote backend.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "photomap"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None
    AUTO_CREATE_TABLES: bool = True

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Identity
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"

    # Uploads
    UPLOAD_DIR: Path = Path("data/uploads")
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Vision backend
    VISION_PROVIDER: str = "mock"
    MOCK_PROVIDER_DELAY: float = 0.5
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llava"
    VISION_REQUEST_TIMEOUT: Optional[float] = None

    @computed_field  # type: ignore[misc]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the async database URI.

        Returns:
            ``DATABASE_URL`` when set, otherwise an asyncpg PostgreSQL URI.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance.
    """
    return Settings()


settings = get_settings()
