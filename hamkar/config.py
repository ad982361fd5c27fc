"""Application configuration using Pydantic Settings."""

from typing import Any, List, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Hamkar API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = True

    # MongoDB
    MONGODB_URI: str = Field(default="mongodb://127.0.0.1:27017")
    MONGODB_DATABASE: str = "hamkar"
    MONGODB_MAX_POOL_SIZE: int = 20
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    MONGODB_USE_TRANSACTIONS: bool = False  # requires a replica set

    # JWT / credentials
    SECRET_KEY: str = Field(default="change-this-secret-key-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12
    COOKIE_NAME: str = "token"

    # File Upload
    UPLOAD_DIR: str = "uploads"
    MAX_FILE_SIZE: int = 5242880  # 5MB
    MAX_FILES_PER_REQUEST: int = 5
    MAX_BODY_SIZE: int = 10485760  # 10MB

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT: str = "100/15minutes"

    # CORS
    CORS_ORIGINS: Union[str, List[str]] = ["*"]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Monitoring
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "production"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_origins(cls, v: Any):
        """Parse comma-separated origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


# Create global settings instance
settings = Settings()
