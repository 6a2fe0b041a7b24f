"""
Configuration module for Hospital Service API.
Uses Pydantic BaseSettings for validation - app fails fast if required config is missing.
"""
import logging
from pathlib import Path
from typing import List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.
    Required fields will cause the app to fail fast if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    hospital_svc_db_dir: str = Field(default="data", description="Database directory")
    hospital_svc_db_file: str = Field(default="hospital.db", description="Database filename")
    hospital_svc_db_busy_timeout: int = Field(default=5000, description="SQLite busy timeout in milliseconds")

    # API Configuration
    hospital_svc_host: str = Field(default="0.0.0.0", description="API host")
    hospital_svc_port: int = Field(default=5000, description="API port")
    hospital_svc_reload: bool = Field(default=False, description="Enable hot reload")
    hospital_svc_cors_origins: str = Field(
        default="*",
        description="Comma-separated origins allowed to call the API (front-end hosts)",
    )

    # Logging (LOG_LEVEL / LOG_FORMAT env vars still win at startup)
    hospital_svc_log_level: str = Field(default="INFO", description="Root log level")
    hospital_svc_log_format: str = Field(default="json", description="'json' or 'text'")

    # Bearer token verification
    hospital_svc_jwt_secret: str = Field(
        ...,  # Required - no default means fail fast if missing
        description="Secret used to verify bearer tokens issued by the auth service",
        min_length=32,
    )
    hospital_svc_jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    hospital_svc_token_ttl_minutes: int = Field(
        default=60 * 24,
        description="Lifetime of tokens minted by create_access_token (dev tooling and tests)",
    )

    @model_validator(mode="after")
    def validate_algorithm(self) -> "Settings":
        """Only symmetric HMAC algorithms are supported with a shared secret."""
        if not self.hospital_svc_jwt_algorithm.startswith("HS"):
            raise ValueError(
                f"Unsupported JWT algorithm '{self.hospital_svc_jwt_algorithm}': "
                "only HS256/HS384/HS512 are supported"
            )
        if self.hospital_svc_log_format.lower() not in ("json", "text"):
            raise ValueError("HOSPITAL_SVC_LOG_FORMAT must be 'json' or 'text'")
        return self

    @property
    def database_path(self) -> str:
        """Get the full database path."""
        return str(Path(self.hospital_svc_db_dir) / self.hospital_svc_db_file)

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.hospital_svc_cors_origins.split(",") if o.strip()]

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.hospital_svc_db_dir).mkdir(parents=True, exist_ok=True)


# Create global settings instance - fails fast if required config is missing
settings = Settings()

# Ensure directories exist on import
settings.ensure_directories()

DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.hospital_svc_db_busy_timeout

API_HOST = settings.hospital_svc_host
API_PORT = settings.hospital_svc_port
API_RELOAD = settings.hospital_svc_reload
CORS_ORIGINS = settings.cors_origins

LOG_LEVEL = settings.hospital_svc_log_level
LOG_JSON = settings.hospital_svc_log_format.lower() == "json"

JWT_SECRET = settings.hospital_svc_jwt_secret
JWT_ALGORITHM = settings.hospital_svc_jwt_algorithm
TOKEN_TTL_MINUTES = settings.hospital_svc_token_ttl_minutes
