"""Application configuration via environment variables."""

import json
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # EMS backend (remote data service)
    DATA_SERVICE_URL: str = "https://emsbackend-gizp.onrender.com"
    DATA_SERVICE_TIMEOUT_SECONDS: float = 10.0

    # Auth — JWT_SECRET MUST be set via environment / .env (no default)
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "info"
    CORS_ORIGINS: str = '["http://localhost:5173"]'

    # Transient notices (seconds)
    STATUS_NOTICE_SECONDS: float = 3.0
    CLEANUP_NOTICE_SECONDS: float = 5.0

    # Reports
    REPORT_RATE_LIMIT: str = "10/minute"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS JSON string into a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except (json.JSONDecodeError, TypeError):
            return ["http://localhost:5173"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
