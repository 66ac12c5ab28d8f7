from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_project_root = Path(__file__).resolve().parents[1]
load_dotenv(_project_root / ".env", override=False)


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    API_BASE_URL: AnyHttpUrl = "https://preview.totan.in/api"
    MEDIA_STORAGE_BASE_URL: AnyHttpUrl = "https://preview.totan.in/storage"
    API_REQUEST_TIMEOUT_SECONDS: float = 20.0

    CTA_REVEAL_DELAY_SECONDS: float = 5.0
    POPULAR_VIDEOS_DEFAULT_LIMIT: int = 6
    POPULAR_VIDEOS_MAX_LIMIT: int = 50
    PLAYER_MAX_MOUNTS: int = 5000
    PLAYER_IDLE_TTL_SECONDS: float = 1800.0
    QUERY_CACHE_TTL_SECONDS: float = 30.0

    # Comma separated; kept as a string so pydantic-settings does not try to JSON-decode it.
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level name, got {value!r}")
        return normalized

    @field_validator("CTA_REVEAL_DELAY_SECONDS")
    @classmethod
    def validate_reveal_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("CTA_REVEAL_DELAY_SECONDS must be >= 0")
        return value

    @property
    def api_base_url(self) -> str:
        return str(self.API_BASE_URL).rstrip("/")

    @property
    def media_storage_base_url(self) -> str:
        return str(self.MEDIA_STORAGE_BASE_URL).rstrip("/")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
