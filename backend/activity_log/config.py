from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)
    """Application runtime configuration."""

    app_name: str = "ActivityLog"
    environment: str = "development"
    host: str = os.getenv("AL_HOST", "127.0.0.1")
    port: int = int(os.getenv("AL_PORT", "8080"))
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            origin.strip()
            for origin in os.getenv("AL_CORS_ORIGINS", "http://127.0.0.1:5173,http://localhost:5173").split(",")
            if origin.strip()
        ]
    )

    storage_backend: str = os.getenv("AL_STORAGE", "sqlite")
    sqlite_path: Path = Path(os.getenv("AL_SQLITE_PATH", "./data/activities.db"))
    json_dir: Path = Path(os.getenv("AL_JSON_DIR", "./data/state"))
    storage_key: str = os.getenv("AL_STORAGE_KEY", "company_activities")

    export_dir: Path = Path(os.getenv("AL_EXPORT_DIR", "./data/exports"))

    parser_labels: str = os.getenv("AL_PARSER_LABELS", "en")

    log_level: str = os.getenv("AL_LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("AL_LOG_FILE")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, list):
            return value
        if not value:
            return []
        return [origin.strip() for origin in value.split(",") if origin.strip()]

    @field_validator("storage_backend", "parser_labels", mode="before")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return str(value).strip().lower()


settings = Settings()

# Ensure essential directories exist
settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
settings.export_dir.mkdir(parents=True, exist_ok=True)
settings.json_dir.mkdir(parents=True, exist_ok=True)
