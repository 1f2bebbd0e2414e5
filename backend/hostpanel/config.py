"""HostPanel configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-in-prod"
DEFAULT_ADMIN_PASSWORD = "password"


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "HostPanel"
    debug: bool = False
    log_level: str = "INFO"

    # Network
    host: str = "0.0.0.0"
    port: int = 3000
    api_prefix: str = "/api"
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    # Auth
    secret_key: str = DEFAULT_SECRET_KEY
    token_algorithm: str = "HS256"
    token_expire_seconds: int = 3600

    # Bootstrap account, created once if absent
    admin_username: str = "admin"
    admin_password: str = DEFAULT_ADMIN_PASSWORD

    # Storage (relative paths resolved against backend/)
    database_path: str = "./data/hostpanel.db"

    # Metrics probe
    probe_timeout_seconds: float = 5.0
    max_processes: int = 20

    # Service status allow-list
    monitored_services: Annotated[list[str], NoDecode] = ["ssh", "nginx", "docker", "cron"]
    service_probe_timeout_seconds: float = 3.0

    # Directory listing is confined below this root
    files_root: str = "/"

    uvicorn_workers: int = 1

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="HOSTPANEL_",
        extra="ignore",
    )

    @property
    def uses_default_secret(self) -> bool:
        return self.secret_key == DEFAULT_SECRET_KEY

    @field_validator("cors_origins", "monitored_services", mode="before")
    @classmethod
    def split_comma_list(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str):
            if value.startswith("["):
                return json.loads(value)
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure the database path is absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        if not Path(self.database_path).is_absolute():
            self.database_path = str(base / self.database_path)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
