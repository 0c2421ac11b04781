"""
Speechcast Configuration Management

Centralized configuration using pydantic-settings with environment variable support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from speechcast.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ══════════════════════════════════════════════════════════════
    # Application
    # ══════════════════════════════════════════════════════════════
    app_name: str = "Speechcast"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ══════════════════════════════════════════════════════════════
    # Server
    # ══════════════════════════════════════════════════════════════
    host: str = "0.0.0.0"
    port: int = Field(default=3001, ge=1, le=65535)
    base_path: str = "/speech"
    allowed_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    trust_proxy_headers: bool = False

    # ══════════════════════════════════════════════════════════════
    # Presenter Authentication
    # ══════════════════════════════════════════════════════════════
    presenter_password: SecretStr
    auth_max_attempts: int = Field(default=5, ge=1)
    auth_window_seconds: int = Field(default=15 * 60, ge=1)
    auth_prune_interval_seconds: int = Field(default=60, ge=1)

    # ══════════════════════════════════════════════════════════════
    # Content
    # ══════════════════════════════════════════════════════════════
    content_file: Path = Path("speech.json")

    @field_validator("presenter_password")
    @classmethod
    def require_presenter_password(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("presenter_password must not be empty")
        return v

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cors_origins(self) -> list[str]:
        """Origins allowed to call the API; only restricted in production."""
        if self.is_production:
            return self.allowed_origins
        return ["*"]

    @property
    def api_prefix(self) -> str:
        return f"{self.base_path}/api"

    @property
    def ws_prefix(self) -> str:
        return f"{self.base_path}/ws"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Raises:
        ConfigurationError: if required settings (the presenter password)
            are missing or invalid.
    """
    try:
        return Settings()
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {fields}") from e
