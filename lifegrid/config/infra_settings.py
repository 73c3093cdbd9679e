"""
Infrastructure Settings

Minimal settings for the server process loaded from environment variables.
Simulation config (grid size, tick rate, seed pattern) is handled by OmegaConf.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Repo root when running from a checkout; /usr/src/app inside the image
APP_ROOT = Path(__file__).resolve().parent.parent.parent


class InfraSettings(BaseSettings):
    """Infrastructure settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ENV_NAME: str = "lifegrid"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Paths
    WWW_DIR: Path = APP_ROOT / "www"
    CONFIG_DIR: Optional[Path] = None

    # CORS
    CORS_ORIGINS: Union[str, List[str]] = ["*"]

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_infra_settings() -> InfraSettings:
    """Get cached infrastructure settings instance."""
    return InfraSettings()
