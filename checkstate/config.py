"""
Checkstate: Application Configuration
=======================================

What:  Centralized configuration using Pydantic Settings.
How:   Values come from CHECKSTATE_* environment variables (or a .env file)
       and fall back to defaults that match the fixed values the service has
       always used: storage under ./data, listening on 127.0.0.1:8811.
Who:   Built once by create_app() and handed to the store and the routes.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service settings.

    Attributes are grouped by concern. Nothing mutates an instance after
    startup; tests construct their own with an explicit data_dir.
    """

    # ── Storage ───────────────────────────────────────────────────────────
    # Root directory holding one subdirectory per md_id
    data_dir: str = Field(default="data", min_length=1)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8811, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins. Empty disables the CORS middleware entirely.
    cors_origins: str = Field(default="")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list, dropping blanks."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Static page ───────────────────────────────────────────────────────
    # Directory with the checklist page (index.html, script.js); mounted at "/"
    static_dir: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="CHECKSTATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
