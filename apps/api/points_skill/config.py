"""Application configuration utilities."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing or invalid."""


class AppConfig(BaseModel):
    """Strongly typed configuration loaded from the environment."""

    sheet_id: Optional[str] = Field(default=None)
    families_tab: str = Field(default="Families")
    events_tab_prefix: str = Field(default="Family_")
    secret_name: Optional[str] = Field(default=None)
    secret_region: str = Field(default="eu-west-1")
    timezone: str = Field(default="Europe/Oslo")
    apl_document_path: Optional[str] = Field(default=None)

    @property
    def resolved_apl_document_path(self) -> Path:
        """Return the visual document path, falling back to the bundled one."""
        if self.apl_document_path:
            return Path(self.apl_document_path).expanduser().resolve()
        return Path(__file__).resolve().parent / "apl" / "trend.json"

    @property
    def tzinfo(self) -> ZoneInfo:
        """Return the family timezone, raising ConfigurationError for unknown names."""
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown FAMILY_TIMEZONE {self.timezone!r}.") from exc

    def missing_settings(self) -> List[str]:
        """Return the env var names of required settings that are unset."""
        missing: List[str] = []
        if not self.sheet_id:
            missing.append("GOOGLE_SHEET_ID")
        if not self.secret_name:
            missing.append("GOOGLE_SA_SECRET_NAME")
        return missing


def load_config() -> AppConfig:
    """Build the configuration from environment variables."""

    return AppConfig(
        sheet_id=os.getenv("GOOGLE_SHEET_ID") or None,
        families_tab=os.getenv("FAMILIES_SHEET_TAB") or "Families",
        events_tab_prefix=os.getenv("EVENTS_TAB_PREFIX") or "Family_",
        secret_name=os.getenv("GOOGLE_SA_SECRET_NAME") or None,
        secret_region=(
            os.getenv("GOOGLE_SA_SECRET_REGION") or os.getenv("AWS_REGION") or "eu-west-1"
        ),
        timezone=os.getenv("FAMILY_TIMEZONE") or "Europe/Oslo",
        apl_document_path=os.getenv("APL_DOCUMENT_PATH") or None,
    )


@lru_cache
def get_config() -> AppConfig:
    return load_config()


def ensure_configured(config: AppConfig) -> None:
    """Fail fast, before any I/O, when storage settings are absent."""

    missing = config.missing_settings()
    if missing:
        raise ConfigurationError(f"Missing {', '.join(missing)} env var(s).")
    config.tzinfo  # raises on an unknown timezone name
