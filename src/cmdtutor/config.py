"""Runtime configuration for cmdtutor."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TutorSettings(BaseSettings):
    """Settings sourced from environment variables and an optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    workspace_name: str = Field(default="cmdtutor-workspace", validation_alias="CMDTUTOR_WORKSPACE_NAME")
    progress_path: Path = Field(
        default=Path(".cmdtutor") / "progress.json", validation_alias="CMDTUTOR_PROGRESS_PATH"
    )
    catalog_path: Path | None = Field(default=None, validation_alias="CMDTUTOR_CATALOG_PATH")
    log_level: str = Field(default="WARNING", validation_alias="CMDTUTOR_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("CMDTUTOR_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG")
        return normalized

    @field_validator("workspace_name")
    @classmethod
    def _validate_workspace_name(cls, value: str) -> str:
        name = value.strip()
        if not name or name in {".", ".."} or Path(name).name != name:
            raise ValueError("CMDTUTOR_WORKSPACE_NAME must be a single directory name")
        return name


@lru_cache(maxsize=1)
def get_settings() -> TutorSettings:
    """Return cached settings with paths resolved against the invocation directory."""
    settings = TutorSettings()
    settings.progress_path = settings.progress_path.expanduser().resolve()
    if settings.catalog_path is not None:
        settings.catalog_path = settings.catalog_path.expanduser().resolve()
    return settings


__all__ = ["TutorSettings", "get_settings"]
