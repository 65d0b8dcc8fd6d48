"""
Runtime configuration.

Settings are read from environment variables with the COOLDECIDE_ prefix,
e.g. COOLDECIDE_STORAGE_BACKEND=supabase, COOLDECIDE_SUPABASE_URL=...
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional
import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_prefix="COOLDECIDE_", env_file=".env", extra="ignore")

    storage_backend: Literal["memory", "file", "supabase"] = Field(
        default="file",
        description="Where boiling datasets are persisted",
    )
    data_dir: Path = Field(
        default=Path.home() / ".cooldecide",
        description="Directory for the file backend and local backups",
    )

    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_key: Optional[str] = Field(default=None, description="Supabase anon key")
    supabase_table: str = Field(default="boiling_datasets")
    http_timeout_s: float = Field(default=10.0, gt=0)

    log_level: str = Field(default="INFO")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    curve_steps: int = Field(default=50, ge=1, le=1000, description="Default sweep resolution")

    @property
    def datasets_path(self) -> Path:
        return self.data_dir / "boiling-datasets.json"

    @property
    def backups_path(self) -> Path:
        return self.data_dir / "boiling-backups.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Set up root logging at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
