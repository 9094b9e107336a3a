"""Application configuration loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """CMS backend settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False

    # Storage
    storage_backend: Literal["supabase", "database"] = "supabase"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    database_url: str = "sqlite+aiosqlite:///data/cms.db"
    config_table: str = Field(default="configs", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    config_row_id: int = 1
    optimistic_concurrency: bool = True
    max_write_retries: int = Field(default=3, ge=0, le=20)
    request_timeout: float = Field(default=10.0, gt=0)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    def validate_storage(self) -> None:
        """Check that the selected storage backend is fully configured."""
        if self.storage_backend != "supabase":
            return

        missing: list[str] = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key:
            missing.append("SUPABASE_ANON_KEY")

        if missing:
            joined = ", ".join(missing)
            raise ValueError(f"Missing required environment variables: {joined}")
