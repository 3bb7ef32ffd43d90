"""Configuration module for clonekit settings.

Several subsystems import it at startup (DB, field definition loader, API).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Tests and scripts override via DATABASE_URL.
    database_url: str = "sqlite:///./clonekit.db"

    # Immutable field definition table, loaded once at process start
    field_definitions_path: str = "config/field_definitions.yaml"

    # Artifacts in these statuses are never picked up by an "all" selection
    archived_statuses: List[str] = ["archived"]

    log_level: str = "INFO"


settings = Settings()


def get_database_url() -> str:
    """Get database URL from environment or config.

    Priority:
    1. DATABASE_URL environment variable
    2. settings.database_url from config

    Relative SQLite paths are normalized to absolute paths so that processes
    started from different working directories share one file.
    """
    url = os.getenv("DATABASE_URL", settings.database_url)

    if isinstance(url, str) and url.startswith("sqlite:///") and not url.startswith("sqlite:///:memory:"):
        db_path_str = url[len("sqlite:///"):]

        # Windows drive absolute paths (C:\... or C:/...)
        is_windows_drive_abs = (
            len(db_path_str) >= 3
            and db_path_str[1] == ":"
            and (db_path_str[2] == "\\" or db_path_str[2] == "/")
        )

        db_path = Path(db_path_str)
        if not db_path.is_absolute() and not is_windows_drive_abs:
            # src/clonekit/config.py -> src/clonekit -> src -> repo root
            repo_root = Path(__file__).resolve().parents[2]
            db_path = (repo_root / db_path).resolve()
        else:
            db_path = db_path.resolve()

        # SQLAlchemy URLs want forward slashes even on Windows
        url = f"sqlite:///{db_path.as_posix()}"

    return url


def get_field_definitions_path() -> Path:
    """Resolve the field definitions file.

    Relative paths are taken from the repo root, not the working directory,
    so the service finds config/ wherever it is started from.
    """
    path = Path(settings.field_definitions_path)
    if not path.is_absolute():
        # src/clonekit/config.py -> src/clonekit -> src -> repo root
        path = Path(__file__).resolve().parents[2] / path
    return path
