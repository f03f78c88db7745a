"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for a SongLedger workspace store.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.  See ``.env.example`` for all options.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # Storage
    data_dir: Path = Path(".songledger")

    # Seeding (only applied when no projects are stored yet)
    seed_sample_workspace: bool = False
    seed_file: Path | None = None  # takes precedence over the bundled sample

    # Clipboard
    clipboard_fallback: bool = True  # OSC 52 escape when no clipboard tool exists
