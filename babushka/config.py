"""
Centralized configuration management for the trainer.
"""

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_NAV_DELAY_MS


def get_default_data_dir() -> Path:
    """Directory for the storage database and synthesized audio."""
    return Path.home() / ".babushka"


class Settings(BaseSettings):
    """
    Application settings, loaded from environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BABUSHKA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # --- Storage ---
    # Overridden by BABUSHKA_DB_PATH (the CLI also honours BABUSHKA_DB).
    db_path: Path = Field(
        default_factory=lambda: get_default_data_dir() / "babushka.db"
    )

    # --- AI service ---
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "BABUSHKA_GEMINI_API_KEY", "GEMINI_API_KEY", "API_KEY"
        ),
    )
    model: str = "gemini-2.5-flash"
    tts_model: str = "gemini-2.5-flash-preview-tts"
    voice: str = "Kore"

    # --- Presentation ---
    nav_delay_ms: int = Field(default=DEFAULT_NAV_DELAY_MS, ge=0)
    share_base_url: str = "https://babushka.app/"
    audio_dir: Path = Field(
        default_factory=lambda: get_default_data_dir() / "audio"
    )


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, applying explicit overrides."""
    return Settings(**overrides)
