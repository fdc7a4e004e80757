"""
Puzzle Trainer - Configuration

Loads settings from environment variables with Pydantic validation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _repo_root() -> Path:
    # puzzles/ is at <repo>/puzzles
    return Path(__file__).resolve().parents[1]


# Storage keys (one JSON document per key)
PUZZLES_KEY = "puzzlesV1"
STATS_KEY = "statsV1"
PLAYERS_KEY = "playersV1"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ─── Storage ───
    puzzle_data_dir: Path = Field(
        default_factory=lambda: _repo_root() / "data",
        validation_alias="PUZZLE_DATA_DIR",
    )
    default_puzzles_source: str = str(_repo_root() / "puzzles.json")

    # ─── Session ───
    advance_delay_ms: int = 800
    default_player: str = "Player 1"

    # ─── Board / feedback ───
    board_size: int = 400
    piece_theme: str = "img/chesspieces/staunty/{piece}.png"
    sounds_dir: Path = Field(default_factory=lambda: _repo_root() / "sounds")

    # ─── App ───
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def advance_delay_s(self) -> float:
        return max(0, int(self.advance_delay_ms)) / 1000.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the app process."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s - %(levelname)s - [%(name)s] - %(message)s",
    )
