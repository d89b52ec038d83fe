"""Runtime configuration via Pydantic Settings (``DICE_*`` environment variables)."""

from __future__ import annotations

import random
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import GraphFormat


class Settings(BaseSettings):
    # Logging
    log_level: str = "WARNING"

    # Randomized rolls; a fixed seed makes them reproducible.
    seed: Optional[int] = None

    # Default for the MCP render tool
    graph_format: GraphFormat = "dot"

    model_config = SettingsConfigDict(
        env_prefix="DICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def make_rng(self) -> random.Random | None:
        """A seeded generator, or None to use the system source."""
        if self.seed is None:
            return None
        return random.Random(self.seed)


def get_settings() -> Settings:
    return Settings()
