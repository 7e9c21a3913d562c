from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values
from pydantic import BaseModel

ENV_PREFIX = "PIXELPET_"


class PetConfig(BaseModel):
    """Configuration for the pet engine."""

    data_dir: str = ""
    storage_key: str = "pixelpet_game_state"
    autosave: bool = True
    save_debounce_seconds: float = 1.0
    tick_interval_seconds: float = 60.0
    compress_storage: bool = False
    interaction_cap: int = 100
    conversation_cap: int = 50
    favorites_cap: int = 10
    default_pet_name: str = "Rex"
    default_feed_amount: float = 25
    default_play_amount: float = 20

    @staticmethod
    def default_data_dir() -> Path:
        return Path.home() / ".pixelpet"

    def resolved_data_dir(self) -> Path:
        return Path(self.data_dir).expanduser() if self.data_dir else self.default_data_dir()

    @classmethod
    def from_env(
        cls,
        env_file: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> PetConfig:
        """Build a config from ``PIXELPET_*`` variables.

        Values from ``env_file`` (a dotenv file) are read first; the process
        environment overrides them.
        """
        values: dict[str, str | None] = {}
        if env_file is not None and Path(env_file).is_file():
            values.update(dotenv_values(env_file))
        values.update(os.environ if environ is None else environ)

        overrides = {}
        for name in cls.model_fields:
            value = values.get(ENV_PREFIX + name.upper())
            if value is not None:
                overrides[name] = value
        return cls.model_validate(overrides)
