"""Configuration system for speakloop.

Settings come from these layers, later ones winning:
1. config/default.toml (shipped with package)
2. ~/.config/spk/config.toml (user-level)
3. ./spk.toml (project-level)
4. Environment variables (SPK_PLAYER__CUE, SPK_PRACTICE__PRACTICE_REPEATS, etc.)
5. CLI flags

The ``[practice]`` table seeds the settings of items that have no cut plan
yet; once an item is saved its own settings take over.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from spk.core.settings import PlaybackSettings

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DEFAULT_CONFIG = _PACKAGE_ROOT / "config" / "default.toml"
_USER_CONFIG = Path.home() / ".config" / "spk" / "config.toml"
_PROJECT_CONFIG = Path("spk.toml")


class WhisperConfig(BaseModel):
    backend: Literal["api"] = "api"
    api_model: str = "groq/whisper-large-v3-turbo"
    api_base: str | None = None  # Custom API endpoint (e.g. self-hosted Whisper)
    language: str = "auto"
    probe_seconds: float = 30.0  # leading clip used to detect the language once

    @property
    def model(self) -> str:
        return self.api_model


class PlayerConfig(BaseModel):
    backend: Literal["mpv", "simulated"] = "mpv"
    sentence_poll_interval: float = 0.02
    word_poll_interval: float = 0.015
    cue: Literal["bell", "none"] = "bell"


class SpkConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SPK_",
        env_nested_delimiter="__",
    )

    whisper: WhisperConfig = WhisperConfig()
    practice: PlaybackSettings = PlaybackSettings()
    player: PlayerConfig = PlayerConfig()
    workspace_dir: Path = Path("./spk_workspace")


def _read_layer(path: Path) -> dict:
    """One TOML layer, with its ``[general]`` keys lifted to the top level."""
    if not path.is_file():
        return {}
    with open(path, "rb") as f:
        data = tomllib.load(f)
    general = data.pop("general", None)
    return _deep_merge(data, general) if isinstance(general, dict) else data


def _env_layer() -> dict:
    """Only the fields the environment actually sets."""
    return SpkConfig().model_dump(exclude_unset=True)


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def _set_dotted(data: dict, key: str, value: object) -> None:
    *sections, leaf = key.split(".")
    for section in sections:
        data = data.setdefault(section, {})
    data[leaf] = value


def load_config(**cli_overrides: object) -> SpkConfig:
    """Load configuration from all layers and merge.

    Args:
        **cli_overrides: Direct overrides from CLI flags. Keys can be
            dot-separated (e.g. practice.practice_repeats=3). None values
            are skipped so unset flags keep the lower layers.
    """
    config_data: dict = {}
    for path in (_DEFAULT_CONFIG, _USER_CONFIG, _PROJECT_CONFIG):
        config_data = _deep_merge(config_data, _read_layer(path))

    # Init kwargs outrank the environment in pydantic-settings, so the env
    # layer is merged in by hand before the flags.
    config_data = _deep_merge(config_data, _env_layer())

    for key, value in cli_overrides.items():
        if value is not None:
            _set_dotted(config_data, key, value)

    return SpkConfig(**config_data)
