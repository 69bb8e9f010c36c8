"""Tests for configuration system."""

from pathlib import Path

from spk.core.config import PlayerConfig, WhisperConfig, _deep_merge, load_config


def test_default_config_loads():
    """Config loads without errors and has all required sections."""
    config = load_config()
    assert config.whisper.language  # non-empty
    assert config.player.sentence_poll_interval == 0.02
    assert config.player.word_poll_interval == 0.015
    assert config.practice.practice_repeats == 2


def test_cli_overrides():
    """CLI overrides take precedence over defaults."""
    config = load_config(**{"whisper.language": "de", "player.cue": "none"})
    assert config.whisper.language == "de"
    assert config.player.cue == "none"


def test_cli_override_none_ignored():
    default = load_config()
    overridden = load_config(**{"whisper.api_model": None})
    assert overridden.whisper.api_model == default.whisper.api_model


def test_practice_overrides_are_clamped():
    config = load_config(**{"practice.practice_repeats": 12})
    assert config.practice.practice_repeats == 5


def test_env_vars_beat_files(monkeypatch):
    monkeypatch.setenv("SPK_PLAYER__CUE", "none")
    monkeypatch.setenv("SPK_PRACTICE__PRACTICE_REPEATS", "4")
    config = load_config()
    assert config.player.cue == "none"
    assert config.practice.practice_repeats == 4


def test_cli_beats_env_vars(monkeypatch):
    monkeypatch.setenv("SPK_PLAYER__CUE", "none")
    assert load_config(**{"player.cue": "bell"}).player.cue == "bell"


def test_project_file_sets_workspace(workspace):
    assert load_config().workspace_dir == workspace


def test_deep_merge():
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    override = {"a": {"b": 10, "e": 5}, "f": 6}
    result = _deep_merge(base, override)
    assert result == {"a": {"b": 10, "c": 2, "e": 5}, "d": 3, "f": 6}


def test_deep_merge_no_mutation():
    base = {"a": {"b": 1}}
    _deep_merge(base, {"a": {"c": 2}})
    assert "c" not in base["a"]


def test_whisper_model_is_api_model():
    config = WhisperConfig(api_model="openai/whisper-1")
    assert config.model == "openai/whisper-1"
    assert config.probe_seconds > 0


def test_player_defaults():
    assert PlayerConfig().cue == "bell"
    assert isinstance(load_config().workspace_dir, Path)
