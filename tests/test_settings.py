"""Tests for clamped practice settings."""

from spk.core.settings import PlaybackSettings, clamp


def test_defaults():
    settings = PlaybackSettings()
    assert settings.practice_repeats == 2
    assert settings.practice_silence_multiplier == 1.0
    assert settings.word_practice_silence_multiplier == 1.5
    assert settings.word_outer_loops == 1
    assert not settings.flagged_only


def test_values_clamped_on_construction():
    settings = PlaybackSettings(
        practice_repeats=9,
        practice_silence_multiplier=0.01,
        playback_font_scale=3.0,
        word_outer_loops=0,
    )
    assert settings.practice_repeats == 5
    assert settings.practice_silence_multiplier == 0.2
    assert settings.playback_font_scale == 2.2
    assert settings.word_outer_loops == 1


def test_values_clamped_on_assignment():
    settings = PlaybackSettings()
    settings.word_practice_repeats = 0
    settings.word_practice_silence_multiplier = 40.0
    assert settings.word_practice_repeats == 1
    assert settings.word_practice_silence_multiplier == 15.0


def test_bad_field_reverts_to_default():
    settings = PlaybackSettings.model_validate(
        {"practice_repeats": "many", "flagged_only": True, "unknown": 1}
    )
    assert settings.practice_repeats == 2
    assert settings.flagged_only is True


def test_decode_clamps():
    settings = PlaybackSettings.model_validate_json('{"practice_repeats": 100}')
    assert settings.practice_repeats == 5


def test_clamp():
    assert clamp(5, 1, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp(2, 0, 3) == 2
