"""Practice modes: the scheduling policies for a run.

Mode parameters are clamped on construction, so a mode object always
describes a run the scheduler can execute.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from spk.core.settings import (
    OUTER_LOOPS_RANGE,
    REPEATS_RANGE,
    SILENCE_MULTIPLIER_RANGE,
    PlaybackSettings,
    clamp,
)


def _repeats(value: int) -> int:
    return clamp(int(value), *REPEATS_RANGE)


def _multiplier(value: float) -> float:
    return clamp(float(value), *SILENCE_MULTIPLIER_RANGE)


@dataclass(frozen=True)
class CuedSequence:
    """Play every sub-segment once, with a cue between segments."""

    name: ClassVar[str] = "partial"


@dataclass(frozen=True)
class RepeatPractice:
    """Repeat each sub-segment (or whole sentence) with proportional silence."""

    name: ClassVar[str] = "sentences"

    repeats: int = 2
    silence_multiplier: float = 1.0
    sentence_only: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "repeats", _repeats(self.repeats))
        object.__setattr__(self, "silence_multiplier", _multiplier(self.silence_multiplier))


@dataclass(frozen=True)
class WordShadowing:
    """Repeat each hard-word span, looping the whole word list."""

    name: ClassVar[str] = "words"

    repeats: int = 2
    silence_multiplier: float = 1.5
    outer_loops: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "repeats", _repeats(self.repeats))
        object.__setattr__(self, "silence_multiplier", _multiplier(self.silence_multiplier))
        object.__setattr__(self, "outer_loops", clamp(int(self.outer_loops), *OUTER_LOOPS_RANGE))


@dataclass(frozen=True)
class Mixed:
    """Shadow the hard words of each sentence part, then repeat the part."""

    name: ClassVar[str] = "mixed"

    word_repeats: int = 2
    word_silence_multiplier: float = 1.5
    sentence_repeats: int = 2
    sentence_silence_multiplier: float = 1.0
    sentence_only: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "word_repeats", _repeats(self.word_repeats))
        object.__setattr__(self, "sentence_repeats", _repeats(self.sentence_repeats))
        object.__setattr__(
            self, "word_silence_multiplier", _multiplier(self.word_silence_multiplier)
        )
        object.__setattr__(
            self, "sentence_silence_multiplier", _multiplier(self.sentence_silence_multiplier)
        )


PracticeMode = Union[CuedSequence, RepeatPractice, WordShadowing, Mixed]

MODE_NAMES = ("partial", "sentences", "words", "mixed")


def default_mode_name(settings: PlaybackSettings) -> str:
    """Mode implied by the enabled practice switches."""
    if settings.word_shadowing_enabled and settings.repeat_practice_enabled:
        return "mixed"
    if settings.word_shadowing_enabled:
        return "words"
    if settings.repeat_practice_enabled:
        return "sentences"
    return "partial"


def mode_from_settings(name: str | None, settings: PlaybackSettings) -> PracticeMode:
    """Build a mode by name, taking its parameters from saved settings.

    Raises:
        ValueError: If the name is not one of ``MODE_NAMES``.
    """
    name = name or default_mode_name(settings)
    if name == "partial":
        return CuedSequence()
    if name == "sentences":
        return RepeatPractice(
            repeats=settings.practice_repeats,
            silence_multiplier=settings.practice_silence_multiplier,
            sentence_only=settings.sentences_pause_only,
        )
    if name == "words":
        return WordShadowing(
            repeats=settings.word_practice_repeats,
            silence_multiplier=settings.word_practice_silence_multiplier,
            outer_loops=settings.word_outer_loops,
        )
    if name == "mixed":
        return Mixed(
            word_repeats=settings.word_practice_repeats,
            word_silence_multiplier=settings.word_practice_silence_multiplier,
            sentence_repeats=settings.practice_repeats,
            sentence_silence_multiplier=settings.practice_silence_multiplier,
            sentence_only=settings.sentences_pause_only,
        )
    raise ValueError(f"Unknown practice mode: {name!r}. Choose from: {', '.join(MODE_NAMES)}")
