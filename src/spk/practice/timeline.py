"""The timing formula shared by the scheduler and the duration estimator.

``build_timeline`` expands a practice mode over a plan into a flat list of
steps. The scheduler executes the steps against the playback engine; the
estimator only adds up their durations. Both read every padding, floor,
silence and cue constant from here, so a preview cannot drift from a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from spk.core.models import TimedSegment
from spk.practice.modes import CuedSequence, Mixed, PracticeMode, RepeatPractice, WordShadowing
from spk.practice.plan import PracticePlan

CUE_GAP_SECONDS = 0.12
SENTENCE_SILENCE_FLOOR = 0.05
WORD_SILENCE_FLOOR = 0.03


class SegmentKind(str, Enum):
    SENTENCE = "sentence"
    WORD = "word"


@dataclass(frozen=True)
class Padding:
    """Head/tail padding around a segment and the shortest playable result."""

    head: float
    tail: float
    floor: float
    kind: SegmentKind = SegmentKind.SENTENCE

    def apply(self, start: float, end: float, duration: float | None = None) -> tuple[float, float]:
        padded_start = max(0.0, start - self.head)
        padded_end = end + self.tail
        if duration is not None:
            padded_end = min(duration, padded_end)
        return padded_start, max(padded_start, padded_end)


SENTENCE_PADDING = Padding(head=0.02, tail=0.12, floor=0.03)
WHOLE_SENTENCE_PADDING = Padding(head=0.02, tail=0.24, floor=0.03)
WORD_PADDING = Padding(head=0.0, tail=0.0, floor=0.02, kind=SegmentKind.WORD)


@dataclass(frozen=True)
class PlayStep:
    segment: TimedSegment
    start: float
    end: float
    kind: SegmentKind
    floor: float

    @property
    def skipped(self) -> bool:
        return self.end - self.start < self.floor

    @property
    def seconds(self) -> float:
        return 0.0 if self.skipped else self.end - self.start


@dataclass(frozen=True)
class SilenceStep:
    seconds: float


@dataclass(frozen=True)
class CueStep:
    """Audible cue followed by a short fixed gap."""

    seconds: float = CUE_GAP_SECONDS


@dataclass(frozen=True)
class ProgressStep:
    """Boundary marker: the run moves on to unit ``index`` of ``total``."""

    index: int
    total: int
    sentence_id: str | None = None
    seconds: float = 0.0


Step = Union[PlayStep, SilenceStep, CueStep, ProgressStep]


def play_step(
    segment: TimedSegment,
    padding: Padding,
    duration: float | None = None,
) -> PlayStep:
    start, end = padding.apply(segment.start, segment.end, duration)
    return PlayStep(segment, start, end, padding.kind, padding.floor)


def _drill(
    segment: TimedSegment,
    repeats: int,
    silence: float,
    padding: Padding,
    duration: float | None,
) -> list[Step]:
    steps: list[Step] = []
    for _ in range(repeats):
        steps.append(play_step(segment, padding, duration))
        steps.append(SilenceStep(silence))
    return steps


def _drill_word(
    segment: TimedSegment, repeats: int, multiplier: float, duration: float | None
) -> list[Step]:
    silence = max(WORD_SILENCE_FLOOR, segment.duration) * multiplier
    return _drill(segment, repeats, silence, WORD_PADDING, duration)


def _drill_part(
    segment: TimedSegment,
    repeats: int,
    multiplier: float,
    padding: Padding,
    duration: float | None,
) -> list[Step]:
    silence = max(SENTENCE_SILENCE_FLOOR, segment.duration) * multiplier
    return _drill(segment, repeats, silence, padding, duration)


def _cued_sequence(plan: PracticePlan, duration: float | None) -> list[Step]:
    steps: list[Step] = []
    remaining = sum(len(s.parts) for s in plan.sentences)
    for index, sentence in enumerate(plan.sentences, start=1):
        steps.append(ProgressStep(index, len(plan), sentence.sentence.id))
        for part in sentence.parts:
            steps.append(play_step(part, SENTENCE_PADDING, duration))
            remaining -= 1
            if remaining:
                steps.append(CueStep())
    return steps


def _repeat_practice(
    mode: RepeatPractice, plan: PracticePlan, duration: float | None
) -> list[Step]:
    steps: list[Step] = []
    padding = WHOLE_SENTENCE_PADDING if mode.sentence_only else SENTENCE_PADDING
    for index, sentence in enumerate(plan.sentences, start=1):
        steps.append(ProgressStep(index, len(plan), sentence.sentence.id))
        parts = [sentence.whole] if mode.sentence_only else sentence.parts
        for i, part in enumerate(parts):
            steps += _drill_part(part, mode.repeats, mode.silence_multiplier, padding, duration)
            if i < len(parts) - 1:
                steps.append(CueStep())
        steps.append(CueStep())  # sentence boundary
    return steps


def _word_shadowing(
    mode: WordShadowing, plan: PracticePlan, duration: float | None
) -> list[Step]:
    steps: list[Step] = []
    segments = plan.word_segments
    for _ in range(mode.outer_loops):
        for index, segment in enumerate(segments, start=1):
            steps.append(ProgressStep(index, len(segments), segment.sentence_id))
            steps += _drill_word(segment, mode.repeats, mode.silence_multiplier, duration)
            steps.append(CueStep())
    return steps


def _mixed(mode: Mixed, plan: PracticePlan, duration: float | None) -> list[Step]:
    steps: list[Step] = []
    padding = WHOLE_SENTENCE_PADDING if mode.sentence_only else SENTENCE_PADDING
    for index, sentence in enumerate(plan.sentences, start=1):
        steps.append(ProgressStep(index, len(plan), sentence.sentence.id))
        parts = [sentence.whole] if mode.sentence_only else sentence.parts
        for i, part in enumerate(parts):
            for word in sentence.words_in(part):
                steps += _drill_word(
                    word, mode.word_repeats, mode.word_silence_multiplier, duration
                )
                steps.append(CueStep())
            steps += _drill_part(
                part,
                mode.sentence_repeats,
                mode.sentence_silence_multiplier,
                padding,
                duration,
            )
            if i < len(parts) - 1:
                steps.append(CueStep())
        steps.append(CueStep())  # sentence boundary
    return steps


def build_timeline(
    mode: PracticeMode,
    plan: PracticePlan,
    duration: float | None = None,
) -> list[Step]:
    """Expand a practice mode over a plan into executable steps.

    Args:
        mode: The scheduling policy.
        plan: Resolved segments of the item.
        duration: Audio length in seconds; padded ends are clamped to it.
            Unknown durations leave the ends unclamped.
    """
    if isinstance(mode, CuedSequence):
        return _cued_sequence(plan, duration)
    if isinstance(mode, RepeatPractice):
        return _repeat_practice(mode, plan, duration)
    if isinstance(mode, WordShadowing):
        return _word_shadowing(mode, plan, duration)
    if isinstance(mode, Mixed):
        return _mixed(mode, plan, duration)
    raise TypeError(f"Unsupported practice mode: {mode!r}")


def preview_timeline(segment: TimedSegment, duration: float | None = None) -> list[Step]:
    """A single sentence-padded playback of one segment."""
    return [ProgressStep(1, 1, segment.sentence_id), play_step(segment, SENTENCE_PADDING, duration)]
