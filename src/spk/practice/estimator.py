"""Predict how long a practice run will take, without touching playback."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from spk.practice.modes import PracticeMode
from spk.practice.plan import PracticePlan
from spk.practice.timeline import CueStep, PlayStep, SilenceStep, Step, build_timeline


@dataclass
class Estimate:
    """Breakdown of a run's predicted length in seconds."""

    play: float = 0.0
    silence: float = 0.0
    cues: float = 0.0
    segments: int = 0
    skipped: int = 0

    @property
    def total(self) -> float:
        return self.play + self.silence + self.cues


def summarize(steps: Iterable[Step]) -> Estimate:
    play, silence, cues = [], [], []
    segments = skipped = 0
    for step in steps:
        if isinstance(step, PlayStep):
            segments += 1
            skipped += step.skipped
            play.append(step.seconds)
        elif isinstance(step, SilenceStep):
            silence.append(step.seconds)
        elif isinstance(step, CueStep):
            cues.append(step.seconds)
    return Estimate(math.fsum(play), math.fsum(silence), math.fsum(cues), segments, skipped)


def estimate(mode: PracticeMode, plan: PracticePlan, duration: float | None = None) -> Estimate:
    return summarize(build_timeline(mode, plan, duration))


def estimate_seconds(
    mode: PracticeMode, plan: PracticePlan, duration: float | None = None
) -> float:
    """Total predicted seconds for running ``mode`` over ``plan``."""
    return estimate(mode, plan, duration).total


def format_duration(seconds: float) -> str:
    """Short human form, e.g. ``~45s``, ``~3m 20s``, ``~1h 02m``."""
    total = int(round(seconds))
    if total < 60:
        return f"~{total}s"
    minutes, secs = divmod(total, 60)
    if minutes < 60:
        return f"~{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"~{hours}h {minutes:02d}m"
