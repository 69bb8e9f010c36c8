"""Shared data models for speakloop.

Times are float seconds on the audio timeline. Identity of sentences,
sub-segments and hard words is derived from their timings rounded to whole
milliseconds, so annotations keyed by those ids survive a transcript reload
as long as the timings do not move by a millisecond or more.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field


def to_ms(seconds: float) -> int:
    """Round seconds to whole milliseconds, halves away from zero."""
    ms = seconds * 1000.0
    if ms >= 0:
        return int(math.floor(ms + 0.5))
    return -int(math.floor(-ms + 0.5))


@dataclass(frozen=True)
class WordTiming:
    """A single recognized word with timing from the speech-to-text engine."""

    word: str
    start: float
    end: float

    @property
    def duration(self) -> float:
        return max(0.0, self.end - self.start)


@dataclass(frozen=True)
class SentenceSpan:
    """A time interval of audio corresponding to one recognized sentence."""

    text: str
    start: float
    end: float

    @property
    def id(self) -> str:
        return f"{to_ms(self.start)}_{to_ms(self.end)}"

    @property
    def duration(self) -> float:
        return max(0.0, self.end - self.start)


@dataclass(frozen=True)
class SegmentKey:
    """Structured id of a sub-segment: parent sentence plus rounded bounds."""

    sentence_id: str
    start_ms: int
    end_ms: int

    _TAG = ""

    @classmethod
    def from_times(cls, sentence_id: str, start: float, end: float) -> SegmentKey:
        return cls(sentence_id, to_ms(start), to_ms(end))

    @classmethod
    def parse(cls, value: str) -> SegmentKey:
        """Parse the string form produced by ``str(key)``.

        Raises:
            ValueError: If the string does not have this key type's layout.
        """
        sep = f"|{cls._TAG}|" if cls._TAG else "|"
        sentence_id, _, bounds = value.rpartition(sep)
        if not sentence_id or "_" not in bounds:
            raise ValueError(f"Not a {cls.__name__}: {value!r}")
        if not cls._TAG and sentence_id.endswith("|hw"):
            raise ValueError(f"Not a {cls.__name__}: {value!r}")
        start, _, end = bounds.partition("_")
        return cls(sentence_id, int(start), int(end))

    def __str__(self) -> str:
        return f"{self.sentence_id}|{self.start_ms}_{self.end_ms}"


@dataclass(frozen=True)
class HardWordKey(SegmentKey):
    """Structured id of a hard-word span."""

    _TAG = "hw"

    def __str__(self) -> str:
        return f"{self.sentence_id}|hw|{self.start_ms}_{self.end_ms}"


@dataclass(frozen=True)
class SubSegment:
    """A sentence span subdivided by user-inserted pause markers."""

    sentence_id: str
    index: int
    base_start: float
    base_end: float
    text: str = ""

    @property
    def key(self) -> SegmentKey:
        return SegmentKey.from_times(self.sentence_id, self.base_start, self.base_end)

    @property
    def id(self) -> str:
        return str(self.key)


@dataclass(frozen=True)
class HardWordSpan:
    """A marked word, or bundle of consecutive words, singled out for shadowing."""

    sentence_id: str
    index: int
    base_start: float
    base_end: float
    word: str

    @property
    def key(self) -> HardWordKey:
        return HardWordKey.from_times(self.sentence_id, self.base_start, self.base_end)

    @property
    def id(self) -> str:
        return str(self.key)


@dataclass(frozen=True)
class TimedSegment:
    """A playable interval with fine-tune offsets already applied."""

    id: str
    sentence_id: str | None
    start: float
    end: float
    text: str = ""

    @property
    def duration(self) -> float:
        return max(0.0, self.end - self.start)


@dataclass
class Transcription:
    """Output from the speech-to-text engine."""

    text: str
    words: list[WordTiming] = field(default_factory=list)
    language: str | None = None
    model_used: str | None = None
