"""Fine-tune offsets and their merge into playable times.

A fine-tune nudges one segment's start and end by at most half a second in
either direction. Offsets are clamped when stored; the tuned times are
clamped again into the owning sentence when resolved, with some extra room
only at the outer edges of the sentence.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableMapping
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from spk.core.models import (
    HardWordKey,
    HardWordSpan,
    SegmentKey,
    SentenceSpan,
    SubSegment,
    TimedSegment,
)
from spk.core.settings import clamp

OFFSET_LIMIT = 0.5
EDGE_EXTRA = 0.7  # first start / last end may move this far outside the sentence
MIN_TUNED_SECONDS = 0.05
MIN_WORD_SECONDS = 0.03


def clamp_offset(value: float) -> float:
    return clamp(float(value), -OFFSET_LIMIT, OFFSET_LIMIT)


Offset = Annotated[float, AfterValidator(clamp_offset)]


class FineTune(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_offset: Offset = 0.0
    end_offset: Offset = 0.0

    @property
    def is_zero(self) -> bool:
        return self.start_offset == 0.0 and self.end_offset == 0.0


class FineTuneStore:
    """Clamping view over a ``{key: FineTune}`` mapping.

    Keys may be given as structured keys or their string form; the backing
    mapping is always keyed by strings so it serializes as-is.
    """

    def __init__(self, backing: MutableMapping[str, FineTune] | None = None):
        self._tunes = backing if backing is not None else {}

    def get(self, key: SegmentKey | str) -> FineTune:
        return self._tunes.get(str(key), FineTune())

    def set(self, key: SegmentKey | str, start_offset: float, end_offset: float) -> FineTune:
        tune = FineTune(start_offset=start_offset, end_offset=end_offset)
        self._tunes[str(key)] = tune
        return tune

    def nudge(self, key: SegmentKey | str, start_delta: float = 0.0, end_delta: float = 0.0):
        current = self.get(key)
        return self.set(key, current.start_offset + start_delta, current.end_offset + end_delta)

    def ensure(self, keys: Iterable[SegmentKey | str]) -> None:
        """Add a zero fine-tune for every key that has none."""
        for key in keys:
            self._tunes.setdefault(str(key), FineTune())

    def prune(self, sentence_id: str, keep: Iterable[SegmentKey | str]) -> None:
        """Drop tunes of one sentence whose key is not in ``keep``."""
        keep_ids = {str(k) for k in keep}
        for key in list(self._tunes):
            if key not in keep_ids and _sentence_of(key) == sentence_id:
                del self._tunes[key]

    def __contains__(self, key: object) -> bool:
        return str(key) in self._tunes

    def __iter__(self) -> Iterator[str]:
        return iter(self._tunes)

    def __len__(self) -> int:
        return len(self._tunes)


def _sentence_of(key: str) -> str | None:
    for key_type in (HardWordKey, SegmentKey):
        try:
            return key_type.parse(key).sentence_id
        except ValueError:
            continue
    return None


def tuned_times(
    base_start: float,
    base_end: float,
    tune: FineTune,
    sentence: SentenceSpan,
    *,
    first: bool,
    last: bool,
) -> tuple[float, float]:
    """Apply a fine-tune and clamp the result into the sentence.

    Only the first part's start and the last part's end may leave the
    sentence, by up to ``EDGE_EXTRA`` seconds. A collapsed interval is
    reopened to ``MIN_TUNED_SECONDS``.
    """
    low = max(0.0, sentence.start - EDGE_EXTRA) if first else sentence.start
    high = sentence.end + EDGE_EXTRA if last else sentence.end

    start = clamp(base_start + tune.start_offset, low, high)
    end = clamp(base_end + tune.end_offset, low, high)
    if end <= start:
        end = min(high, start + MIN_TUNED_SECONDS)
    return start, end


def resolve_sub_segments(
    sentence: SentenceSpan,
    parts: list[SubSegment],
    tunes: FineTuneStore,
) -> list[TimedSegment]:
    """Playable times for each sub-segment of a sentence."""
    resolved = []
    for part in parts:
        start, end = tuned_times(
            part.base_start,
            part.base_end,
            tunes.get(part.key),
            sentence,
            first=part.index == 0,
            last=part.index == len(parts) - 1,
        )
        resolved.append(TimedSegment(part.id, sentence.id, start, end, part.text))
    return resolved


def resolve_hard_word(
    span: HardWordSpan,
    sentence: SentenceSpan,
    tunes: FineTuneStore,
) -> TimedSegment:
    """Playable times for a hard-word span, kept inside its sentence."""
    tune = tunes.get(span.key)
    start = clamp(span.base_start + tune.start_offset, sentence.start, sentence.end)
    end = clamp(span.base_end + tune.end_offset, sentence.start, sentence.end)
    if end <= start:
        end = min(sentence.end, start + MIN_WORD_SECONDS)
    return TimedSegment(span.id, sentence.id, start, end, span.word)
