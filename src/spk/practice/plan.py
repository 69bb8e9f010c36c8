"""Assemble the playable segments of one audio item for a practice run."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from spk.core.models import SentenceSpan, TimedSegment, WordTiming
from spk.store.cutplan import CutPlan
from spk.timing.finetune import resolve_hard_word, resolve_sub_segments
from spk.timing.plan import build_sub_segments, whole_sentence


@dataclass
class SentencePlan:
    """One sentence with its tuned parts, whole-sentence segment and hard words."""

    sentence: SentenceSpan
    parts: list[TimedSegment]
    whole: TimedSegment
    words: list[TimedSegment] = field(default_factory=list)

    def words_in(self, part: TimedSegment) -> list[TimedSegment]:
        """Hard words whose midpoint lies inside the part."""
        return [w for w in self.words if part.start <= (w.start + w.end) * 0.5 <= part.end]


@dataclass
class PracticePlan:
    sentences: list[SentencePlan] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.sentences)

    @property
    def word_segments(self) -> list[TimedSegment]:
        """All hard-word segments across sentences, by start time."""
        return sorted((w for s in self.sentences for w in s.words), key=lambda w: w.start)

    @classmethod
    def build(
        cls,
        spans: Sequence[SentenceSpan],
        words: Sequence[WordTiming],
        cut_plan: CutPlan,
        flagged_only: bool | None = None,
    ) -> PracticePlan:
        """Resolve every sentence of an item against its saved cut plan.

        Args:
            spans: Sentence spans of the transcript.
            words: Word timings of the transcript.
            cut_plan: Saved edits, cuts and fine-tunes.
            flagged_only: Keep only flagged sentences. Defaults to the saved setting.
        """
        if flagged_only is None:
            flagged_only = cut_plan.settings.flagged_only

        sentences = []
        for span in spans:
            if flagged_only and span.id not in cut_plan.flagged:
                continue
            text = cut_plan.edited_text(span)
            parts = build_sub_segments(span, cut_plan.cuts_for(span), text)
            tunes = cut_plan.sub_segment_tunes
            sentences.append(
                SentencePlan(
                    sentence=span,
                    parts=resolve_sub_segments(span, parts, tunes),
                    whole=resolve_sub_segments(span, [whole_sentence(span, text)], tunes)[0],
                    words=[
                        resolve_hard_word(hw, span, cut_plan.hard_word_tunes)
                        for hw in cut_plan.hard_words(span, words)
                    ],
                )
            )
        return cls(sentences)
