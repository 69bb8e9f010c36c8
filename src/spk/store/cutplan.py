"""Per-item cut plan: sentence edits, cuts, fine-tunes, settings and flags.

The cut plan is the only user-authored record of an audio item. It is
saved whole on every change. Cut times and hard-word spans are derived from
the edited sentence text each time an edit is applied, so they always agree
with the text the user sees.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_serializer, field_validator, model_validator

from spk.core.models import HardWordSpan, SentenceSpan, SubSegment, WordTiming
from spk.core.settings import LenientModel, PlaybackSettings
from spk.timing.finetune import FineTune, FineTuneStore
from spk.timing.markers import hard_word_spans_from_text, pause_times_from_text
from spk.timing.plan import build_sub_segments, usable_cuts, whole_sentence
from spk.utils.console import console
from spk.utils.paths import write_text_atomic

LEGACY_SENTENCE_ID = "_legacy"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CutPlan(LenientModel):
    sentence_edits: dict[str, str] = {}
    manual_cuts: dict[str, list[float]] = {}
    fine_tunes: dict[str, FineTune] = {}
    hard_word_fine_tunes: dict[str, FineTune] = {}
    settings: PlaybackSettings = Field(default_factory=PlaybackSettings)
    language: str | None = None
    flagged: set[str] = set()
    updated_at: datetime = Field(default_factory=_now)

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy_cuts(cls, data: Any) -> Any:
        # Early records kept a single flat list of cut times.
        if isinstance(data, dict) and not data.get("manual_cuts"):
            legacy = data.get("manual_cut_times")
            if isinstance(legacy, list) and legacy:
                data = {**data, "manual_cuts": {LEGACY_SENTENCE_ID: legacy}}
        return data

    @field_validator("manual_cuts")
    @classmethod
    def _sort_cuts(cls, value: dict[str, list[float]]) -> dict[str, list[float]]:
        return {sid: sorted(set(times)) for sid, times in value.items()}

    @field_serializer("flagged")
    def _serialize_flagged(self, value: set[str]) -> list[str]:
        return sorted(value)

    # --- Views ---

    @property
    def sub_segment_tunes(self) -> FineTuneStore:
        return FineTuneStore(self.fine_tunes)

    @property
    def hard_word_tunes(self) -> FineTuneStore:
        return FineTuneStore(self.hard_word_fine_tunes)

    def edited_text(self, sentence: SentenceSpan) -> str:
        return self.sentence_edits.get(sentence.id, sentence.text)

    def cuts_for(self, sentence: SentenceSpan) -> list[float]:
        if sentence.id in self.manual_cuts:
            return usable_cuts(sentence, self.manual_cuts[sentence.id])
        if sentence.id in self.sentence_edits:
            return []
        # Legacy flat cuts belong to whichever sentence contains them.
        return usable_cuts(sentence, self.manual_cuts.get(LEGACY_SENTENCE_ID, []))

    def sub_segments(self, sentence: SentenceSpan) -> list[SubSegment]:
        return build_sub_segments(sentence, self.cuts_for(sentence), self.edited_text(sentence))

    def segment_keys(self, sentence: SentenceSpan) -> list[str]:
        """Tunable sub-segment ids of a sentence: its parts, then the whole sentence."""
        keys = [part.id for part in self.sub_segments(sentence)]
        whole = whole_sentence(sentence).id
        return keys if whole in keys else [*keys, whole]

    def hard_words(
        self, sentence: SentenceSpan, words: Sequence[WordTiming]
    ) -> list[HardWordSpan]:
        if sentence.id not in self.sentence_edits:
            return []
        return hard_word_spans_from_text(self.sentence_edits[sentence.id], sentence, words)

    # --- Mutations ---

    def apply_sentence_edit(
        self,
        sentence: SentenceSpan,
        edited_text: str,
        words: Sequence[WordTiming],
    ) -> list[SubSegment]:
        """Store an edited sentence text and re-derive everything from it.

        Pause markers become the sentence's cut times and hard-word markers its
        hard-word spans. Fine-tunes of parts and hard words that no longer
        exist are dropped; new ones start at zero. Saving the unmodified text
        (or an empty one) removes the edit.

        Returns:
            The sentence's sub-segments after the edit.
        """
        sid = sentence.id
        text = edited_text.strip()
        if text and text != sentence.text:
            self.sentence_edits[sid] = text
        else:
            self.sentence_edits.pop(sid, None)
            text = sentence.text

        cuts = usable_cuts(sentence, pause_times_from_text(text, sentence, words))
        if cuts:
            self.manual_cuts[sid] = cuts
        elif LEGACY_SENTENCE_ID in self.manual_cuts:
            # An explicit empty list hides legacy cuts from this sentence.
            self.manual_cuts[sid] = []
        else:
            self.manual_cuts.pop(sid, None)

        parts = build_sub_segments(sentence, cuts, text)
        # The whole-sentence segment keeps its own tune across edits.
        keep = [p.key for p in parts] + [whole_sentence(sentence).key]
        self.sub_segment_tunes.prune(sid, keep=keep)
        self.sub_segment_tunes.ensure(p.key for p in parts)

        hard_words = self.hard_words(sentence, words)
        self.hard_word_tunes.prune(sid, keep=[hw.key for hw in hard_words])
        self.hard_word_tunes.ensure(hw.key for hw in hard_words)
        return parts

    def toggle_flag(self, sentence_id: str) -> bool:
        """Flip a sentence's flag; returns whether it is now flagged."""
        if sentence_id in self.flagged:
            self.flagged.discard(sentence_id)
            return False
        self.flagged.add(sentence_id)
        return True

    def touch(self) -> None:
        self.updated_at = _now()


class CutPlanStore:
    """JSON files of cut plans, one per audio item, under a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, item_id: str) -> Path:
        return self.directory / item_id / "cutplan.json"

    def load(self, item_id: str) -> CutPlan | None:
        """Load a saved cut plan.

        A missing file yields None. An unreadable or corrupt file also yields
        None (with a warning): annotations must never block playback.
        """
        path = self.path_for(item_id)
        if not path.is_file():
            return None
        try:
            return CutPlan.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            console.print(f"[yellow]Ignoring unreadable cut plan {path.name}: {e}[/yellow]")
            return None

    def save(self, item_id: str, plan: CutPlan) -> Path:
        return write_text_atomic(self.path_for(item_id), plan.model_dump_json(indent=2))

    def delete(self, item_id: str) -> None:
        self.path_for(item_id).unlink(missing_ok=True)
