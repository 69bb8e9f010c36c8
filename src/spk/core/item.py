"""One audio item in the workspace: its transcript, sentences and cut plan."""

from __future__ import annotations

from functools import cached_property
from pathlib import Path

from spk.core.config import SpkConfig
from spk.core.models import SentenceSpan, Transcription, WordTiming
from spk.practice.plan import PracticePlan
from spk.store.cutplan import CutPlan, CutPlanStore
from spk.store.transcript import TranscriptRecord, TranscriptStore
from spk.utils.paths import item_id


class PracticeItem:
    """Loads and saves everything recorded about one audio file.

    A missing cut plan starts from the configured practice settings.
    """

    def __init__(self, audio_path: Path, config: SpkConfig):
        self.audio_path = Path(audio_path)
        self.config = config
        self.id = item_id(self.audio_path)
        self._transcripts = TranscriptStore(config.workspace_dir)
        self._cut_plans = CutPlanStore(config.workspace_dir)
        self.transcript = self._transcripts.load(self.id)
        self.cut_plan = self._cut_plans.load(self.id) or CutPlan(
            settings=config.practice.model_copy()
        )

    @property
    def title(self) -> str:
        return self.audio_path.stem

    @property
    def has_transcript(self) -> bool:
        return self.transcript is not None

    def require_transcript(self) -> TranscriptRecord:
        if self.transcript is None:
            raise LookupError(
                f"No transcript for {self.audio_path.name}. Run 'spk transcribe' first."
            )
        return self.transcript

    @cached_property
    def words(self) -> list[WordTiming]:
        return self.require_transcript().word_timings()

    @cached_property
    def sentences(self) -> list[SentenceSpan]:
        return self.require_transcript().sentences()

    def sentence(self, index: int) -> SentenceSpan:
        """Sentence by 1-based index, as listed by ``spk sentences``."""
        if not 1 <= index <= len(self.sentences):
            raise IndexError(f"Sentence {index} out of range 1..{len(self.sentences)}")
        return self.sentences[index - 1]

    def sentence_by_id(self, sentence_id: str) -> SentenceSpan:
        for span in self.sentences:
            if span.id == sentence_id:
                return span
        raise KeyError(f"Unknown sentence id: {sentence_id}")

    def practice_plan(self, flagged_only: bool | None = None) -> PracticePlan:
        return PracticePlan.build(self.sentences, self.words, self.cut_plan, flagged_only)

    def set_transcription(self, transcription: Transcription) -> None:
        """Replace the transcript; the detected language is kept unless one was chosen."""
        self.transcript = TranscriptRecord.from_transcription(transcription)
        self.__dict__.pop("words", None)
        self.__dict__.pop("sentences", None)
        if self.cut_plan.language is None:
            self.cut_plan.language = transcription.language
        self._transcripts.save(self.id, self.transcript)
        self.save()

    def save(self) -> Path:
        self.cut_plan.touch()
        return self._cut_plans.save(self.id, self.cut_plan)
