"""Persisted transcript of one audio item: text, word timings and language."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from spk.core.models import SentenceSpan, Transcription, WordTiming
from spk.timing.segmenter import segment_sentences
from spk.utils.console import console
from spk.utils.paths import write_text_atomic


class WordRecord(BaseModel):
    word: str
    start: float
    end: float


class TranscriptRecord(BaseModel):
    text: str
    words: list[WordRecord] = []
    language: str | None = None
    model: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_transcription(cls, transcription: Transcription) -> TranscriptRecord:
        return cls(
            text=transcription.text,
            words=[WordRecord(word=w.word, start=w.start, end=w.end) for w in transcription.words],
            language=transcription.language,
            model=transcription.model_used,
        )

    def word_timings(self) -> list[WordTiming]:
        return [WordTiming(w.word, w.start, w.end) for w in self.words]

    def sentences(self) -> list[SentenceSpan]:
        return segment_sentences(self.word_timings())


class TranscriptStore:
    """JSON transcript files, one per audio item, under a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, item_id: str) -> Path:
        return self.directory / item_id / "transcript.json"

    def load(self, item_id: str) -> TranscriptRecord | None:
        path = self.path_for(item_id)
        if not path.is_file():
            return None
        try:
            return TranscriptRecord.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as e:
            console.print(f"[yellow]Ignoring unreadable transcript {path.name}: {e}[/yellow]")
            return None

    def save(self, item_id: str, record: TranscriptRecord) -> Path:
        return write_text_atomic(self.path_for(item_id), record.model_dump_json(indent=2))

    def delete(self, item_id: str) -> None:
        self.path_for(item_id).unlink(missing_ok=True)
