"""Practice session log shared by all items of a workspace."""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from spk.utils.console import console
from spk.utils.paths import write_text_atomic

STATS_FILENAME = "practice_stats.json"
MIN_SESSION_SECONDS = 0.3  # shorter runs are accidental starts


class PracticeSession(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    item_id: str
    item_title: str = ""
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    duration_seconds: float
    mode: str
    flagged_only: bool = False
    word_repeats: int = 0
    sentence_repeats: int = 0


_SESSIONS = TypeAdapter(list[PracticeSession])


class PracticeStats:
    """Append-only list of practice sessions stored as one JSON file."""

    def __init__(self, workspace_dir: Path):
        self.path = Path(workspace_dir) / STATS_FILENAME

    def load(self) -> list[PracticeSession]:
        if not self.path.is_file():
            return []
        try:
            return _SESSIONS.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            console.print(f"[yellow]Ignoring unreadable practice log: {e}[/yellow]")
            return []

    def append(self, session: PracticeSession) -> bool:
        """Record a finished session; returns False if it was too short to count."""
        if session.duration_seconds < MIN_SESSION_SECONDS:
            return False
        sessions = self.load()
        sessions.append(session)
        write_text_atomic(self.path, _SESSIONS.dump_json(sessions, indent=2).decode())
        return True

    def total_seconds(self, item_id: str | None = None) -> float:
        return sum(
            s.duration_seconds for s in self.load() if item_id is None or s.item_id == item_id
        )

    def mode_totals(self, item_id: str | None = None) -> dict[str, float]:
        totals: dict[str, float] = defaultdict(float)
        for s in self.load():
            if item_id is None or s.item_id == item_id:
                totals[s.mode] += s.duration_seconds
        return dict(totals)


def format_hms(seconds: float) -> str:
    """``H:MM:SS`` form of a duration."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"
