"""Practice run event system.

The scheduler emits events through a plain callback so that consumers (the
CLI progress line, a GUI, a session logger) can follow a run without touching
scheduling logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass
class PracticeEvent:
    """A state or progress event emitted during a practice run.

    Attributes:
        kind: started, progress, paused, resumed, completed or error.
        index: 1-based position of the current unit (sentence or word).
        total: Number of units in the run.
        sentence_id: Sentence the current unit belongs to, if any.
        message: Human-readable status message.
    """

    kind: str
    index: int = 0
    total: int = 0
    sentence_id: str | None = None
    message: str = ""

    @property
    def progress(self) -> float:
        return self.index / self.total if self.total else 0.0


EventCallback = Callable[[PracticeEvent], None]
