"""Playback engine contract and a clock-driven simulated engine."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Protocol


class PlaybackError(RuntimeError):
    """The playback engine failed to load or drive the audio."""


class PlaybackEngine(Protocol):
    """Transport control over one loaded audio file.

    Positions are seconds. Seeking need not be sample-accurate; callers pad
    and poll to absorb positional slop.
    """

    def load(self, path: Path) -> float:
        """Load a file and return its duration in seconds."""
        ...

    def seek(self, position: float) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def stop(self) -> None: ...

    def position(self) -> float: ...

    @property
    def is_playing(self) -> bool: ...


class SimulatedEngine:
    """An engine that plays silence: position advances with a clock.

    Used for dry runs and tests. Every transport command is recorded in
    ``commands`` as a ``(name, argument)`` tuple.
    """

    def __init__(self, duration: float = 3600.0, clock: Callable[[], float] = time.monotonic):
        self.duration = duration
        self.commands: list[tuple[str, float | None]] = []
        self._clock = clock
        self._offset = 0.0
        self._started_at: float | None = None
        self.path: Path | None = None

    @property
    def is_playing(self) -> bool:
        return self._started_at is not None

    def load(self, path: Path) -> float:
        self.path = Path(path)
        self.commands.append(("load", None))
        self._offset = 0.0
        self._started_at = None
        return self.duration

    def seek(self, position: float) -> None:
        self.commands.append(("seek", position))
        self._offset = min(max(position, 0.0), self.duration)
        if self._started_at is not None:
            self._started_at = self._clock()

    def play(self) -> None:
        self.commands.append(("play", None))
        if self._started_at is None:
            self._started_at = self._clock()

    def pause(self) -> None:
        self.commands.append(("pause", None))
        if self._started_at is not None:
            self._offset = self.position()
            self._started_at = None

    def stop(self) -> None:
        self.commands.append(("stop", None))
        self._started_at = None
        self._offset = 0.0

    def position(self) -> float:
        elapsed = self._clock() - self._started_at if self._started_at is not None else 0.0
        return min(self._offset + elapsed, self.duration)
