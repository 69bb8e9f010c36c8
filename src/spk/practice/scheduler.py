"""Drive the playback engine through a practice run.

One ``PlaybackScheduler`` owns the engine of one audio item. A run is a
single asyncio task executing the steps built by ``build_timeline``; starting
another run, or previewing a segment, first cancels and joins the active
one, so the transport never has two owners.

Cancellation is cooperative: it lands at the next await, which is at most
one poll tick or one 50 ms silence slice away. A cancelled run leaves the
transport paused and does not emit a completion event. Pause parks the run
on an event until resume, without consuming silence time.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from spk.core.config import PlayerConfig
from spk.core.events import EventCallback, PracticeEvent
from spk.core.models import TimedSegment
from spk.player.engine import PlaybackEngine, PlaybackError
from spk.practice.modes import PracticeMode
from spk.practice.plan import PracticePlan
from spk.practice.timeline import (
    CueStep,
    PlayStep,
    ProgressStep,
    SegmentKind,
    Step,
    build_timeline,
    preview_timeline,
)

SLEEP_SLICE_SECONDS = 0.05
MIN_POLL_SECONDS = 0.002
# The engine is considered stuck when its position stops moving this long.
STALL_SECONDS = 0.5


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class SchedulerStatus:
    state: SchedulerState = SchedulerState.IDLE
    paused: bool = False
    playing: bool = False
    index: int = 0
    total: int = 0
    sentence_id: str | None = None
    error: str | None = None


@dataclass
class RunResult:
    completed: bool = False
    cancelled: bool = False
    elapsed: float = 0.0
    error: str | None = None


class PlaybackScheduler:
    """Cancellable practice runs over one playback engine.

    Args:
        engine: Transport for the audio item.
        config: Poll intervals.
        cue: Called for every audible cue between segments.
        on_event: Receives started/progress/paused/resumed/completed/error events.
    """

    def __init__(
        self,
        engine: PlaybackEngine,
        config: PlayerConfig | None = None,
        cue: Callable[[], None] | None = None,
        on_event: EventCallback | None = None,
    ):
        self._engine = engine
        self._config = config or PlayerConfig()
        self._cue = cue
        self._on_event = on_event
        self._status = SchedulerStatus()
        self._task: asyncio.Task[RunResult] | None = None
        self._resumed: asyncio.Event | None = None
        self._loaded: Path | None = None
        self._duration: float | None = None
        self.last_result: RunResult | None = None

    @property
    def status(self) -> SchedulerStatus:
        """Snapshot of the run state; mutating it has no effect."""
        return dataclasses.replace(self._status)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # --- Commands ---

    async def start(
        self, mode: PracticeMode, plan: PracticePlan, audio_path: Path
    ) -> asyncio.Task[RunResult]:
        """Cancel any active run, then start a new one in the background.

        Raises:
            FileNotFoundError: If the audio file does not exist.
            PlaybackError: If the engine cannot load the audio.
            ValueError: If the mode yields nothing to play.
        """
        await self.cancel()
        duration = self._prepare(audio_path)
        steps = build_timeline(mode, plan, duration)
        if not any(isinstance(step, PlayStep) for step in steps):
            raise ValueError(f"Nothing to practise in {mode.name} mode.")
        return self._launch(steps)

    async def run(self, mode: PracticeMode, plan: PracticePlan, audio_path: Path) -> RunResult:
        """Start a run and wait for it to finish or be cancelled."""
        task = await self.start(mode, plan, audio_path)
        return await task

    async def preview(self, segment: TimedSegment, audio_path: Path) -> RunResult:
        """Play one segment once, under the same cancel-then-run discipline."""
        await self.cancel()
        duration = self._prepare(audio_path)
        return await self._launch(preview_timeline(segment, duration))

    async def cancel(self) -> RunResult | None:
        """Cancel the active run and wait for it to wind down."""
        task = self._task
        if task is None or task.done():
            return None
        task.cancel()
        try:
            return await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            # Cancelled before its first step ran.
            return self._finish(RunResult(cancelled=True))

    def pause(self) -> bool:
        if not self.is_running or self._status.paused:
            return False
        self._status.paused = True
        self._resumed.clear()
        self._emit("paused")
        return True

    def resume(self) -> bool:
        if not self.is_running or not self._status.paused:
            return False
        self._status.paused = False
        self._resumed.set()
        self._emit("resumed")
        return True

    def toggle_pause(self) -> bool:
        """Pause or resume; returns the new paused flag."""
        if self._status.paused:
            self.resume()
        else:
            self.pause()
        return self._status.paused

    # --- Run ---

    def _prepare(self, audio_path: Path) -> float:
        path = Path(audio_path)
        if not path.is_file():
            raise FileNotFoundError(f"Audio file not found: {path}")
        if self._loaded != path.resolve():
            self._duration = self._engine.load(path)
            self._loaded = path.resolve()
        return self._duration

    def _launch(self, steps: list[Step]) -> asyncio.Task[RunResult]:
        self._resumed = asyncio.Event()
        self._resumed.set()
        self._status = SchedulerStatus(state=SchedulerState.RUNNING)
        self._task = asyncio.create_task(self._run(steps))
        return self._task

    async def _run(self, steps: list[Step]) -> RunResult:
        began = asyncio.get_running_loop().time()
        result = RunResult()
        self._emit("started")
        try:
            await self._execute(steps)
        except asyncio.CancelledError:
            result.cancelled = True
            with contextlib.suppress(PlaybackError):
                self._engine.pause()
        except PlaybackError as e:
            result.error = str(e)
            with contextlib.suppress(PlaybackError):
                self._engine.stop()
            self._finish(result, began)
            self._status.error = str(e)
            self._emit("error", message=str(e))
            raise
        else:
            result.completed = True

        self._finish(result, began)
        if result.completed:
            self._emit("completed")
        return result

    def _finish(self, result: RunResult, began: float | None = None) -> RunResult:
        if began is not None:
            result.elapsed = asyncio.get_running_loop().time() - began
        self._status = SchedulerStatus()
        self.last_result = result
        return result

    async def _execute(self, steps: list[Step]) -> None:
        for step in steps:
            if isinstance(step, ProgressStep):
                self._status.index = step.index
                self._status.total = step.total
                self._status.sentence_id = step.sentence_id
                self._emit("progress")
            elif isinstance(step, PlayStep):
                if not step.skipped:
                    await self._play(step)
            elif isinstance(step, CueStep):
                if self._cue is not None:
                    self._cue()
                await self._sleep(step.seconds)
            else:
                await self._sleep(step.seconds)

    async def _play(self, step: PlayStep) -> None:
        engine = self._engine
        loop = asyncio.get_running_loop()

        engine.seek(step.start)
        engine.play()
        self._status.playing = True
        try:
            position = engine.position()
            last_position, last_moved = position, loop.time()
            while position < step.end:
                if self._status.paused:
                    engine.pause()
                    self._status.playing = False
                    await self._resumed.wait()
                    engine.play()
                    self._status.playing = True
                    last_moved = loop.time()

                await asyncio.sleep(self._poll_delay(step, position))
                position = engine.position()
                now = loop.time()
                if position > last_position:
                    last_position, last_moved = position, now
                elif now - last_moved > STALL_SECONDS:
                    break
        except asyncio.CancelledError:
            engine.pause()
            raise
        finally:
            self._status.playing = False
        engine.pause()

    def _poll_delay(self, step: PlayStep, position: float) -> float:
        if step.kind is SegmentKind.WORD:
            remaining = step.end - position
            return max(MIN_POLL_SECONDS, min(self._config.word_poll_interval, remaining))
        return self._config.sentence_poll_interval

    async def _sleep(self, seconds: float) -> None:
        """Sleep in short slices; time spent paused does not count."""
        remaining = max(0.0, seconds)
        while remaining > 0:
            if self._status.paused:
                await self._resumed.wait()
            step = min(remaining, SLEEP_SLICE_SECONDS)
            await asyncio.sleep(step)
            remaining -= step

    def _emit(self, kind: str, message: str = "") -> None:
        if self._on_event:
            status = self._status
            self._on_event(
                PracticeEvent(
                    kind=kind,
                    index=status.index,
                    total=status.total,
                    sentence_id=status.sentence_id,
                    message=message,
                )
            )
