"""Shared CLI utilities."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from spk.core.config import SpkConfig, load_config
from spk.core.item import PracticeItem
from spk.core.models import SentenceSpan, TimedSegment
from spk.player.engine import PlaybackEngine, SimulatedEngine
from spk.utils.console import console


def fail(message: str) -> NoReturn:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def open_item(audio: Path, need_transcript: bool = True, **overrides: object) -> PracticeItem:
    """Load config and the workspace records of an audio file, or exit with an error."""
    if not audio.is_file():
        fail(f"File not found: {audio}")
    item = PracticeItem(audio, load_config(**overrides))
    if need_transcript and not item.has_transcript:
        fail(f"No transcript for {audio.name}. Run 'spk transcribe {audio}' first.")
    return item


def pick_sentence(item: PracticeItem, index: int) -> SentenceSpan:
    try:
        return item.sentence(index)
    except IndexError as e:
        fail(str(e))


def make_engine(
    config: SpkConfig, dry_run: bool = False, duration: float = 3600.0
) -> PlaybackEngine:
    """Playback engine for the configured backend; ``dry_run`` plays silence."""
    if dry_run or config.player.backend == "simulated":
        return SimulatedEngine(duration=duration)
    from spk.player.mpv_engine import MpvEngine

    try:
        return MpvEngine()
    except (FileNotFoundError, ImportError) as e:
        fail(str(e))


def format_span(segment: SentenceSpan | TimedSegment) -> str:
    return f"{segment.start:7.2f} - {segment.end:7.2f}"
