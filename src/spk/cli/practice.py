"""spk practice/estimate/stats commands: run and plan practice sessions."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from spk.cli.utils import fail, make_engine, open_item
from spk.core.config import load_config
from spk.core.events import PracticeEvent
from spk.core.item import PracticeItem
from spk.core.models import TimedSegment
from spk.player.engine import PlaybackError
from spk.practice.estimator import estimate as estimate_run
from spk.practice.estimator import format_duration
from spk.practice.modes import MODE_NAMES, Mixed, PracticeMode, RepeatPractice, mode_from_settings
from spk.practice.plan import PracticePlan
from spk.practice.scheduler import PlaybackScheduler, RunResult
from spk.store.stats import PracticeSession, PracticeStats, format_hms
from spk.utils.console import console

AudioArg = Annotated[Path, typer.Argument(help="Audio file of the practice item.")]
ModeOpt = Annotated[
    Optional[str],
    typer.Option("--mode", "-m", help=f"Practice mode: {', '.join(MODE_NAMES)}."),
]
FlaggedOpt = Annotated[
    Optional[bool],
    typer.Option("--flagged-only/--all-sentences", help="Override the saved flagged-only setting."),
]


def _mode_and_plan(
    item: PracticeItem, mode_name: str | None, flagged_only: bool | None
) -> tuple[PracticeMode, PracticePlan]:
    try:
        mode = mode_from_settings(mode_name, item.cut_plan.settings)
    except ValueError as e:
        fail(str(e))
    return mode, item.practice_plan(flagged_only)


def _duration_hint(item: PracticeItem) -> float | None:
    """Audio length as far as the transcript knows it."""
    words = item.words
    return max(w.end for w in words) if words else None


def estimate(audio: AudioArg, mode: ModeOpt = None, flagged_only: FlaggedOpt = None) -> None:
    """Predict how long a practice run will take."""
    item = open_item(audio)
    practice_mode, plan = _mode_and_plan(item, mode, flagged_only)
    result = estimate_run(practice_mode, plan, _duration_hint(item))

    table = Table(title=f"{practice_mode.name} practice: {item.title}")
    table.add_column("Part", style="bold cyan")
    table.add_column("Seconds", justify="right")
    table.add_row("Playback", f"{result.play:.1f}")
    table.add_row("Silence", f"{result.silence:.1f}")
    table.add_row("Cues", f"{result.cues:.1f}")
    table.add_row("[bold]Total[/bold]", f"[bold]{result.total:.1f}[/bold]")
    console.print(table)
    console.print(
        f"{format_duration(result.total)} for {result.segments} segment plays "
        f"across {len(plan)} sentence(s)"
    )
    if result.skipped:
        console.print(f"[dim]{result.skipped} segment(s) too short to play are skipped.[/dim]")


def _print_event(event: PracticeEvent, texts: dict[str, str]) -> None:
    if event.kind == "progress":
        text = texts.get(event.sentence_id or "", "")
        console.print(f"[dim][{event.index}/{event.total}][/dim] {text}")
    elif event.kind == "error":
        console.print(f"[red]Playback error:[/red] {event.message}")


def _sentence_repeats(mode: PracticeMode) -> int:
    if isinstance(mode, RepeatPractice):
        return mode.repeats
    if isinstance(mode, Mixed):
        return mode.sentence_repeats
    return 1


def _run(scheduler: PlaybackScheduler, coro) -> RunResult:
    """Run a scheduler coroutine to completion; Ctrl-C cancels it quietly."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        return scheduler.last_result or RunResult(cancelled=True)
    except (FileNotFoundError, PlaybackError, ValueError) as e:
        fail(str(e))


def practice(
    audio: AudioArg,
    mode: ModeOpt = None,
    flagged_only: FlaggedOpt = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Play through a silent simulated engine."),
    ] = False,
) -> None:
    """Run a practice session. Ctrl-C stops it."""
    item = open_item(audio)
    practice_mode, plan = _mode_and_plan(item, mode, flagged_only)
    if not len(plan):
        fail("No sentences to practise. Flag some sentences or use --all-sentences.")

    config = item.config
    texts = {s.sentence.id: s.whole.text for s in plan.sentences}
    engine = make_engine(config, dry_run=dry_run, duration=_duration_hint(item) or 3600.0)
    scheduler = PlaybackScheduler(
        engine,
        config.player,
        cue=console.bell if config.player.cue == "bell" else None,
        on_event=lambda event: _print_event(event, texts),
    )

    predicted = estimate_run(practice_mode, plan, _duration_hint(item)).total
    console.print(
        f"[bold]{practice_mode.name} practice[/bold] ({format_duration(predicted)} estimated)"
    )
    started_at = datetime.now(timezone.utc)
    try:
        result = _run(scheduler, scheduler.run(practice_mode, plan, item.audio_path))
    finally:
        close = getattr(engine, "close", None)
        if close is not None:
            close()

    if result.completed:
        console.print(f"[green]Completed[/green] in {format_hms(result.elapsed)}")
    elif result.cancelled:
        console.print(f"[dim]Stopped after {format_hms(result.elapsed)}[/dim]")

    settings = item.cut_plan.settings
    logged = PracticeStats(config.workspace_dir).append(
        PracticeSession(
            item_id=item.id,
            item_title=item.title,
            started_at=started_at,
            duration_seconds=result.elapsed,
            mode=practice_mode.name,
            flagged_only=settings.flagged_only if flagged_only is None else flagged_only,
            word_repeats=settings.word_practice_repeats,
            sentence_repeats=_sentence_repeats(practice_mode),
        )
    )
    if not logged:
        console.print("[dim]Session too short to log.[/dim]")


def play_preview(item: PracticeItem, segment: TimedSegment, dry_run: bool = False) -> None:
    """Play one segment once with sentence padding."""
    engine = make_engine(item.config, dry_run=dry_run, duration=_duration_hint(item) or 3600.0)
    scheduler = PlaybackScheduler(engine, item.config.player)
    try:
        _run(scheduler, scheduler.preview(segment, item.audio_path))
    finally:
        close = getattr(engine, "close", None)
        if close is not None:
            close()


def stats(
    audio: Annotated[
        Optional[Path],
        typer.Argument(help="Audio file; omit for the whole workspace."),
    ] = None,
) -> None:
    """Show total practice time, per mode."""
    if audio is not None:
        item = open_item(audio, need_transcript=False)
        workspace, item_id, title = item.config.workspace_dir, item.id, item.title
    else:
        workspace, item_id, title = load_config().workspace_dir, None, "all items"

    log = PracticeStats(workspace)
    totals = log.mode_totals(item_id)
    if not totals:
        console.print(f"[dim]No practice sessions yet for {title}.[/dim]")
        return

    table = Table(title=f"Practice time: {title}")
    table.add_column("Mode", style="bold cyan")
    table.add_column("Time", justify="right")
    for name in MODE_NAMES:
        if totals.get(name, 0.0) > 0.1:
            table.add_row(name, format_hms(totals[name]))
    table.add_row("[bold]Total[/bold]", f"[bold]{format_hms(log.total_seconds(item_id))}[/bold]")
    console.print(table)
