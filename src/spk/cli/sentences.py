"""spk sentences/edit/flag/tune commands: annotate sentences of an item."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from spk.cli.utils import fail, format_span, open_item, pick_sentence
from spk.core.item import PracticeItem
from spk.core.models import HardWordKey, SegmentKey, SentenceSpan, TimedSegment
from spk.timing.finetune import OFFSET_LIMIT, resolve_hard_word, resolve_sub_segments
from spk.timing.markers import (
    HARD_WORD_MARKER,
    PAUSE_MARKER,
    cursor_time,
    display_text,
    insert_marker,
)
from spk.timing.plan import whole_sentence
from spk.utils.console import console

AudioArg = Annotated[Path, typer.Argument(help="Audio file of the practice item.")]
IndexArg = Annotated[int, typer.Argument(help="Sentence number as listed by 'spk sentences'.")]


def sentences(
    audio: AudioArg,
    detail: Annotated[
        bool,
        typer.Option("--detail", "-d", help="List parts and hard words with their ids."),
    ] = False,
) -> None:
    """List the sentences of an item with their ids, flags and parts."""
    item = open_item(audio)
    plan = item.cut_plan

    table = Table(title=f"{item.title} ({len(item.sentences)} sentences)")
    table.add_column("#", justify="right", style="bold cyan")
    table.add_column("Id", style="dim")
    table.add_column("Time", no_wrap=True)
    table.add_column("Flag", justify="center")
    table.add_column("Parts", justify="right")
    table.add_column("Text")

    for i, span in enumerate(item.sentences, 1):
        table.add_row(
            str(i),
            span.id,
            format_span(span),
            "*" if span.id in plan.flagged else "",
            str(len(plan.cuts_for(span)) + 1),
            display_text(plan.edited_text(span)),
        )
    console.print(table)

    if detail:
        for i, span in enumerate(item.sentences, 1):
            _print_detail(item, i, span)


def _print_detail(item: PracticeItem, index: int, span: SentenceSpan) -> None:
    plan = item.cut_plan
    parts = plan.sub_segments(span)
    timed = resolve_sub_segments(span, parts, plan.sub_segment_tunes)
    hard_words = [
        resolve_hard_word(hw, span, plan.hard_word_tunes)
        for hw in plan.hard_words(span, item.words)
    ]
    if len(timed) < 2 and not hard_words:
        return
    console.print(f"\n[bold]{index}.[/bold] {display_text(plan.edited_text(span))}")
    for segment in timed:
        console.print(f"  part  {segment.id:<28} {format_span(segment)}  {segment.text}")
    for segment in hard_words:
        console.print(f"  word  {segment.id:<28} {format_span(segment)}  {segment.text}")


def edit(
    audio: AudioArg,
    index: IndexArg,
    text: Annotated[
        Optional[str],
        typer.Argument(help="New sentence text; may contain pause and hard-word markers."),
    ] = None,
    pause_at: Annotated[
        Optional[int],
        typer.Option("--pause-at", help="Insert a pause marker at this caret offset."),
    ] = None,
    hard_word_at: Annotated[
        Optional[int],
        typer.Option("--hard-word-at", help="Insert a hard-word marker at this caret offset."),
    ] = None,
    select: Annotated[
        int,
        typer.Option("--select", help="Length of the selection the marker replaces."),
    ] = 0,
    reset: Annotated[
        bool,
        typer.Option("--reset", help="Drop the edit and return to the transcript text."),
    ] = False,
) -> None:
    """Edit a sentence: pause markers split it into parts, hard-word markers pick words.

    Caret offsets count UTF-16 code units of the current text, as text
    widgets report them.
    """
    item = open_item(audio)
    span = pick_sentence(item, index)

    if reset:
        new_text = span.text
    elif text is not None:
        new_text = text
    elif pause_at is None and hard_word_at is None:
        fail("Nothing to change: give TEXT, --pause-at, --hard-word-at or --reset.")
    else:
        new_text = item.cut_plan.edited_text(span)

    for offset, marker in ((pause_at, PAUSE_MARKER), (hard_word_at, HARD_WORD_MARKER)):
        if offset is None:
            continue
        new_text, caret = insert_marker(new_text, offset, select, marker)
        at = cursor_time(new_text, caret, span, item.words)
        if at is not None:
            console.print(f"[dim]Marker at {at:.2f}s[/dim]")

    parts = item.cut_plan.apply_sentence_edit(span, new_text, item.words)
    item.save()

    hard_words = item.cut_plan.hard_words(span, item.words)
    console.print(f"[green]Saved:[/green] sentence {index}, {len(parts)} part(s)")
    for part in parts:
        console.print(f"  {part.id:<28} {part.base_start:7.2f} - {part.base_end:7.2f}  {part.text}")
    for hw in hard_words:
        console.print(f"  {hw.id:<28} {hw.base_start:7.2f} - {hw.base_end:7.2f}  {hw.word}")


def flag(audio: AudioArg, index: IndexArg) -> None:
    """Toggle the flag on a sentence."""
    item = open_item(audio)
    span = pick_sentence(item, index)
    flagged = item.cut_plan.toggle_flag(span.id)
    item.save()
    state = "[green]flagged[/green]" if flagged else "[dim]unflagged[/dim]"
    console.print(f"Sentence {index} {state}")


def tune(
    audio: AudioArg,
    segment_id: Annotated[
        str,
        typer.Argument(help="Part or hard-word id as listed by 'spk sentences --detail'."),
    ],
    start: Annotated[
        Optional[float],
        typer.Option("--start", help=f"Start offset in seconds (+/-{OFFSET_LIMIT})."),
    ] = None,
    end: Annotated[
        Optional[float],
        typer.Option("--end", help=f"End offset in seconds (+/-{OFFSET_LIMIT})."),
    ] = None,
    nudge_start: Annotated[
        float,
        typer.Option("--nudge-start", help="Add to the current start offset."),
    ] = 0.0,
    nudge_end: Annotated[
        float,
        typer.Option("--nudge-end", help="Add to the current end offset."),
    ] = 0.0,
    reset: Annotated[bool, typer.Option("--reset", help="Set both offsets to zero.")] = False,
    play: Annotated[bool, typer.Option("--play", help="Play the tuned segment once.")] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Play through a silent simulated engine."),
    ] = False,
) -> None:
    """Fine-tune the start and end of a part or hard word."""
    item = open_item(audio)
    plan = item.cut_plan

    try:
        key: SegmentKey = HardWordKey.parse(segment_id)
        is_word = True
    except ValueError:
        try:
            key = SegmentKey.parse(segment_id)
        except ValueError as e:
            fail(str(e))
        is_word = False

    try:
        span = item.sentence_by_id(key.sentence_id)
    except KeyError as e:
        fail(str(e.args[0]))

    if is_word:
        known = {hw.id for hw in plan.hard_words(span, item.words)}
        tunes = plan.hard_word_tunes
    else:
        known = set(plan.segment_keys(span))
        tunes = plan.sub_segment_tunes
    if str(key) not in known:
        fail(f"Unknown segment id {segment_id}. Known: {', '.join(sorted(known)) or 'none'}")

    current = tunes.get(key)
    if reset:
        requested = (0.0, 0.0)
    else:
        requested = (
            (current.start_offset if start is None else start) + nudge_start,
            (current.end_offset if end is None else end) + nudge_end,
        )
    tuned = tunes.set(key, *requested)
    item.save()

    if (tuned.start_offset, tuned.end_offset) != requested:
        console.print(f"[yellow]Offsets clamped to +/-{OFFSET_LIMIT}s[/yellow]")
    segment = _resolve(item, span, str(key), is_word)
    console.print(
        f"[green]Saved:[/green] {key}  start {tuned.start_offset:+.3f}s,"
        f" end {tuned.end_offset:+.3f}s  -> {format_span(segment)}"
    )

    if play:
        from spk.cli.practice import play_preview

        play_preview(item, segment, dry_run=dry_run)


def _resolve(
    item: PracticeItem, span: SentenceSpan, segment_id: str, is_word: bool
) -> TimedSegment:
    plan = item.cut_plan
    if is_word:
        for hw in plan.hard_words(span, item.words):
            if hw.id == segment_id:
                return resolve_hard_word(hw, span, plan.hard_word_tunes)
    parts = plan.sub_segments(span)
    for segment in resolve_sub_segments(span, parts, plan.sub_segment_tunes):
        if segment.id == segment_id:
            return segment
    whole = whole_sentence(span, plan.edited_text(span))
    return resolve_sub_segments(span, [whole], plan.sub_segment_tunes)[0]
