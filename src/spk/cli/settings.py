"""spk settings command: show and change an item's practice settings."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from spk.cli.utils import fail, open_item
from spk.core.languages import language_label, normalize_language, validate_language
from spk.utils.console import console


def settings(
    audio: Annotated[Path, typer.Argument(help="Audio file of the practice item.")],
    repeat_practice: Annotated[
        Optional[bool],
        typer.Option("--repeat-practice/--no-repeat-practice", help="Repeat sentence parts."),
    ] = None,
    repeats: Annotated[
        Optional[int], typer.Option("--repeats", help="Sentence repetitions (1-5).")
    ] = None,
    silence: Annotated[
        Optional[float],
        typer.Option("--silence", help="Sentence silence multiplier (0.2-15)."),
    ] = None,
    sentence_only: Annotated[
        Optional[bool],
        typer.Option("--sentence-only/--parts", help="Practise whole sentences, ignoring pauses."),
    ] = None,
    font_scale: Annotated[
        Optional[float], typer.Option("--font-scale", help="Display font scale (1.0-2.2).")
    ] = None,
    flagged_only: Annotated[
        Optional[bool],
        typer.Option("--flagged-only/--all-sentences", help="Practise flagged sentences only."),
    ] = None,
    word_shadowing: Annotated[
        Optional[bool],
        typer.Option("--word-shadowing/--no-word-shadowing", help="Shadow hard words."),
    ] = None,
    word_repeats: Annotated[
        Optional[int], typer.Option("--word-repeats", help="Hard-word repetitions (1-5).")
    ] = None,
    word_silence: Annotated[
        Optional[float],
        typer.Option("--word-silence", help="Hard-word silence multiplier (0.2-15)."),
    ] = None,
    word_loops: Annotated[
        Optional[int], typer.Option("--word-loops", help="Passes over the hard-word list.")
    ] = None,
    language: Annotated[
        Optional[str],
        typer.Option("--language", "-l", help="Item language code, or 'auto'."),
    ] = None,
) -> None:
    """Show the practice settings of an item, changing any that are given.

    Out-of-range values are clamped to the nearest allowed value.
    """
    item = open_item(audio, need_transcript=False)
    current = item.cut_plan.settings

    changes = {
        "repeat_practice_enabled": repeat_practice,
        "practice_repeats": repeats,
        "practice_silence_multiplier": silence,
        "sentences_pause_only": sentence_only,
        "playback_font_scale": font_scale,
        "flagged_only": flagged_only,
        "word_shadowing_enabled": word_shadowing,
        "word_practice_repeats": word_repeats,
        "word_practice_silence_multiplier": word_silence,
        "word_outer_loops": word_loops,
    }
    changes = {name: value for name, value in changes.items() if value is not None}
    for name, value in changes.items():
        setattr(current, name, value)

    if language is not None:
        try:
            item.cut_plan.language = normalize_language(validate_language(language))
        except ValueError as e:
            fail(str(e))

    if changes or language is not None:
        item.save()
        console.print(f"[green]Saved:[/green] {len(changes) + (language is not None)} change(s)")

    table = Table(title=f"Practice settings: {item.title}")
    table.add_column("Setting", style="bold cyan")
    table.add_column("Value")
    for name, value in current.model_dump().items():
        style = "green" if name in changes else ""
        table.add_row(name, f"[{style}]{value}[/{style}]" if style else str(value))
    table.add_row("language", language_label(item.cut_plan.language))
    console.print(table)
