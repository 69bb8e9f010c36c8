"""spk transcribe command: transcribe audio to word timings."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from spk.cli.utils import fail, open_item
from spk.core.item import PracticeItem
from spk.core.languages import validate_language
from spk.utils.console import console


def transcribe(
    inputs: Annotated[
        list[Path],
        typer.Argument(help="Audio files to transcribe. Accepts multiple inputs."),
    ],
    language: Annotated[
        Optional[str],
        typer.Option("--language", "-l", help="Spoken language code, or 'auto'."),
    ] = None,
    whisper_model: Annotated[
        Optional[str],
        typer.Option("--whisper-model", "-w", help="LiteLLM model string."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Transcribe again even if a transcript exists."),
    ] = False,
) -> None:
    """Transcribe audio files with word-level timestamps and store the transcripts."""
    if language is not None:
        try:
            language = validate_language(language)
        except ValueError as e:
            fail(str(e))

    overrides = {"whisper.api_model": whisper_model}

    if len(inputs) == 1:
        item = open_item(inputs[0], need_transcript=False, **overrides)
        _transcribe_single(item, force, language)
        return

    results: list[tuple[str, str, str]] = []
    console.print(f"[bold]Batch transcribing {len(inputs)} inputs...[/bold]\n")

    for i, audio in enumerate(inputs, 1):
        console.rule(f"[bold][{i}/{len(inputs)}] {audio}[/bold]")
        try:
            item = open_item(audio, need_transcript=False, **overrides)
            _transcribe_single(item, force, language)
            results.append((str(audio), "success", ""))
        except typer.Exit:
            results.append((str(audio), "failed", "see above"))
        except Exception as e:
            console.print(f"[red]Failed:[/red] {e}")
            results.append((str(audio), "failed", str(e)))

    table = Table(title="Batch Results")
    table.add_column("Input", style="cyan", no_wrap=True, max_width=60)
    table.add_column("Status")
    table.add_column("Error", style="red")
    for name, status, error in results:
        style = "green" if status == "success" else "red"
        table.add_row(name, f"[{style}]{status}[/{style}]", error)
    console.print()
    console.print(table)


def _transcribe_single(item: PracticeItem, force: bool, language: str | None) -> None:
    from spk.transcriber.api import transcribe as api_transcribe

    if item.has_transcript and not force:
        name = item.audio_path.name
        console.print(f"[dim]Transcript exists for {name}; use --force to redo.[/dim]")
        return

    whisper = item.config.whisper
    # An explicit flag wins, then the item's chosen language, then the config default.
    language = language or item.cut_plan.language or whisper.language
    try:
        transcription = api_transcribe(item.audio_path, whisper, language=language)
    except (ImportError, ValueError, FileNotFoundError) as e:
        fail(str(e))

    item.set_transcription(transcription)
    console.print(
        f"[green]Saved:[/green] {len(item.words)} words, "
        f"{len(item.sentences)} sentences ({transcription.language or 'language unknown'})"
    )
