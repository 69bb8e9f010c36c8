"""spk languages command: list practice languages."""

from __future__ import annotations

from rich.table import Table

from spk.core.languages import PRACTICE_LANGUAGES
from spk.utils.console import console


def languages() -> None:
    """List the language codes offered for practice items."""
    table = Table(title=f"Practice Languages ({len(PRACTICE_LANGUAGES)})")
    table.add_column("Code", style="bold cyan", width=6)
    table.add_column("Language", width=24)

    for code, label in PRACTICE_LANGUAGES.items():
        table.add_row(code, label)

    console.print(table)
    console.print(
        "\n[dim]Use 'auto' to detect the language from the audio. "
        "Other BCP 47 codes are accepted too.[/dim]"
    )
