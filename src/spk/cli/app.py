"""speakloop CLI entry point."""

from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from spk import __version__
from spk.cli.languages import languages
from spk.cli.practice import estimate, practice, stats
from spk.cli.sentences import edit, flag, sentences, tune
from spk.cli.settings import settings
from spk.cli.transcribe import transcribe

app = typer.Typer(
    name="spk",
    help="speakloop: sentence and word shadowing practice for language learners.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"spk {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """speakloop: sentence and word shadowing practice for language learners."""
    # Load .env file for API keys (GROQ_API_KEY, OPENAI_API_KEY, etc.)
    # Does not override existing env vars; shell exports take precedence
    load_dotenv(override=False)


app.command("transcribe")(transcribe)
app.command("sentences")(sentences)
app.command("edit")(edit)
app.command("flag")(flag)
app.command("tune")(tune)
app.command("settings")(settings)
app.command("estimate")(estimate)
app.command("practice")(practice)
app.command("stats")(stats)
app.command("languages")(languages)
