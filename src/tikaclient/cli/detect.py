"""
Tika CLI - detect commands.

Detect the mime type or language of a file's contents.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from tikaclient.cli.context import open_client
from tikaclient.cli.errors import handle_error
from tikaclient.core.exceptions import TikaError, TikaIOError

console = Console()
app = typer.Typer(
    name="detect",
    help="Detect mime type or language of a file",
    no_args_is_help=True,
)

FileArgument = Annotated[
    Path,
    typer.Argument(help="File to analyse", exists=True, dir_okay=False, readable=True),
]


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise TikaIOError(f"Failed to read {path}: {e}", path=str(path)) from e


@app.command()
def mime(ctx: typer.Context, file: FileArgument) -> None:
    """Print the detected mime type of FILE."""
    try:
        content = _read(file)
        with open_client(ctx) as client:
            result = client.detect_mime(content)
    except TikaError as e:
        raise typer.Exit(handle_error(e, "detect mime"))
    console.print(result, markup=False, highlight=False)


@app.command()
def language(ctx: typer.Context, file: FileArgument) -> None:
    """Print the detected language of FILE."""
    try:
        content = _read(file)
        with open_client(ctx) as client:
            result = client.detect_language(content)
    except TikaError as e:
        raise typer.Exit(handle_error(e, "detect language"))
    console.print(result, markup=False, highlight=False)
