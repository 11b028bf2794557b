"""
Tika CLI - translate command.
"""

from typing import Annotated

import typer
from rich.console import Console

from tikaclient.cli.context import open_client
from tikaclient.cli.errors import handle_error
from tikaclient.core.exceptions import TikaError
from tikaclient.core.web.translate import EN, Translator

console = Console()


def translate(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Text to translate")],
    to: Annotated[
        str,
        typer.Option("--to", "-t", help="Destination language code"),
    ] = EN,
    source: Annotated[
        str | None,
        typer.Option("--from", "-f", help="Source language code (auto-detected if omitted)"),
    ] = None,
    translator: Annotated[
        str | None,
        typer.Option(
            "--translator",
            help="lingo24, google, or a translator class name (defaults to TIKA_TRANSLATOR)",
        ),
    ] = None,
) -> None:
    """
    Translate text with the server's translation backend.

    Examples:
        tika-client translate "Guten Tag" --to en
        tika-client translate "Bonjour" --from fr --to de --translator google
    """
    try:
        backend = Translator.from_name(translator) if translator else None
        with open_client(ctx) as client:
            result = client.translate(text, to, src_lang=source, translator=backend)
    except TikaError as e:
        raise typer.Exit(handle_error(e, "translate"))

    console.print(result, markup=False, highlight=False)
