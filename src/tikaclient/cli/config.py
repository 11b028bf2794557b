"""
Tika CLI - config command.

Show the server's mime type catalog, detector tree or parser tree.
"""

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from tikaclient.cli.context import open_client
from tikaclient.cli.errors import handle_error
from tikaclient.core.exceptions import SerializationError, TikaError
from tikaclient.core.web.models import ConfigPath, Detector, MimeType, Parser

console = Console()


def _detector_tree(node: Detector, tree: Tree | None = None) -> Tree:
    label = f"[bold]{node.name}[/bold]" if node.composite else node.name
    branch = Tree(label) if tree is None else tree.add(label)
    for child in node.children:
        _detector_tree(child, branch)
    return branch


def _parser_tree(node: Parser, tree: Tree | None = None) -> Tree:
    label = f"[bold]{node.name}[/bold]" if node.composite else node.name
    if node.decorated:
        label += " [dim](decorated)[/dim]"
    if node.supported_types:
        label += f" [dim]{len(node.supported_types)} types[/dim]"
    branch = Tree(label) if tree is None else tree.add(label)
    for child in node.children:
        _parser_tree(child, branch)
    return branch


def _mime_table(mime_types: list[MimeType]) -> Table:
    table = Table(title=f"Mime Types ({len(mime_types)})")
    table.add_column("Identifier", style="cyan", no_wrap=True)
    table.add_column("Supertype", style="dim")
    table.add_column("Aliases")
    table.add_column("Parser", style="green")
    for mime in sorted(mime_types, key=lambda m: m.identifier):
        table.add_row(
            mime.identifier,
            mime.supertype or "",
            ", ".join(mime.alias),
            mime.parser or "",
        )
    return table


def config(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Argument(help="mime-types, detectors, parsers or parsers-details"),
    ] = ConfigPath.DETECTORS.cli_name,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Print the server's JSON answer unchanged"),
    ] = False,
) -> None:
    """
    Show the server configuration.

    Examples:
        tika-client config
        tika-client config mime-types
        tika-client config parsers-details --raw
    """
    try:
        path = ConfigPath.from_name(name)
        with open_client(ctx) as client:
            if raw:
                body = client.get_json(path.path).text
                try:
                    console.print_json(body)
                except json.JSONDecodeError as e:
                    raise SerializationError(
                        f"Server answered {path.path} with invalid JSON: {e}", body=body[:200]
                    ) from e
                return
            result = client.server_config(path)
    except TikaError as e:
        raise typer.Exit(handle_error(e, "config"))

    match result:
        case Detector():
            console.print(_detector_tree(result))
        case Parser():
            console.print(_parser_tree(result))
        case _:
            console.print(_mime_table(result))
