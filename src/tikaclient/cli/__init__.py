"""
Tika CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import typer
from rich.console import Console

from tikaclient import __version__
from tikaclient.cli import config, detect, server, translate
from tikaclient.cli.errors import setup_logging
from tikaclient.core.config.env import layered_environ

# Help panel names for command grouping
PANEL_ANALYSE = "Analyse Content"
PANEL_SERVER = "Manage the Server"

app = typer.Typer(
    name="tika-client",
    help="Client for the Apache Tika document-analysis server",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    endpoint: str | None = typer.Option(
        None,
        "--endpoint",
        "-e",
        help="Use an existing server instead of starting one (overrides TIKA_SERVER_ENDPOINT)",
    ),
    bind: str | None = typer.Option(
        None,
        "--bind",
        "-b",
        help="Address for the managed server, e.g. 127.0.0.1:9998",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show the managed server's output",
    ),
) -> None:
    """
    Tika client - talk to an Apache Tika server.

    Without --endpoint (or TIKA_SERVER_ENDPOINT) each command starts a local
    server for its duration, downloading the server archive on first use.

    Examples:
        tika-client config mime-types
        tika-client detect mime report.pdf
        tika-client translate "Guten Tag" --to en
        tika-client --endpoint http://localhost:9998 detect language notes.txt
    """
    setup_logging(debug)

    ctx.obj = {
        "debug": debug,
        "endpoint": endpoint,
        "bind": bind,
        "verbose": verbose,
        # OS env > project .env > user .env
        "environ": layered_environ(),
    }


app.command(name="config", rich_help_panel=PANEL_ANALYSE)(config.config)
app.command(name="translate", rich_help_panel=PANEL_ANALYSE)(translate.translate)
app.add_typer(detect.app, name="detect", rich_help_panel=PANEL_ANALYSE)
app.add_typer(server.app, name="server", rich_help_panel=PANEL_SERVER)


@app.command(rich_help_panel=PANEL_SERVER)
def version() -> None:
    """Show tika-client version and exit."""
    console.print(f"tika-client version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
