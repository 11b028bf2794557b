"""
Tika CLI - server commands.

Locate, download and run the managed server sidecar.
"""

import time
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)
from rich.table import Table

from tikaclient.cli.context import build_config, open_client
from tikaclient.cli.errors import ExitCode, handle_error
from tikaclient.core.exceptions import ServerError, TikaError
from tikaclient.core.server.models import RemoteDownload
from tikaclient.core.web.client import TikaClient

console = Console()
app = typer.Typer(
    name="server",
    help="Manage the local server sidecar",
    no_args_is_help=True,
)


@app.command()
def locate(ctx: typer.Context) -> None:
    """Show where the server artifact resolves to."""
    try:
        config = build_config(ctx)
    except TikaError as e:
        raise typer.Exit(handle_error(e, "server locate"))

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Version", config.version)
    table.add_row("Endpoint", config.endpoint)

    artifact = config.artifact
    if isinstance(artifact, RemoteDownload):
        table.add_row("Artifact", "[yellow]not found locally[/yellow]")
        table.add_row("Download", artifact.url)
        cached = config.storage_dir / artifact.filename
        if cached.is_file():
            table.add_row("Cached", str(cached))
    elif artifact is not None:
        found = "[green]present[/green]" if artifact.exists() else "[red]missing[/red]"
        table.add_row("Artifact", f"{artifact.path} ({artifact.kind}, {found})")
    console.print(table)


@app.command()
def download(ctx: typer.Context) -> None:
    """Download the server archive into TIKA_PATH."""
    try:
        with open_client(ctx, start=False) as client:
            with Progress(
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                console=console,
            ) as progress:
                task_id = progress.add_task(f"Downloading tika {client.config.version}", total=None)

                def on_progress(written: int, total: int | None) -> None:
                    progress.update(task_id, completed=written, total=total)

                artifact = client.download_server(on_progress=on_progress)
    except TikaError as e:
        raise typer.Exit(handle_error(e, "server download"))

    console.print(f"[green]✓[/green] Server archive at {artifact.path}")


def _wait(client: TikaClient, poll_interval: float) -> None:
    while client.is_server_live():
        time.sleep(poll_interval)
    raise ServerError("Server process exited")


@app.command()
def run(
    ctx: typer.Context,
    poll_interval: Annotated[
        float,
        typer.Option("--poll-interval", help="Seconds between liveness checks"),
    ] = 1.0,
) -> None:
    """
    Start the sidecar and keep it running until Ctrl-C.

    Examples:
        tika-client server run
        tika-client --bind 0.0.0.0:9998 server run
    """
    try:
        with open_client(ctx) as client:
            if client.config.is_remote_only:
                console.print(f"Using remote server at {client.endpoint}; nothing to run")
                return
            console.print(
                f"[green]✓[/green] Server ready at {client.endpoint} "
                f"(pid {client.supervisor.pid}); press Ctrl-C to stop"
            )
            _wait(client, poll_interval)
    except KeyboardInterrupt:
        console.print("\nStopped")
        raise typer.Exit(ExitCode.SIGINT)
    except TikaError as e:
        raise typer.Exit(handle_error(e, "server run"))
