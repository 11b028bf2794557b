"""
Client construction shared by the CLI commands.

Global options (``--endpoint``, ``--bind``, ``--verbose``) and the layered
environment are stored on the Typer context by the main callback;
``open_client`` turns them into a ``TikaClient``, starting a managed sidecar
for the duration of the command when no remote endpoint is configured.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator, Mapping
from typing import Any

import typer
from rich.console import Console

from tikaclient.core.config.loader import load_config
from tikaclient.core.config.models import ServiceConfig
from tikaclient.core.server.models import ManagedLocal, RemoteOnly, Verbosity
from tikaclient.core.web.client import TikaClient

console = Console(stderr=True)


def config_overrides(ctx: typer.Context) -> dict[str, Any]:
    """ServiceConfig overrides derived from the global CLI options."""
    opts = ctx.obj or {}
    overrides: dict[str, Any] = {}
    if opts.get("endpoint"):
        overrides["mode"] = RemoteOnly(endpoint_url=opts["endpoint"])
    elif opts.get("bind"):
        overrides["mode"] = ManagedLocal(bind_address=opts["bind"])
    if opts.get("verbose"):
        overrides["verbosity"] = Verbosity.VERBOSE
    return overrides


def config_environ(ctx: typer.Context) -> Mapping[str, str] | None:
    """Environment captured by the main callback (None falls back to os.environ)."""
    return (ctx.obj or {}).get("environ")


def build_config(ctx: typer.Context) -> ServiceConfig:
    return load_config(config_environ(ctx), **config_overrides(ctx))


@contextlib.contextmanager
def open_client(ctx: typer.Context, *, start: bool = True) -> Iterator[TikaClient]:
    """
    Yield a client for the duration of a command.

    A managed sidecar is started when ``start`` is set and stopped on exit.
    """
    client = TikaClient.from_env(config_environ(ctx), **config_overrides(ctx))
    try:
        if start and not client.config.is_remote_only:
            with console.status(f"Starting tika server on {client.endpoint}..."):
                client.start_server()
        yield client
    finally:
        client.close()
