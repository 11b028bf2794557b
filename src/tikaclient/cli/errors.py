"""
Standardized error handling and exit codes for the tikaclient CLI.

Every command funnels ``TikaError`` through ``handle_error`` so failures are
reported the same way: a panel with the message and its context, and an exit
code that separates user-fixable configuration problems from runtime failures.
"""

import logging
import sys
import traceback
from enum import IntEnum

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from tikaclient.core.exceptions import ErrorKind, TikaError

console = Console(stderr=True)

_USER_ERROR_KINDS = {
    ErrorKind.CONFIGURATION,
    ErrorKind.URL_PARSE,
    ErrorKind.ADDRESS_PARSE,
    ErrorKind.INVALID_TYPE_NAME,
}

# Global debug flag
_debug_mode = False


class ExitCode(IntEnum):
    """Standard exit codes for tikaclient CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Network, IO or server failure."""

    USER_ERROR = 2
    """User configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for CLI commands.

    Args:
        debug: If True, enable DEBUG level logging and full tracebacks
    """
    global _debug_mode
    _debug_mode = debug

    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def exit_code_for(error: TikaError) -> ExitCode:
    """Map an error to the exit code the CLI reports for it."""
    if error.kind in _USER_ERROR_KINDS:
        return ExitCode.USER_ERROR
    return ExitCode.GENERAL_ERROR


def handle_error(error: TikaError, command_name: str) -> ExitCode:
    """
    Display an error with its context and return the matching exit code.

    Args:
        error: The exception that was raised
        command_name: Name of the command that failed
    """
    error_text = Text()
    error_text.append("Error: ", style="bold red")
    error_text.append(str(error))

    if error.context:
        error_text.append("\n\nContext:\n", style="dim")
        for key, value in error.context.items():
            error_text.append(f"  {key}: ", style="cyan")
            error_text.append(f"{value}\n", style="white")

    console.print()
    console.print(
        Panel(
            error_text,
            title=f"[bold red]{command_name} failed ({error.kind.value})[/bold red]",
            border_style="red",
            expand=False,
        )
    )

    if _debug_mode:
        console.print("\n[dim]Full traceback:[/dim]")
        console.print(traceback.format_exc())
    else:
        console.print("[dim]Run with --debug for full traceback[/dim]")

    return exit_code_for(error)
