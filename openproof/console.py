"""Rich consoles and print helpers.

Results go to stdout; warnings, errors and confirmations of side effects
go to stderr so scripted callers can consume stdout unchanged.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

# soft_wrap keeps long titles and URLs on one line; emoji/highlight stay off
# so remote text is printed exactly as received.
console = Console(soft_wrap=True, highlight=False, emoji=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False, emoji=False)


def print_result(message: str) -> None:
    """Print a plain result line to stdout."""
    console.print(message, markup=False)


def print_success(message: str) -> None:
    console.print(f"[green]{escape(message)}[/green]")


def print_notice(message: str) -> None:
    err_console.print(message, markup=False, style="dim")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def print_error(message: str, detail: str | None = None) -> None:
    """Print an error, and optionally the raw detail below it, to stderr."""
    err_console.print(f"[red bold]Error:[/red bold] {escape(message)}")
    if detail:
        err_console.print(detail, markup=False)
