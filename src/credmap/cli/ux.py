"""
CLI output helpers built on rich.

Environment handling:
- Respects NO_COLOR and FORCE_COLOR environment variables
- Falls back to plain text when output is not a terminal

Exports may be written to stdout, so human-facing summaries go to
err_console (stderr).
"""

from __future__ import annotations

import os

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

# Nord color palette (https://www.nordtheme.com/)
CREDMAP_THEME = Theme(
    {
        "info": "#88C0D0",  # Nord frost - light blue
        "success": "#A3BE8C",  # Nord aurora - green
        "warning": "#EBCB8B",  # Nord aurora - yellow
        "error": "#BF616A bold",  # Nord aurora - red
        "highlight": "#B48EAD",  # Nord aurora - purple
        "muted": "#D8DEE9",  # Nord snow storm - light grey
    }
)


def _make_console(stderr: bool = False) -> Console:
    return Console(
        theme=CREDMAP_THEME,
        stderr=stderr,
        force_terminal=os.environ.get("FORCE_COLOR") is not None,
        no_color=os.environ.get("NO_COLOR") is not None,
    )


console = _make_console()
err_console = _make_console(stderr=True)


def success(message: str) -> None:
    """Print a success message."""
    err_console.print(f"[success]✓ {message}[/success]")


def warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]⚠ {message}[/warning]")


def header(title: str, target: Console | None = None) -> None:
    """Print a section header."""
    target = target or console
    target.print()
    target.print(Panel(f"[bold]{title}[/bold]", border_style="cyan"))


def print_table(
    title: str,
    columns: list[str],
    rows: list[list[str]],
    target: Console | None = None,
) -> None:
    """Print a formatted table."""
    table = Table(title=title, show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*row)
    (target or console).print(table)
