"""Console output formatting for the chart-reports CLI.

User-facing feedback (success, error, info, warning) goes through these helpers
so every command prints the same emoji and colours. Structured logging stays in
``logging`` and is for troubleshooting only.

``show_notification`` is the ``Notifier`` sink used by CLI commands: view
notifications are printed as they are raised, with loading messages shown as
progress lines.
"""

from __future__ import annotations

import typer

from ..core.enums import NotificationLevel
from ..core.notifications import Notification

# level -> (emoji prefix, colour, write to stderr)
STYLES: dict[NotificationLevel, tuple[str, str, bool]] = {
    NotificationLevel.LOADING: ("⏳ ", typer.colors.BLUE, False),
    NotificationLevel.SUCCESS: ("✅ ", typer.colors.GREEN, False),
    NotificationLevel.INFO: ("ℹ️  ", typer.colors.CYAN, False),
    NotificationLevel.WARNING: ("⚠️  ", typer.colors.YELLOW, False),
    NotificationLevel.ERROR: ("❌ ", typer.colors.RED, True),
}


def emit(level: NotificationLevel, message: str, *, prefix: bool = True) -> None:
    emoji, colour, err = STYLES[level]
    typer.secho(f"{emoji}{message}" if prefix else message, fg=colour, err=err)


def success(message: str, *, prefix: bool = True) -> None:
    """Display a success message in green with checkmark emoji.

    Example:
        success("PDF written to exports/chart-42.pdf")
        # Output: ✅ PDF written to exports/chart-42.pdf
    """
    emit(NotificationLevel.SUCCESS, message, prefix=prefix)


def error(message: str, *, prefix: bool = True) -> None:
    """Display an error message in red with cross emoji, on stderr."""
    emit(NotificationLevel.ERROR, message, prefix=prefix)


def info(message: str, *, prefix: bool = True) -> None:
    emit(NotificationLevel.INFO, message, prefix=prefix)


def warning(message: str, *, prefix: bool = True) -> None:
    emit(NotificationLevel.WARNING, message, prefix=prefix)


def plain(message: str) -> None:
    typer.echo(message)


def data(message: str, *, prefix: bool = True) -> None:
    """Display a chart/data line in cyan with chart emoji.

    Example:
        data("Quarterly revenue (3 charts)")
        # Output: 📊 Quarterly revenue (3 charts)
    """
    formatted = f"📊 {message}" if prefix else message
    typer.secho(formatted, fg=typer.colors.CYAN)


def show_notification(note: Notification) -> None:
    """Notifier sink printing each notification as it is raised."""
    emit(note.level, note.message)
