"""Rich Console factory and theme for lendctl output.

Consoles render into a StringIO buffer so renderers keep a plain
``-> str`` contract. Outside a terminal (tests, pipes) Rich drops the
color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

LEND_THEME = Theme(
    {
        "lend.ok": "bold green",
        "lend.error": "bold red",
        "lend.warning": "bold yellow",
        "lend.op": "bold cyan",
        "lend.key": "dim",
        "lend.id": "bold blue",
        "lend.title": "bold",
        "lend.status.pending": "yellow",
        "lend.status.notified": "bold magenta",
        "lend.status.closed": "dim",
        "lend.status.available": "green",
        "lend.status.borrowed": "red",
        "lend.overdue": "bold red",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "PENDING": "lend.status.pending",
    "NOTIFIED": "lend.status.notified",
    "FULFILLED": "lend.status.closed",
    "EXPIRED": "lend.status.closed",
    "CANCELLED": "lend.status.closed",
    "AVAILABLE": "lend.status.available",
    "BORROWED": "lend.status.borrowed",
    "RESERVED": "lend.status.pending",
    "MAINTENANCE": "lend.status.closed",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=LEND_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Rich style name for a copy or reservation status."""
    return _STATUS_STYLES.get(status, "")
