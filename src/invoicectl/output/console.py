"""Rich console and theme used by the renderers.

Renderers draw onto a console backed by a StringIO buffer and hand back
the text, so ``format_result`` stays a plain ``-> str`` function. Rich
drops colour by itself when the buffer is not a terminal, which covers
pipes and CliRunner.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

INVOICE_THEME = Theme(
    {
        "inv.ok": "bold green",
        "inv.error": "bold red",
        "inv.warning": "bold yellow",
        "inv.op": "bold cyan",
        "inv.key": "dim",
        "inv.id": "bold blue",
        "inv.identity": "magenta",
        "inv.amount": "bold",
        "inv.status.pending": "yellow",
        "inv.status.certified": "green",
    }
)

DEFAULT_WIDTH = 120


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """A themed console writing into a fresh StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=INVOICE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or DEFAULT_WIDTH,
    )


def get_output(console: Console) -> str:
    """Everything printed to a console made by :func:`create_console`."""
    buffer = console.file
    if not isinstance(buffer, StringIO):
        msg = "console was not created by create_console()"
        raise TypeError(msg)
    return buffer.getvalue()


def style_for_status(status: str) -> str:
    """Theme style for an invoice status; unknown statuses are unstyled."""
    style = f"inv.status.{status}"
    return style if style in INVOICE_THEME.styles else ""
