"""Off-screen Rich console for post listings.

Renderers draw into a StringIO-backed console and hand back plain text,
so commands decide whether it goes to stdout or stderr. Outside a
terminal (pipes, CliRunner) Rich emits no escape codes.
"""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO

from rich.console import Console
from rich.theme import Theme

# One style per post field, shared by tables, panels and field lines.
POST_THEME = Theme(
    {
        "pr.ok": "bold green",
        "pr.error": "bold red",
        "pr.op": "bold cyan",
        "pr.key": "dim",
        "pr.date": "cyan",
        "pr.slug": "bold blue",
        "pr.title": "bold",
        "pr.tag": "magenta",
        "pr.count": "green",
        "pr.source": "dim",
    }
)

# Wide enough that a date, slug, title and source share one table row.
RENDER_WIDTH = 120


def render_text(draw: Callable[[Console], None], *, width: int = RENDER_WIDTH) -> str:
    """Run *draw* against a fresh console and return what it printed."""
    buffer = StringIO()
    draw(Console(file=buffer, theme=POST_THEME, highlight=False, width=width))
    return buffer.getvalue().rstrip("\n")
