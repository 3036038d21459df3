"""Command: build the post index and report every failure."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from postreg.commands._base import PostregCommand

if TYPE_CHECKING:
    from postreg.commands._context import AppContext


@click.command(
    cls=PostregCommand,
    examples="""\
  postreg build
  postreg -v build
  postreg --json build
  postreg --root ~/blog build""",
)
@click.pass_obj
def build(app: AppContext) -> None:
    """Parse and validate every post; exit 1 if any post fails."""
    app.emit(app.registry.build())
