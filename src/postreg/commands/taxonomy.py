"""Commands: tag and category listings with post counts."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from postreg.commands._base import PostregCommand

if TYPE_CHECKING:
    from postreg.commands._context import AppContext


@click.command(cls=PostregCommand, examples="  postreg tags\n  postreg --json tags")
@click.pass_obj
def tags(app: AppContext) -> None:
    """List every tag with its post count."""
    app.emit(app.registry.list_tags())


@click.command(cls=PostregCommand, examples="  postreg categories\n  postreg -q categories")
@click.pass_obj
def categories(app: AppContext) -> None:
    """List every category with its post count."""
    app.emit(app.registry.list_categories())
