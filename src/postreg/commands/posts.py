"""Commands: list posts and show a single post."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from postreg.commands._base import PostregCommand

if TYPE_CHECKING:
    from postreg.commands._context import AppContext


@click.command(
    cls=PostregCommand,
    examples="""\
  postreg posts
  postreg posts --tag kubernetes
  postreg posts --category DevOps --limit 5
  postreg -q posts --tag git""",
)
@click.option("--tag", default=None, help="Only posts with this tag.")
@click.option("--category", default=None, help="Only posts in this category.")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Maximum posts to list.")
@click.pass_obj
def posts(app: AppContext, tag: str | None, category: str | None, limit: int | None) -> None:
    """List posts, newest first."""
    app.emit(app.registry.list_posts(tag=tag, category=category, limit=limit))


@click.command(
    cls=PostregCommand,
    examples="""\
  postreg show 2024-06-02-ckad-guide
  postreg -v show 2024-06-02-ckad-guide
  postreg show 2024-06-02-ckad-guide --related 3""",
)
@click.argument("slug")
@click.option(
    "--related",
    "related_limit",
    type=click.IntRange(min=0),
    default=5,
    show_default=True,
    help="How many related posts to list.",
)
@click.pass_obj
def show(app: AppContext, slug: str, related_limit: int) -> None:
    """Show one post with its metadata, neighbors, and related posts."""
    app.emit(app.registry.show(slug, related_limit=related_limit))
