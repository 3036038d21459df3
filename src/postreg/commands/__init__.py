"""Subcommand modules for postreg.

Provides register_commands() which uses deferred imports to keep
``postreg --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every standalone command on the root CLI group."""
    from postreg.commands.build import build
    from postreg.commands.posts import posts, show
    from postreg.commands.taxonomy import categories, tags

    cli.add_command(build)
    cli.add_command(posts)
    cli.add_command(show)
    cli.add_command(tags)
    cli.add_command(categories)
