"""Root CLI group for postreg with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from postreg import __version__
from postreg.commands import register_commands
from postreg.commands._context import AppContext
from postreg.config.settings import PostregSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="postreg")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (slugs or names only).")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-r",
    "--root",
    "site_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Site root directory (default: config file location or CWD).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    site_root: Path | None,
) -> None:
    """postreg — index Markdown blog posts by date, tag, and category."""
    settings = PostregSettings.from_cli(
        config_path=config_path,
        site_root=site_root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
