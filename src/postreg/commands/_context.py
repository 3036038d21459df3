"""Per-invocation state handed to every subcommand via ``@click.pass_obj``."""

from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING

import click

from postreg.config.logging import configure_logging
from postreg.output.formatters import OutputSettings, format_result
from postreg.services.registry import RegistryService
from postreg.services.telemetry import enable_tracing

if TYPE_CHECKING:
    from postreg.config.settings import PostregSettings
    from postreg.services.result import ServiceResult


class AppContext:
    """Resolved settings plus the registry service the commands query.

    Building the context sets up logging (and tracing under ``-v``) but
    reads no posts; the index is built on the first query.
    """

    def __init__(self, settings: PostregSettings) -> None:
        self.settings = settings
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_tracing()

    @cached_property
    def registry(self) -> RegistryService:
        return RegistryService(self.settings)

    @property
    def output(self) -> OutputSettings:
        s = self.settings
        return OutputSettings(json_output=s.json_output, quiet=s.quiet, verbose=s.verbose)

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; a failure goes to stderr and exits with status 1."""
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)
        click.echo(text)
        if not self.output.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
