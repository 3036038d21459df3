"""Site settings: locating ``postreg.toml`` and merging every override.

A Jekyll checkout needs no config file. When one exists it is found the
way git finds ``.git``: in the working directory or the nearest parent.
``--config`` and ``POSTREG_CONFIG`` name a file explicitly instead.

Values resolve in this order, first match wins: CLI flags, ``POSTREG_*``
environment variables (``POSTREG_BUILD__WORKERS=4``), the TOML file,
then the defaults in :mod:`postreg.config.models`.
"""

from __future__ import annotations

import os
import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, TomlConfigSettingsSource

from postreg.config.models import BuildConfig, ContentConfig

CONFIG_FILENAME = "postreg.toml"
CONFIG_ENV_VAR = "POSTREG_CONFIG"

# The file feeding the TOML source while a PostregSettings is being built.
_config_file: ContextVar[Path | None] = ContextVar("postreg_config_file", default=None)


def locate_config(start: Path | None = None, explicit: str | Path | None = None) -> Path | None:
    """Find the config file for a site.

    *explicit* (from ``--config``) wins, then ``POSTREG_CONFIG``, then the
    first ``postreg.toml`` in *start* (default: CWD) or its parents.

    Raises:
        click.ClickException: An explicitly named file does not exist.
    """
    named = explicit or os.environ.get(CONFIG_ENV_VAR)
    if named:
        path = Path(named)
        if not path.is_file():
            msg = f"Config file not found: {path}"
            raise click.ClickException(msg)
        return path

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class PostregSettings(BaseSettings):
    """Everything a postreg run needs, frozen once resolved.

    Attributes:
        site_root: Site directory: ``--root``, else the directory holding
            the config file, else the CWD.
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "POSTREG_",
        "env_nested_delimiter": "__",
    }

    site_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    content: ContentConfig = Field(default_factory=ContentConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)

    @property
    def posts_root(self) -> Path:
        """Directory holding the post documents."""
        return self.site_root / self.content.posts_dir

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        config_file = _config_file.get()
        if config_file is None:
            return init_settings, env_settings
        return init_settings, env_settings, TomlConfigSettingsSource(settings_cls, toml_file=config_file)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        site_root: Path | None = None,
        **cli_flags: Any,
    ) -> PostregSettings:
        """Resolve settings for one CLI invocation.

        Raises:
            click.ClickException: The config file is missing or not valid TOML.
        """
        config_file = locate_config(site_root, config_path)
        if site_root is None:
            site_root = config_file.parent if config_file else Path.cwd()

        token = _config_file.set(config_file)
        try:
            return cls(site_root=site_root, config_path=config_file, **cli_flags)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {config_file}: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _config_file.reset(token)
