"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``postreg.toml`` only contains
overrides. A Jekyll site needs no config file at all.
"""

from __future__ import annotations

from datetime import tzinfo

from pydantic import BaseModel, Field, field_validator

from postreg.domain.dates import parse_offset
from postreg.infrastructure.filesystem import DEFAULT_EXTENSIONS, DEFAULT_SKIP_DIRS


class ContentConfig(BaseModel):
    """[content] section."""

    model_config = {"frozen": True}

    posts_dir: str = "_posts"
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    skip_dirs: list[str] = Field(default_factory=lambda: sorted(DEFAULT_SKIP_DIRS))


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True}

    workers: int = Field(default=1, ge=1)
    default_timezone: str = "+0000"

    @field_validator("default_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        parse_offset(value)
        return value

    @property
    def tz(self) -> tzinfo:
        """The default timezone as a fixed-offset tzinfo."""
        return parse_offset(self.default_timezone)
