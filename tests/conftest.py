"""Shared pytest fixtures for postreg tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from postreg.config.settings import PostregSettings
from postreg.domain.records import PostSource

PostFactory = Callable[..., str]


def _yaml_value(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(str(v) for v in value) + "]"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def post_text() -> PostFactory:
    """Render a post document from keyword front-matter fields.

    ``post_text(title="A", date="2024-01-01 10:00:00 +0000", body="Hi")``
    """

    def _render(body: str = "Body text.\n", **fields: object) -> str:
        lines = ["---"]
        lines.extend(f"{key}: {_yaml_value(value)}" for key, value in fields.items())
        lines.append("---")
        return "\n".join(lines) + "\n" + body

    return _render


@pytest.fixture
def source(post_text: PostFactory) -> Callable[..., PostSource]:
    """Build a PostSource; ``source_id`` defaults to a path derived from the title."""

    def _make(source_id: str | None = None, body: str = "Body text.\n", **fields: object) -> PostSource:
        sid = source_id or f"{str(fields.get('title', 'untitled')).lower().replace(' ', '-')}.md"
        return PostSource(source_id=sid, raw_text=post_text(body=body, **fields))

    return _make


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Temporary Jekyll-style site with an empty ``_posts`` directory."""
    (tmp_path / "_posts").mkdir()
    return tmp_path


@pytest.fixture
def write_post(site_root: Path, post_text: PostFactory) -> Callable[..., Path]:
    """Write a post under ``_posts/``; pass ``raw=`` to write text verbatim."""

    def _write(name: str, *, raw: str | None = None, **fields: object) -> Path:
        path = site_root / "_posts" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(raw if raw is not None else post_text(**fields), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings(site_root: Path, monkeypatch: pytest.MonkeyPatch) -> PostregSettings:
    """Settings rooted at the temporary site, isolated from the environment."""
    monkeypatch.delenv("POSTREG_CONFIG", raising=False)
    return PostregSettings.from_cli(site_root=site_root)


@pytest.fixture
def _isolated_site(site_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp site so the CLI indexes it.

    Use via ``@pytest.mark.usefixtures("_isolated_site")`` on command tests.
    """
    monkeypatch.delenv("POSTREG_CONFIG", raising=False)
    monkeypatch.chdir(site_root)
