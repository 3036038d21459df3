"""Tests for the posts, show, tags, and categories CLI commands."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from postreg.cli import cli


@pytest.fixture
def blog(write_post: Callable[..., Path]) -> None:
    write_post(
        "ckad.md",
        title="CKAD Guide",
        date="2024-06-02 12:09:45 +0000",
        tags=["ckad", "kubernetes"],
        categories=["DevOps", "Kubernetes"],
    )
    write_post(
        "git.md",
        title="Git Guide",
        date="2026-02-08 21:00:00 +0530",
        tags=["git"],
        categories="DevOps",
    )


@pytest.mark.usefixtures("_isolated_site", "blog")
class TestPostsCommand:
    def test_lists_newest_first(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "posts"])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["2026-02-08-git-guide", "2024-06-02-ckad-guide"]

    def test_filter_by_tag(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "posts", "--tag", "kubernetes"])
        assert result.exit_code == 0
        items = json.loads(result.output)["data"]["items"]
        assert [i["title"] for i in items] == ["CKAD Guide"]

    def test_unknown_tag_empty(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "posts", "--tag", "rust"])
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["items"] == []

    def test_filter_by_category_with_limit(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "posts", "--category", "DevOps", "--limit", "1"])
        assert result.exit_code == 0
        assert result.output.strip() == "2026-02-08-git-guide"

    def test_table_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["posts"])
        assert result.exit_code == 0
        assert "Git Guide" in result.output
        assert "2 of 2 posts" in result.output

    def test_invalid_limit(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["posts", "--limit", "0"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("_isolated_site", "blog")
class TestShowCommand:
    def test_show(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "show", "2024-06-02-ckad-guide"])
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["title"] == "CKAD Guide"
        assert data["newer"] == "2026-02-08-git-guide"
        assert [r["slug"] for r in data["related"]] == ["2026-02-08-git-guide"]

    def test_show_no_related(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "show", "2024-06-02-ckad-guide", "--related", "0"])
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["related"] == []

    def test_show_unknown(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["show", "nope"])
        assert result.exit_code == 1
        assert "No post with slug 'nope'" in result.stderr


@pytest.mark.usefixtures("_isolated_site", "blog")
class TestTaxonomyCommands:
    def test_tags(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "tags"])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["ckad", "git", "kubernetes"]

    def test_categories_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "categories"])
        assert result.exit_code == 0
        items = json.loads(result.output)["data"]["items"]
        assert items == [{"name": "DevOps", "posts": 2}, {"name": "Kubernetes", "posts": 1}]
