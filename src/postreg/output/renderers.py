"""Operation-specific Rich renderers for ServiceResult.

Each renderer draws on a console supplied by
:func:`postreg.output.console.render_text`.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from postreg.output.console import render_text

if TYPE_CHECKING:
    from rich.console import Console

    from postreg.services.result import ServiceResult

Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
    else:
        renderer = _render_error
    return render_text(lambda console: renderer(result, console, verbose=verbose))


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        lines = [f"ERROR: {result.op} — {msg}"]
        for err in _build_errors(result):
            lines.extend(f"{source}: {err.get('code')}" for source in _failure_sources(err))
        return "\n".join(lines)

    items = result.data.get("items") or result.data.get("posts")
    if items and isinstance(items, list):
        return "\n".join(_extract_key(item) for item in items if _extract_key(item))
    if "slug" in result.data:
        return str(result.data["slug"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_key(item: Any) -> str:
    if isinstance(item, dict):
        for key in ("slug", "name"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _build_errors(result: ServiceResult) -> list[dict[str, Any]]:
    if result.error is None:
        return []
    errors = result.error.detail.get("errors", [])
    return errors if isinstance(errors, list) else []


def _failure_sources(failure: dict[str, Any]) -> list[str]:
    """The file a failure belongs to; a slug collision names every claimant."""
    if failure.get("source_id"):
        return [str(failure["source_id"])]
    collisions = failure.get("detail", {}).get("collisions") or {}
    return [sid for ids in collisions.values() for sid in ids] or ["-"]


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="pr.ok")
    op = Text(f"  {result.op}", style="pr.op")
    console.print(label, op)


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="pr.key")
    if key in ("slug", "newer", "older"):
        v = Text(str(value), style="pr.slug")
    elif key == "source_id":
        v = Text(str(value), style="pr.source")
    elif key == "title":
        v = Text(str(value), style="pr.title")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the telemetry span tree (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _render_span(console, value, indent=4)
        else:
            console.print(f"    {key}: {value}")


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    prefix = " " * indent
    duration = span.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"
    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span.get('name', '?')}"
    counts = span.get("counts")
    if counts:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in counts.items()) + ")"
    console.print(line)
    for child in span.get("children", []):
        _render_span(console, child, indent + 4)


def _post_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table for a list of post summaries."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Date", style="pr.date", no_wrap=True)
    table.add_column("Slug", style="pr.slug", no_wrap=True)
    table.add_column("Title", style="pr.title")
    table.add_column("Categories")
    table.add_column("Tags", style="pr.tag")
    if verbose:
        table.add_column("Source", style="pr.source")

    for item in items:
        row = [
            str(item.get("date", ""))[:10],
            str(item.get("slug", "")),
            str(item.get("title", "")),
            ", ".join(item.get("categories", [])),
            ", ".join(item.get("tags", [])),
        ]
        if verbose:
            row.append(str(item.get("source_id", "")))
        table.add_row(*row)
    return table


def _count_table(items: list[dict[str, Any]], heading: str) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column(heading, style="pr.tag")
    table.add_column("Posts", style="pr.count", justify="right")
    for item in items:
        table.add_row(str(item.get("name", "")), str(item.get("posts", 0)))
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="pr.error")
    op = Text(f"  {result.op}", style="pr.op")
    console.print(label, op, Text(" — "), msg)

    failures = _build_errors(result)
    if failures:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Source", style="pr.source", overflow="fold")
        table.add_column("Code", style="pr.error", no_wrap=True)
        table.add_column("Reason", overflow="fold")
        for failure in failures:
            table.add_row(
                ", ".join(_failure_sources(failure)),
                str(failure.get("code", "")),
                str(failure.get("message", "")),
            )
        console.print(table)
    elif verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Op renderers ──────────────────────────────────────────────────────


def _render_build(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a successful build as a one-line summary (posts table when verbose)."""
    d = result.data
    _status_line(console, result)
    _field(console, "posts", d.get("count", 0))
    _field(console, "tags", len(d.get("tags", {})))
    _field(console, "categories", len(d.get("categories", {})))
    if verbose:
        console.print()
        console.print(_post_table(d.get("posts", []), verbose=True))
        _render_meta(console, result)


def _render_post_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    items = d.get("items", [])
    console.print(_post_table(items, verbose=verbose))
    filters = d.get("filters") or {}
    suffix = "".join(f" {k}={v}" for k, v in filters.items())
    console.print(f"\n{d.get('count', len(items))} of {d.get('total', len(items))} posts{suffix}")
    if verbose:
        _render_meta(console, result)


def _render_post(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a single post as a panel with metadata, then related posts."""
    d = result.data
    lines = [f"date: {d.get('date', '')}", f"source: {d.get('source_id', '')}"]
    if d.get("categories"):
        lines.append(f"categories: {', '.join(d['categories'])}")
    if d.get("tags"):
        lines.append(f"tags: {', '.join(d['tags'])}")
    if d.get("description"):
        lines.append(f"description: {d['description']}")
    content = "\n".join(lines)
    if verbose and d.get("body"):
        content += f"\n\n{d['body'].strip()}"

    title = f"{d.get('slug', '?')} — {d.get('title', 'Untitled')}"
    console.print(Panel(content, title=title, border_style="dim", expand=False))

    for key in ("newer", "older"):
        if d.get(key):
            _field(console, key, d[key])
    related = d.get("related", [])
    if related:
        console.print(Text("\n  related:", style="pr.key"))
        for item in related:
            console.print(f"    [pr.slug]{item.get('slug', '')}[/pr.slug]  {item.get('title', '')}")
    if verbose:
        _render_meta(console, result)


def _render_tags(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    is_category = result.op == "list_categories"
    heading, noun = ("Category", "categories") if is_category else ("Tag", "tags")
    items = result.data.get("items", [])
    console.print(_count_table(items, heading))
    console.print(f"\n{result.data.get('count', len(items))} {noun}")
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "build": _render_build,
    "list_posts": _render_post_list,
    "show": _render_post,
    "list_tags": _render_tags,
    "list_categories": _render_tags,
}
