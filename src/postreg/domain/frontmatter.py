"""Front-matter parsing and the typed front-matter model.

A post optionally starts with a YAML block fenced by ``---`` lines::

    ---
    title: CKAD Guide
    date: 2024-06-02 12:09:45 +0000
    tags: [ckad, kubernetes]
    ---
    Body text...

:func:`parse_frontmatter` splits a document into ``(mapping, body)``.
:class:`FrontMatter` is the validated, immutable form built later by
:mod:`postreg.domain.records`.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel
from ruamel.yaml import YAML
from ruamel.yaml.constructor import RoundTripConstructor
from ruamel.yaml.error import MarkedYAMLError, YAMLError
from ruamel.yaml.scalarbool import ScalarBoolean

from postreg.domain.errors import MalformedDocument

FRONTMATTER_DELIMITER = "---"

RECOGNIZED_KEYS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "author",
        "date",
        "categories",
        "tags",
        "image",
        "image.path",
        "toc",
    }
)


# ---------------------------------------------------------------------------
# YAML loader
# ---------------------------------------------------------------------------


class _PostConstructor(RoundTripConstructor):
    """Round-trip constructor that leaves timestamps as text.

    Post dates carry their own UTC offset; decoding them here would lose
    the offset as written, so :mod:`postreg.domain.dates` parses them.
    """


_PostConstructor.add_constructor(
    "tag:yaml.org,2002:timestamp",
    RoundTripConstructor.construct_yaml_str,
)


def _new_yaml() -> YAML:
    """Create a fresh YAML loader (ruamel's YAML object is stateful)."""
    y = YAML()
    y.Constructor = _PostConstructor
    return y


_SCALAR_KEY_TYPES = (str, int, float, bool)


def _to_plain(value: Any, source_id: str | None) -> Any:
    """Convert ruamel containers and scalar subclasses to builtin types.

    Raises:
        MalformedDocument: A key is not a scalar (``? [a, b]``) or a value
            has no plain-text meaning (``!!binary``, ``!!set``, custom tags).
    """
    if isinstance(value, Mapping):
        plain: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, _SCALAR_KEY_TYPES):
                raise MalformedDocument(
                    f"Front matter keys must be scalars, got {type(key).__name__}",
                    source_id=source_id,
                )
            plain[str(key)] = _to_plain(item, source_id)
        return plain
    if isinstance(value, list):
        return [_to_plain(v, source_id) for v in value]
    if isinstance(value, (bool, ScalarBoolean)):
        return bool(value)
    if value is None:
        return None
    if isinstance(value, str):
        return str(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    raise MalformedDocument(
        f"Unsupported front matter value of type {type(value).__name__}",
        source_id=source_id,
    )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _is_delimiter(line: str) -> bool:
    """A delimiter must occupy its own line; trailing whitespace is tolerated."""
    return line.rstrip() == FRONTMATTER_DELIMITER


def parse_frontmatter(
    content: str,
    *,
    source_id: str | None = None,
) -> tuple[dict[str, Any], str]:
    """Split markdown *content* into ``(frontmatter, body)``.

    Handles both ``\\n`` and ``\\r\\n`` line endings and ignores a leading
    byte-order mark.

    Returns:
        ``({}, content)`` when the document does not open with a
        delimiter line. Otherwise the decoded mapping and the body text.

    Raises:
        MalformedDocument: The opening delimiter has no closing
            delimiter, the block is not valid YAML, or the block does
            not decode to a mapping of scalar keys to plain values.
    """
    normalized = content.replace("\r\n", "\n").removeprefix("\ufeff")
    lines = normalized.split("\n")
    if not lines or not _is_delimiter(lines[0]):
        return {}, content

    end_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if _is_delimiter(line):
            end_idx = i
            break

    if end_idx is None:
        raise MalformedDocument(
            "Front matter opened with '---' but never closed",
            source_id=source_id,
        )

    yaml_block = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :])
    if body.startswith("\n"):
        body = body[1:]

    try:
        loaded = _new_yaml().load(yaml_block)
    except MarkedYAMLError as exc:
        detail: dict[str, Any] = {}
        mark = exc.problem_mark
        if mark is not None:
            # +2: one for 1-based numbering, one for the opening delimiter.
            detail["line"] = mark.line + 2
        reason = exc.problem or "invalid YAML"
        raise MalformedDocument(
            f"Cannot decode front matter: {reason}",
            source_id=source_id,
            detail=detail,
        ) from exc
    except YAMLError as exc:
        raise MalformedDocument(
            f"Cannot decode front matter: {exc}",
            source_id=source_id,
        ) from exc

    if loaded is None:
        return {}, body
    if not isinstance(loaded, Mapping):
        raise MalformedDocument(
            "Front matter must be a mapping of keys to values, "
            f"got {type(loaded).__name__}",
            source_id=source_id,
        )
    return _to_plain(loaded, source_id), body


# ---------------------------------------------------------------------------
# Typed front matter
# ---------------------------------------------------------------------------


class PostImage(BaseModel):
    """Preview image (``image: {path: ..., alt: ...}``)."""

    model_config = {"frozen": True, "extra": "allow"}

    path: str
    alt: str | None = None


class FrontMatter(BaseModel):
    """Validated front matter of one post.

    Recognized keys are typed fields. Any other key is kept as-is and
    exposed through :attr:`extra` so themes can read custom metadata.
    """

    model_config = {"frozen": True, "extra": "allow"}

    title: str
    date: datetime
    description: str | None = None
    author: str | None = None
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    image: PostImage | None = None
    toc: bool = False

    @property
    def extra(self) -> dict[str, Any]:
        """Unrecognized keys, passed through untouched."""
        return dict(self.model_extra or {})

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly dict; the date is rendered ISO-8601 with its offset."""
        data = self.model_dump(mode="json", exclude_none=True)
        data["date"] = self.date.isoformat()
        return data
