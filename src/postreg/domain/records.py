"""Post records — validation and normalization of parsed front matter.

:func:`build_record` turns a decoded front-matter mapping into an
immutable :class:`PostRecord`, or raises :class:`ValidationError`.
:func:`load_record` runs the whole parse-then-build path for one source.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, tzinfo
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from postreg.domain.dates import parse_post_date
from postreg.domain.errors import ValidationError, ValidationKind
from postreg.domain.frontmatter import RECOGNIZED_KEYS, FrontMatter, parse_frontmatter
from postreg.domain.slugs import make_slug

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = ("title", "date")


class PostSource(BaseModel):
    """Raw document text plus an identifier (usually a relative path)."""

    model_config = {"frozen": True}

    source_id: str
    raw_text: str


class PostRecord(BaseModel):
    """Canonical, immutable post: front matter, body, slug, and origin."""

    model_config = {"frozen": True}

    front_matter: FrontMatter
    body: str
    slug: str
    source_id: str

    @property
    def title(self) -> str:
        return self.front_matter.title

    @property
    def date(self) -> datetime:
        return self.front_matter.date

    @property
    def tags(self) -> tuple[str, ...]:
        return self.front_matter.tags

    @property
    def categories(self) -> tuple[str, ...]:
        return self.front_matter.categories

    def summary(self) -> dict[str, Any]:
        """Compact listing payload (no body)."""
        item: dict[str, Any] = {
            "slug": self.slug,
            "title": self.title,
            "date": self.date.isoformat(),
            "categories": list(self.categories),
            "tags": list(self.tags),
            "source_id": self.source_id,
        }
        if self.front_matter.description:
            item["description"] = self.front_matter.description
        return item


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _as_terms(value: Any, key: str, source_id: str) -> tuple[str, ...]:
    """Normalize a ``categories``/``tags`` value to a de-duplicated tuple.

    A bare scalar counts as a one-element list. Blank entries are dropped;
    first-occurrence order is kept.
    """
    if value is None:
        return ()
    items = value if isinstance(value, list) else [value]

    terms: list[str] = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, (dict, list)):
            raise ValidationError(
                ValidationKind.INVALID_FIELD,
                f"{key!r} entries must be plain strings, got {type(item).__name__}",
                source_id=source_id,
                detail={"field": key},
            )
        term = str(item).strip()
        if term and term not in terms:
            terms.append(term)
    return tuple(terms)


def _fold_image(fm: dict[str, Any]) -> None:
    """Merge ``image`` given as a bare path or a flat ``image.path`` key."""
    flat_path = fm.pop("image.path", None)
    image = fm.get("image")
    if isinstance(image, str):
        image = {"path": image}
    if flat_path is not None:
        if image is None:
            image = {"path": flat_path}
        elif isinstance(image, dict) and "path" not in image:
            image = {**image, "path": flat_path}
    if image is not None:
        fm["image"] = image


def _describe_pydantic_error(exc: PydanticValidationError) -> tuple[str, list[str]]:
    fields: list[str] = []
    reasons: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        fields.append(loc)
        reasons.append(f"{loc}: {err['msg']}")
    return "; ".join(reasons), fields


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_record(
    front_matter: dict[str, Any],
    body: str,
    source_id: str,
    *,
    default_tz: tzinfo = UTC,
) -> PostRecord:
    """Validate *front_matter* and build a :class:`PostRecord`.

    Raises:
        ValidationError: ``MISSING_FIELD`` when ``title`` or ``date`` is
            absent, ``INVALID_DATE`` when the date cannot be parsed, and
            ``INVALID_FIELD`` when a recognized key has the wrong shape.
    """
    fm = dict(front_matter)
    unknown = sorted(set(fm) - RECOGNIZED_KEYS)
    if unknown:
        logger.debug("%s: passing through keys %s", source_id, ", ".join(unknown))

    missing = [key for key in REQUIRED_FIELDS if _is_blank(fm.get(key))]
    if missing:
        raise ValidationError(
            ValidationKind.MISSING_FIELD,
            f"Missing required field(s): {', '.join(missing)}",
            source_id=source_id,
            detail={"fields": missing},
        )

    title = fm["title"]
    if isinstance(title, (dict, list)) or isinstance(title, bool):
        raise ValidationError(
            ValidationKind.INVALID_FIELD,
            f"'title' must be text, got {type(title).__name__}",
            source_id=source_id,
            detail={"field": "title"},
        )
    fm["title"] = str(title)

    try:
        fm["date"] = parse_post_date(fm["date"], default_tz=default_tz)
    except ValueError as exc:
        raise ValidationError(
            ValidationKind.INVALID_DATE,
            str(exc),
            source_id=source_id,
            detail={"field": "date", "value": str(fm["date"])},
        ) from exc

    fm["categories"] = _as_terms(fm.get("categories"), "categories", source_id)
    fm["tags"] = _as_terms(fm.get("tags"), "tags", source_id)
    _fold_image(fm)

    try:
        parsed = FrontMatter.model_validate(fm)
    except PydanticValidationError as exc:
        reason, fields = _describe_pydantic_error(exc)
        raise ValidationError(
            ValidationKind.INVALID_FIELD,
            f"Invalid front matter: {reason}",
            source_id=source_id,
            detail={"fields": fields},
        ) from exc

    return PostRecord(
        front_matter=parsed,
        body=body,
        slug=make_slug(parsed.date, parsed.title),
        source_id=source_id,
    )


def load_record(source: PostSource, *, default_tz: tzinfo = UTC) -> PostRecord:
    """Parse and validate one source document.

    Raises:
        MalformedDocument: The front-matter block is structurally broken.
        ValidationError: The decoded metadata fails a semantic check.
    """
    fm, body = parse_frontmatter(source.raw_text, source_id=source.source_id)
    return build_record(fm, body, source.source_id, default_tz=default_tz)
