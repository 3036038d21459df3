"""Error taxonomy for parsing, validating, and indexing posts.

Per-document errors (:class:`MalformedDocument`, :class:`ValidationError`)
exclude one post from the index. :class:`DuplicateSlug` is a cross-document
failure. :class:`AggregateBuildError` is what ``RegistryIndex.build`` raises
when any of the above occurred; it carries every individual failure.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any


class PostError(Exception):
    """Base class for every registry error.

    Attributes:
        code: Stable machine-readable error code.
        message: Human-readable reason.
        source_id: Identifier of the offending document, if any.
        detail: Extra structured context (line numbers, field names, ...).
    """

    code = "POST_ERROR"

    def __init__(
        self,
        message: str,
        *,
        source_id: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source_id = source_id
        self.detail = detail or {}

    def __str__(self) -> str:
        if self.source_id:
            return f"{self.source_id}: {self.message}"
        return self.message

    def with_source(self, source_id: str) -> PostError:
        """Attach *source_id* if the error does not carry one yet."""
        if self.source_id is None:
            self.source_id = source_id
        return self

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe payload used by the service layer."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "source_id": self.source_id,
        }
        if self.detail:
            payload["detail"] = self.detail
        return payload


class MalformedDocument(PostError):
    """The front-matter block is unterminated or cannot be decoded."""

    code = "MALFORMED_DOCUMENT"


class ValidationKind(StrEnum):
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_DATE = "INVALID_DATE"
    INVALID_FIELD = "INVALID_FIELD"


class ValidationError(PostError):
    """Decoded front matter failed a semantic check."""

    def __init__(
        self,
        kind: ValidationKind,
        message: str,
        *,
        source_id: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, source_id=source_id, detail=detail)
        self.kind = kind

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.kind.value


class DuplicateSlug(PostError):
    """Valid posts whose slugs collide.

    One error covers every collision found in a build: *collisions* maps
    each contested slug to the sources claiming it, in input order.
    """

    code = "DUPLICATE_SLUG"

    def __init__(self, collisions: Mapping[str, Sequence[str]]) -> None:
        self.collisions = {slug: list(ids) for slug, ids in collisions.items()}
        listed = "; ".join(f"{slug} ({', '.join(ids)})" for slug, ids in self.collisions.items())
        noun = "slug is" if len(self.collisions) == 1 else "slugs are"
        super().__init__(
            f"{len(self.collisions)} {noun} claimed by more than one post: {listed}",
            detail={"collisions": self.collisions},
        )

    @property
    def slugs(self) -> list[str]:
        return list(self.collisions)

    @property
    def source_ids(self) -> list[str]:
        """Every colliding source, grouped by slug."""
        return [sid for ids in self.collisions.values() for sid in ids]


class AggregateBuildError(PostError):
    """Every failure collected while building a registry index."""

    code = "BUILD_FAILED"

    def __init__(self, errors: list[PostError]) -> None:
        noun = "error" if len(errors) == 1 else "errors"
        super().__init__(f"Registry build failed with {len(errors)} {noun}")
        self.errors = list(errors)

    @property
    def document_errors(self) -> list[PostError]:
        return [e for e in self.errors if not isinstance(e, DuplicateSlug)]

    @property
    def duplicate(self) -> DuplicateSlug | None:
        """The single collision error, if any slug was claimed twice."""
        return next((e for e in self.errors if isinstance(e, DuplicateSlug)), None)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = [e.to_dict() for e in self.errors]
        return payload
