"""RegistryService — build the post index and answer queries over it.

The index is built once per service instance and reused by every query.
Build failures never raise out of this layer: they come back as a
``ServiceResult`` whose ``error.detail["errors"]`` lists each failing
document with its reason.
"""

from __future__ import annotations

import logging
from typing import Any

from postreg.domain.errors import AggregateBuildError, PostError
from postreg.domain.registry import RegistryIndex
from postreg.infrastructure.filesystem import load_sources
from postreg.services.base import BaseService
from postreg.services.result import ServiceError, ServiceResult
from postreg.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


def _count_listing(op: str, counts: dict[str, int]) -> ServiceResult:
    items = [{"name": name, "posts": n} for name, n in counts.items()]
    return ServiceResult.success(op, count=len(items), items=items)


class RegistryService(BaseService):
    """Builds the :class:`RegistryIndex` for the configured site."""

    _index: RegistryIndex | None = None

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    def index(self) -> RegistryIndex:
        """Return the built index, building it on first use.

        Raises:
            FileNotFoundError: The posts directory does not exist.
            AggregateBuildError: One or more posts failed to index.
        """
        if self._index is None:
            content = self._settings.content
            build = self._settings.build
            with trace_span("load_sources") as span:
                sources = load_sources(
                    self._settings.posts_root,
                    extensions=content.extensions,
                    skip_dirs=content.skip_dirs,
                )
                if span:
                    unreadable = sum(isinstance(s, PostError) for s in sources)
                    span.count("documents", len(sources) - unreadable)
                    span.count("unreadable", unreadable)
            with trace_span("build_index") as span:
                try:
                    self._index = RegistryIndex.build(
                        sources,
                        workers=build.workers,
                        default_tz=build.tz,
                    )
                except AggregateBuildError as exc:
                    if span:
                        span.count("failures", len(exc.errors))
                    raise
                if span:
                    span.count("posts", len(self._index))
        return self._index

    def _failure(self, op: str, exc: AggregateBuildError | FileNotFoundError) -> ServiceResult:
        if isinstance(exc, AggregateBuildError):
            return ServiceResult.failure(op, ServiceError.from_post_error(exc))
        error = ServiceError(
            code="CONTENT_ROOT_MISSING",
            message=str(exc),
            detail={"path": str(self._settings.posts_root)},
        )
        return ServiceResult.failure(op, error)

    def _with_index(self, op: str) -> RegistryIndex | ServiceResult:
        try:
            return self.index()
        except (AggregateBuildError, FileNotFoundError) as exc:
            logger.debug("%s failed to build the index", op, exc_info=True)
            return self._failure(op, exc)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @traced
    def build(self) -> ServiceResult:
        """Build the index and report its size, tags, and categories."""
        index = self._with_index("build")
        if isinstance(index, ServiceResult):
            return index
        return ServiceResult.success(
            "build",
            count=len(index),
            tags=index.tags(),
            categories=index.categories(),
            posts=[r.summary() for r in index.all()],
        )

    @traced
    def list_posts(
        self,
        *,
        tag: str | None = None,
        category: str | None = None,
        limit: int | None = None,
    ) -> ServiceResult:
        """List posts newest first, optionally filtered by tag and/or category."""
        index = self._with_index("list_posts")
        if isinstance(index, ServiceResult):
            return index

        if tag is not None:
            records = index.by_tag(tag)
            if category is not None:
                records = tuple(r for r in records if category in r.categories)
        elif category is not None:
            records = index.by_category(category)
        else:
            records = index.all()

        total = len(records)
        if limit is not None:
            records = records[:limit]

        filters: dict[str, Any] = {}
        if tag is not None:
            filters["tag"] = tag
        if category is not None:
            filters["category"] = category
        return ServiceResult.success(
            "list_posts",
            count=len(records),
            total=total,
            filters=filters,
            items=[r.summary() for r in records],
        )

    @traced
    def show(self, slug: str, *, related_limit: int = 5) -> ServiceResult:
        """Full detail for one post, with related posts and neighbors."""
        index = self._with_index("show")
        if isinstance(index, ServiceResult):
            return index

        record = index.get(slug)
        if record is None:
            error = ServiceError(code="NOT_FOUND", message=f"No post with slug {slug!r}", detail={"slug": slug})
            return ServiceResult.failure("show", error)

        newer, older = index.neighbors(slug)
        return ServiceResult.success(
            "show",
            **record.summary(),
            front_matter=record.front_matter.to_dict(),
            body=record.body,
            related=[r.summary() for r in index.related(slug, limit=related_limit)],
            newer=newer.slug if newer else None,
            older=older.slug if older else None,
        )

    @traced
    def list_tags(self) -> ServiceResult:
        """Every tag with its post count."""
        index = self._with_index("list_tags")
        if isinstance(index, ServiceResult):
            return index
        return _count_listing("list_tags", index.tags())

    @traced
    def list_categories(self) -> ServiceResult:
        """Every category with its post count."""
        index = self._with_index("list_categories")
        if isinstance(index, ServiceResult):
            return index
        return _count_listing("list_categories", index.categories())
