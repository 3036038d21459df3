"""RegistryIndex — the in-memory aggregate of every valid post.

The index is built once from a batch of sources and is immutable
afterwards. There is no partially built state: :meth:`RegistryIndex.build`
either returns a complete index or raises :class:`AggregateBuildError`
carrying every per-document and duplicate-slug failure.

INVARIANT: every record reachable through a tag or category lookup is
also in the primary record set.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, tzinfo
from types import MappingProxyType

from postreg.domain.errors import AggregateBuildError, DuplicateSlug, PostError
from postreg.domain.records import PostRecord, PostSource, load_record

logger = logging.getLogger(__name__)

# Relatedness weights: a shared tag counts twice a shared category.
TAG_WEIGHT = 2
CATEGORY_WEIGHT = 1


def _sort_key(record: PostRecord) -> tuple[float, str]:
    # Newest first; slug breaks ties deterministically.
    return (-record.date.timestamp(), record.slug)


def _load_one(source: PostSource | PostError, default_tz: tzinfo) -> PostRecord | PostError:
    if isinstance(source, PostError):
        return source
    try:
        return load_record(source, default_tz=default_tz)
    except PostError as exc:
        return exc.with_source(source.source_id)


class RegistryIndex:
    """Ordered, queryable collection of :class:`PostRecord` values.

    Construct via :meth:`build`; the constructor expects records that have
    already been validated and checked for slug uniqueness.
    """

    def __init__(self, records: Iterable[PostRecord]) -> None:
        ordered = tuple(sorted(records, key=_sort_key))
        self._records = ordered
        self._by_slug = MappingProxyType({r.slug: r for r in ordered})

        by_tag: dict[str, list[PostRecord]] = {}
        by_category: dict[str, list[PostRecord]] = {}
        for record in ordered:
            for tag in record.tags:
                by_tag.setdefault(tag, []).append(record)
            for category in record.categories:
                by_category.setdefault(category, []).append(record)
        self._by_tag = MappingProxyType({k: tuple(v) for k, v in by_tag.items()})
        self._by_category = MappingProxyType({k: tuple(v) for k, v in by_category.items()})

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        sources: Sequence[PostSource | PostError],
        *,
        workers: int = 1,
        default_tz: tzinfo = UTC,
    ) -> RegistryIndex:
        """Parse, validate, and index every source.

        Per-document failures are collected rather than raised eagerly so
        one broken post never hides the others. Slug collisions are
        checked once every document has been validated.

        Args:
            sources: Documents to index. An entry that is already a
                :class:`PostError` stands for a document that could not be
                read; it is reported in place with the other failures.
            workers: Parse documents on a thread pool when greater than 1.
                Error order always follows input order.
            default_tz: Timezone for dates written without an offset.

        Raises:
            AggregateBuildError: If any document failed or any slug collided.
        """
        if workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(lambda s: _load_one(s, default_tz), sources))
        else:
            outcomes = [_load_one(s, default_tz) for s in sources]

        errors: list[PostError] = []
        records: list[PostRecord] = []
        for outcome in outcomes:
            if isinstance(outcome, PostError):
                logger.warning("Skipping %s: %s", outcome.source_id, outcome.message)
                errors.append(outcome)
            else:
                records.append(outcome)

        claimed: dict[str, list[str]] = {}
        for record in records:
            claimed.setdefault(record.slug, []).append(record.source_id)
        collisions = {slug: ids for slug, ids in claimed.items() if len(ids) > 1}
        if collisions:
            duplicate = DuplicateSlug(collisions)
            logger.warning("%s", duplicate.message)
            errors.append(duplicate)

        if errors:
            raise AggregateBuildError(errors)

        logger.debug("Indexed %d posts", len(records))
        return cls(records)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all(self) -> tuple[PostRecord, ...]:
        """Every post, newest first, ties broken by slug."""
        return self._records

    def by_tag(self, tag: str) -> tuple[PostRecord, ...]:
        """Posts tagged *tag*, newest first. Empty when nothing matches."""
        return self._by_tag.get(tag, ())

    def by_category(self, category: str) -> tuple[PostRecord, ...]:
        """Posts filed under *category*, newest first."""
        return self._by_category.get(category, ())

    def get(self, slug: str) -> PostRecord | None:
        return self._by_slug.get(slug)

    def tags(self) -> dict[str, int]:
        """Tag -> post count, sorted by tag name."""
        return {tag: len(self._by_tag[tag]) for tag in sorted(self._by_tag)}

    def categories(self) -> dict[str, int]:
        """Category -> post count, sorted by category name."""
        return {c: len(self._by_category[c]) for c in sorted(self._by_category)}

    def related(self, slug: str, *, limit: int = 5) -> tuple[PostRecord, ...]:
        """Posts sharing tags or categories with *slug*, most related first.

        Each shared tag scores :data:`TAG_WEIGHT`, each shared category
        :data:`CATEGORY_WEIGHT`. Posts with no overlap are never returned.
        Equal scores fall back to index order (newest first).

        Raises:
            KeyError: If *slug* is not in the index.
        """
        record = self._by_slug[slug]
        scores: Counter[str] = Counter()
        for tag in record.tags:
            for other in self._by_tag[tag]:
                scores[other.slug] += TAG_WEIGHT
        for category in record.categories:
            for other in self._by_category[category]:
                scores[other.slug] += CATEGORY_WEIGHT
        scores.pop(slug, None)

        position = {r.slug: i for i, r in enumerate(self._records)}
        ranked = sorted(scores, key=lambda s: (-scores[s], position[s]))
        return tuple(self._by_slug[s] for s in ranked[:limit])

    def neighbors(self, slug: str) -> tuple[PostRecord | None, PostRecord | None]:
        """Return ``(newer, older)`` posts adjacent to *slug* in :meth:`all`.

        Raises:
            KeyError: If *slug* is not in the index.
        """
        record = self._by_slug[slug]
        i = self._records.index(record)
        newer = self._records[i - 1] if i > 0 else None
        older = self._records[i + 1] if i + 1 < len(self._records) else None
        return newer, older

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PostRecord]:
        return iter(self._records)

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegistryIndex):
            return NotImplemented
        return self._records == other._records

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RegistryIndex({len(self)} posts)"
