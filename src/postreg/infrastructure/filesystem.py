"""Filesystem discovery and reading of post documents.

Pure parsing lives in :mod:`postreg.domain` (infrastructure -> domain,
never the reverse). This module only finds files and reads them once.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from postreg.domain.errors import MalformedDocument
from postreg.domain.records import PostSource

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".markdown")

# Directories never searched for posts.
DEFAULT_SKIP_DIRS: frozenset[str] = frozenset({".git", "_site", "node_modules", ".jekyll-cache"})


def find_post_files(
    root: Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> list[Path]:
    """Recursively list post files under *root*, sorted by path.

    Skips any path containing a directory named in *skip_dirs* or
    starting with a dot.
    """
    suffixes = {ext.lower() for ext in extensions}
    skipped = frozenset(skip_dirs)

    results: list[Path] = []
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        rel_dirs = path.relative_to(root).parts[:-1]
        if any(part in skipped or part.startswith(".") for part in rel_dirs):
            continue
        if path.suffix.lower() in suffixes:
            results.append(path)
    return sorted(results)


def read_post_source(path: Path, root: Path) -> PostSource:
    """Read *path* as UTF-8; the source id is its root-relative POSIX path.

    Raises:
        MalformedDocument: The file cannot be read or is not valid UTF-8.
    """
    source_id = path.relative_to(root).as_posix()
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDocument(
            f"Not valid UTF-8 text (byte offset {exc.start})",
            source_id=source_id,
            detail={"offset": exc.start},
        ) from exc
    except OSError as exc:
        raise MalformedDocument(
            f"Cannot read file: {exc.strerror or exc}",
            source_id=source_id,
        ) from exc
    return PostSource(source_id=source_id, raw_text=text)


def load_sources(
    root: Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> list[PostSource | MalformedDocument]:
    """Discover and read every post under *root*.

    A file that cannot be read comes back as a :class:`MalformedDocument`
    in its place, so the build reports it alongside every other failure.

    Raises:
        FileNotFoundError: If *root* is not a directory.
    """
    if not root.is_dir():
        msg = f"Content directory not found: {root}"
        raise FileNotFoundError(msg)
    paths = find_post_files(root, extensions=extensions, skip_dirs=skip_dirs)
    logger.debug("Found %d post files under %s", len(paths), root)
    sources: list[PostSource | MalformedDocument] = []
    for path in paths:
        try:
            sources.append(read_post_source(path, root))
        except MalformedDocument as exc:
            sources.append(exc)
    return sources
