"""Slug derivation.

A slug is ``{YYYY-MM-DD}-{kebab-title}``: the calendar date as written in
the post's own UTC offset, then the title lowercased with every run of
non-alphanumeric characters collapsed to one hyphen.

INVARIANT: slugs are unique within a registry index.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime

_NON_ALNUM_RUN = re.compile(r"[\W_]+")


def kebab_case(title: str) -> str:
    """Lowercase *title* and join its alphanumeric runs with hyphens.

    Examples:
        >>> kebab_case("CKAD Guide")
        'ckad-guide'
        >>> kebab_case("  Fork/Join -- & CAS!  ")
        'fork-join-cas'
        >>> kebab_case("???")
        ''
    """
    text = unicodedata.normalize("NFKC", title).lower()
    return _NON_ALNUM_RUN.sub("-", text).strip("-")


def make_slug(when: date | datetime, title: str) -> str:
    """Build the slug for a post published at *when* titled *title*.

    Falls back to the bare date when the title has no alphanumerics.

    Examples:
        >>> from datetime import date
        >>> make_slug(date(2024, 6, 2), "CKAD Guide")
        '2024-06-02-ckad-guide'
    """
    day = when.date() if isinstance(when, datetime) else when
    kebab = kebab_case(title)
    prefix = day.isoformat()
    return f"{prefix}-{kebab}" if kebab else prefix
