"""Post date parsing.

Posts carry Jekyll-style timestamps such as ``2024-06-02 12:09:45 +0000``
or ``2026-02-08 21:00:00 +0530``. Offsets vary between posts, so every
``date time ±offset`` form is accepted rather than one fixed timezone.
Values without an offset are read in the caller's default timezone.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, time, timedelta, timezone, tzinfo

_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M%z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

_OFFSET_RE = re.compile(r"^(?P<sign>[+-])(?P<hours>\d{2}):?(?P<minutes>\d{2})$")


def parse_offset(value: str) -> tzinfo:
    """Parse ``+0530`` / ``-08:00`` / ``Z`` / ``UTC`` into a fixed-offset tzinfo.

    Raises:
        ValueError: If *value* is not a recognized offset.
    """
    text = value.strip()
    if text.upper() in ("Z", "UTC"):
        return UTC
    match = _OFFSET_RE.match(text)
    if match is None:
        msg = f"Invalid timezone offset: {value!r}"
        raise ValueError(msg)
    delta = timedelta(hours=int(match["hours"]), minutes=int(match["minutes"]))
    if match["sign"] == "-":
        delta = -delta
    return timezone(delta)


def _parse_string(text: str, default_tz: tzinfo) -> datetime:
    candidate = text.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+0000"
    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(candidate, fmt)
        except ValueError:
            continue
        return _ensure_aware(parsed, default_tz)
    try:
        parsed = datetime.fromisoformat(text.strip())
    except ValueError:
        msg = f"Unrecognized date format: {text!r}"
        raise ValueError(msg) from None
    return _ensure_aware(parsed, default_tz)


def _ensure_aware(value: datetime, default_tz: tzinfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=default_tz)
    return value


def parse_post_date(value: object, *, default_tz: tzinfo = UTC) -> datetime:
    """Convert a front-matter ``date`` value into an aware datetime.

    Accepts strings in any of the supported layouts, ``datetime`` values
    already decoded by the YAML loader, and bare ``date`` values (read as
    midnight).

    Raises:
        ValueError: If *value* cannot be interpreted as a timestamp.
    """
    if isinstance(value, datetime):
        return _ensure_aware(value, default_tz)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=default_tz)
    if isinstance(value, str):
        if not value.strip():
            msg = "Date is empty"
            raise ValueError(msg)
        return _parse_string(value, default_tz)
    msg = f"Unsupported date value: {value!r}"
    raise ValueError(msg)
