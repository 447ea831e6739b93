"""Timestamp parsing for the many date formats found in feeds.

Layouts are ``datetime.strptime`` patterns. They are tried in order and the
first match wins. ``TIME_LAYOUTS`` holds layouts whose offset is numeric (or
absent, meaning UTC) and is always tried first; ``TIME_LAYOUTS_NAMED_ZONE``
holds layouts carrying only a zone abbreviation, which is then resolved
through the timezone database.

Both lists are public and may be extended in place by applications::

    timeparse.TIME_LAYOUTS.insert(0, "%d.%m.%Y %H:%M %z")

A zone abbreviation is written ``%Z`` and must be a whitespace-separated
field of its own. In ``TIME_LAYOUTS`` it is ignored in favour of the
numeric offset next to it.
"""

from __future__ import annotations

import datetime
import logging
import re
from typing import NamedTuple, Optional

from dateutil import tz

from .errors import TimestampInvalid, UnknownTimezoneError

logger = logging.getLogger(__name__)

_RE_WHITESPACE = re.compile(r"\s+")
_RE_FRACTION = re.compile(r"\.(\d{7,})(?=(?:[+-]\d{2}:?\d{2}|Z|$))", re.IGNORECASE)

TIME_LAYOUTS: list[str] = [
    "%a, %d %b %Y %H:%M:%S Z",
    "%a, %d %b %Y %H:%M:%S",
    "%a, %d %b %Y %H:%M:%S %z",  # RFC 1123 with numeric zone
    "%a, %d %b %y %H:%M:%S %z",
    "%a, %d %b %y %H:%M:%S",
    "%d %b %Y %H:%M:%S %z",
    "%d %b %Y %H:%M:%S",
    "%d %b %y %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S",
    "%a %b %d %H:%M:%S %Y",  # ANSI C
    "%a %b %d %H:%M:%S %z %Y",  # Ruby
    "%d %b %y %H:%M %z",  # RFC 822 with numeric zone
    "%Y-%m-%dT%H:%M:%S%z",  # RFC 3339
    "%Y-%m-%dT%H:%M:%S.%f%z",
    # Offset and name together. The name can be ambiguous (PST has
    # different rules in different places), so the offset is used.
    "%d %b %Y %H:%M:%S %z %Z",
    "%d %b %Y %H:%M:%S %Z %z",
    "%a, %d %b %Y %H:%M:%S %Z %z",
    "%a, %d %b %Y %H:%M:%S %z %Z",
    "%d %b %y %H:%M:%S %z %Z",
    "%d %b %y %H:%M:%S %Z %z",
    "%b %d, %Y %H:%M %p %z %Z",
    "%b %d, %Y %H:%M %p %Z %z",
    "%b %d, %y %H:%M %p %Z %z",
    "%b %d, %y %H:%M %p %z %Z",
]

TIME_LAYOUTS_NAMED_ZONE: list[str] = [
    "%a, %d %b %Y %H:%M:%S %Z",  # RFC 1123
    "%a, %d %b %y %H:%M:%S %Z",
    "%d %b %Y %H:%M:%S %Z",
    "%d %b %y %H:%M:%S %Z",
    "%b %d, %Y %H:%M %p %Z",
    "%b %d, %y %H:%M %p %Z",
    "%a %b %d %H:%M:%S %Z %Y",  # Unix date
    "%A, %d-%b-%y %H:%M:%S %Z",  # RFC 850
    "%d %b %y %H:%M %Z",  # RFC 822
]

# Fixed offsets (seconds east of UTC) for abbreviations the timezone
# database does not know as zone names.
ZONE_ABBREVIATIONS: dict[str, int] = {
    "UTC": 0,
    "UT": 0,
    "GMT": 0,
    "Z": 0,
    "WET": 0,
    "WEST": 3600,
    "BST": 3600,
    "CET": 3600,
    "CEST": 7200,
    "EET": 7200,
    "EEST": 10800,
    "MSK": 10800,
    "IST": 19800,
    "PST": -28800,
    "PDT": -25200,
    "MST": -25200,
    "MDT": -21600,
    "CST": -21600,
    "CDT": -18000,
    "EST": -18000,
    "EDT": -14400,
    "AKST": -32400,
    "AKDT": -28800,
    "HST": -36000,
    "AEST": 36000,
    "AEDT": 39600,
    "ACST": 34200,
    "ACDT": 37800,
    "AWST": 28800,
    "NZST": 43200,
    "NZDT": 46800,
    "JST": 32400,
    "KST": 32400,
    "SGT": 28800,
}


class ParsedTime(NamedTuple):
    instant: Optional[datetime.datetime]
    valid: bool
    error: Optional[TimestampInvalid] = None


def _split_zone(value: str, layout: str) -> tuple[str, str, Optional[str]]:
    """Remove the ``%Z`` field from both ``layout`` and ``value``."""
    if "%Z" not in layout:
        return value, layout, None
    fields = layout.split(" ")
    parts = value.split(" ")
    if len(fields) != len(parts):
        raise ValueError("field count mismatch")
    index = fields.index("%Z")
    zone = parts.pop(index)
    fields.pop(index)
    if not zone.isalpha():
        raise ValueError(f"not a zone abbreviation: {zone!r}")
    return " ".join(parts), " ".join(fields), zone


def _apply_meridiem(parsed: datetime.datetime, value: str) -> datetime.datetime:
    """Honour AM/PM next to a 24-hour ``%H`` field, as in "3:27 PM"."""
    meridiem = next(
        (part.upper() for part in value.split(" ") if part.upper() in ("AM", "PM")),
        None,
    )
    if meridiem == "PM" and parsed.hour < 12:
        return parsed.replace(hour=parsed.hour + 12)
    if meridiem == "AM" and parsed.hour == 12:
        return parsed.replace(hour=0)
    return parsed


def _strptime(value: str, layout: str) -> tuple[datetime.datetime, Optional[str]]:
    value, layout, zone = _split_zone(value, layout)
    parsed = datetime.datetime.strptime(value, layout)
    # strptime only applies %p to %I hours.
    if "%p" in layout and "%H" in layout:
        parsed = _apply_meridiem(parsed, value)
    return parsed, zone


def resolve_zone(name: str) -> datetime.tzinfo:
    """Look up a zone abbreviation or name.

    The timezone database is consulted first, then ``ZONE_ABBREVIATIONS``.

    Raises:
        UnknownTimezoneError: if neither knows ``name``
    """
    zone = tz.gettz(name)
    if zone is not None:
        return zone
    offset = ZONE_ABBREVIATIONS.get(name.upper())
    if offset is not None:
        return tz.UTC if offset == 0 else tz.tzoffset(name, offset)
    raise UnknownTimezoneError(name, name)


def _normalize(value: str) -> str:
    candidate = _RE_WHITESPACE.sub(" ", value.strip())
    # strptime's %f takes at most microseconds
    return _RE_FRACTION.sub(lambda m: "." + m.group(1)[:6], candidate, count=1)


def parse_time(value: str) -> ParsedTime:
    """Convert a free-form date string into an aware datetime.

    Never raises. An unparseable string yields ``ParsedTime(None, False,
    TimestampInvalid)``. When a layout matches but its zone abbreviation
    cannot be resolved, the instant is returned read as UTC, together with
    ``valid=False`` and the :class:`UnknownTimezoneError`.
    """
    candidate = _normalize(value or "")
    if not candidate:
        return ParsedTime(None, False, TimestampInvalid(value or "", "empty timestamp"))

    for layout in TIME_LAYOUTS:
        try:
            parsed, _ = _strptime(candidate, layout)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz.UTC)
        return ParsedTime(parsed, True)

    for layout in TIME_LAYOUTS_NAMED_ZONE:
        try:
            parsed, zone = _strptime(candidate, layout)
        except ValueError:
            continue
        try:
            tzinfo = resolve_zone(zone) if zone else tz.UTC
        except UnknownTimezoneError as e:
            logger.debug("Could not resolve timezone %r in %r", zone, value)
            return ParsedTime(
                parsed.replace(tzinfo=tz.UTC), False, UnknownTimezoneError(value, e.zone)
            )
        return ParsedTime(parsed.replace(tzinfo=tzinfo), True)

    return ParsedTime(None, False, TimestampInvalid(value))
