"""Behaviour shared by every schema decoder.

Each decoder maps its own wire schema to :class:`~feedkeeper.models.Item`
values and hands them to an :class:`ItemCollector`, which owns identity
resolution, deduplication and the unread count.
"""

from __future__ import annotations

import datetime
import html as _html_mod
import logging
import re
from typing import Iterable, Optional

from . import config
from .errors import ItemIdentityWarning
from .models import Feed, Item
from .store import IdentityStore
from .timeparse import parse_time

logger = logging.getLogger(__name__)

_RE_HTML_TAGS = re.compile(r"<[^>]+>")
_RE_WHITESPACE = re.compile(r"\s+")

_WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# Enough to walk past every hour of every day once.
_MAX_REFRESH_STEPS = 24 * 8

SUMMARY_LENGTH = 512


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def next_refresh(
    ttl_minutes: int = 0,
    skip_hours: Iterable[int] = (),
    skip_days: Iterable[str] = (),
    now: Optional[datetime.datetime] = None,
) -> datetime.datetime:
    """Compute the earliest instant a feed may be fetched again.

    With a positive ``ttl_minutes`` the instant is ``now + ttl``, pushed to
    the top of the next hour while its hour is in ``skip_hours`` and to the
    next midnight while its weekday is in ``skip_days`` (full English day
    names, any case). Otherwise it is ``now + config.DEFAULT_REFRESH_INTERVAL``.
    Hours and days are read in UTC, as RSS defines them.
    """
    now = now or utcnow()
    if ttl_minutes <= 0:
        return now + config.DEFAULT_REFRESH_INTERVAL

    hours = set(skip_hours)
    days = {day.strip().lower() for day in skip_days}
    if len(hours) >= 24:
        hours = set()
    if days.issuperset(_WEEKDAYS):
        days = set()

    refresh = now + datetime.timedelta(minutes=ttl_minutes)
    for _ in range(_MAX_REFRESH_STEPS):
        utc = refresh.astimezone(datetime.timezone.utc)
        if _WEEKDAYS[utc.weekday()] in days:
            refresh = utc.replace(
                hour=0, minute=0, second=0, microsecond=0
            ) + datetime.timedelta(days=1)
        elif utc.hour in hours:
            refresh = utc.replace(
                minute=0, second=0, microsecond=0
            ) + datetime.timedelta(hours=1)
        else:
            break
    return refresh


def apply_date(item: Item, value: str) -> None:
    """Parse ``value`` onto ``item``; failures never abort the decode."""
    if not value:
        return
    result = parse_time(value)
    item.date = result.instant
    item.date_valid = result.valid
    if result.error is not None:
        logger.debug("Item %r: %s", item.title, result.error)


def synthesize_summary(item: Item) -> None:
    """Fill an empty summary with a plain-text prefix of the content."""
    if item.summary or not item.content:
        return
    text = item.content
    if "<" in text and ">" in text:
        text = _RE_HTML_TAGS.sub(" ", text[: SUMMARY_LENGTH * 4])
        if "&" in text:
            text = _html_mod.unescape(text)
    item.summary = _RE_WHITESPACE.sub(" ", text).strip()[:SUMMARY_LENGTH]


class ItemCollector:
    """Admit decoded items into a feed.

    An item is identified by its native identifier, or failing that by its
    link; an item with neither is dropped with an
    :class:`~feedkeeper.errors.ItemIdentityWarning`. Items whose identifier
    already appeared in this document, or that ``store`` has seen in an
    earlier fetch, are skipped silently.
    """

    def __init__(self, feed: Feed, store: IdentityStore):
        self.feed = feed
        self.store = store

    def add(self, item: Item, native_id: Optional[str]) -> bool:
        identifier = (native_id or "").strip() or item.link.strip()
        if not identifier:
            warning = ItemIdentityWarning(
                f"Item {item.title!r} has no identifier or link and was dropped"
            )
            logger.warning("%s", warning)
            self.feed.warnings.append(warning)
            return False

        if identifier in self.feed.known_ids:
            logger.debug("Item %r has a duplicate identifier %r", item.title, identifier)
            return False
        if self.store.check_and_add(identifier):
            logger.debug("Skipping already delivered item %r", identifier)
            return False

        item.id = identifier
        synthesize_summary(item)
        self.feed.items.append(item)
        self.feed.known_ids.add(identifier)
        self.feed.unread += 1
        return True
