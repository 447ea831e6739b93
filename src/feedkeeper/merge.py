"""Fold successive fetches of one feed into the feed value a caller holds."""

from __future__ import annotations

import datetime
import logging
from typing import Optional

from .decoding import utcnow
from .errors import RefreshNotReadyError
from .main import Fetcher, fetch_feed
from .models import Feed
from .store import IdentityStore

logger = logging.getLogger(__name__)


def _raise_if_not_due(feed: Feed, now: datetime.datetime) -> None:
    if feed.refresh is not None and not feed.is_due(now):
        raise RefreshNotReadyError(feed.refresh)


def merge(
    held: Feed, fresh: Feed, *, now: Optional[datetime.datetime] = None
) -> Feed:
    """Merge ``fresh`` into ``held`` and return ``held``.

    Title, description and refresh instant are taken from ``fresh``. Items
    of ``fresh`` whose identifier ``held`` does not know are appended in
    document order and counted as unread; items already held are never
    reordered or removed, so merging the same document twice is a no-op
    for the item list.

    Raises:
        RefreshNotReadyError: if ``now`` is before ``held.refresh``; ``held``
            is left untouched
    """
    _raise_if_not_due(held, now or utcnow())

    held.title = fresh.title
    held.description = fresh.description
    held.refresh = fresh.refresh
    if fresh.update_url and not held.update_url:
        held.update_url = fresh.update_url

    added = 0
    for item in fresh.items:
        if item.id in held.known_ids:
            continue
        held.items.append(item)
        held.known_ids.add(item.id)
        added += 1
    held.unread += added
    held.warnings = list(fresh.warnings)

    logger.info(
        "Merged feed %r: %d new items, %d unread", held.title, added, held.unread
    )
    return held


def update(
    feed: Feed,
    fetch: Fetcher,
    store: Optional[IdentityStore] = None,
    *,
    now: Optional[datetime.datetime] = None,
) -> Feed:
    """Fetch, parse and merge one refresh cycle of ``feed``.

    Readiness is checked before ``fetch`` is called, so a feed that is not
    yet due costs no fetch. Without a ``store``, one seeded with the held
    feed's identifiers is used.
    """
    now = now or utcnow()
    _raise_if_not_due(feed, now)
    if store is None:
        store = IdentityStore(feed.known_ids)
    fresh = fetch_feed(fetch, feed.update_url, store)
    return merge(feed, fresh, now=now)
