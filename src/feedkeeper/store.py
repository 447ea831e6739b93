"""Record which item identifiers have already been delivered.

A store is scoped by whoever creates it: typically one per feed, so that
unrelated feeds never collide on identifiers. :func:`shared_store` returns
a single process-wide store for applications that want sharing.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from . import config

logger = logging.getLogger(__name__)


class IdentityStore:
    def __init__(self, identifiers: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._known: set[str] = set(identifiers)

    def check_and_add(self, identifier: str) -> bool:
        """Return True if ``identifier`` was already known, else record it.

        The check and the insert happen under one lock: for any identifier,
        exactly one caller ever sees False. With identifier caching disabled
        every call returns False and nothing is recorded.
        """
        if not config.CACHE_ITEM_IDS:
            return False
        with self._lock:
            if identifier in self._known:
                return True
            self._known.add(identifier)
            return False

    def __contains__(self, identifier: object) -> bool:
        if not config.CACHE_ITEM_IDS:
            return False
        with self._lock:
            return identifier in self._known

    def __len__(self) -> int:
        with self._lock:
            return len(self._known)


_shared = IdentityStore()


def shared_store() -> IdentityStore:
    return _shared


def cache_parsed_item_ids(enabled: bool) -> None:
    """Turn identifier caching on or off for every store.

    Mostly useful for test isolation.
    """
    logger.debug("Item identifier caching %s", "enabled" if enabled else "disabled")
    config.CACHE_ITEM_IDS = enabled
