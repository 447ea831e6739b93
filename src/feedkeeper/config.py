"""Package-level settings.

Values are read at call time, so an embedding application may reassign them
after import (``feedkeeper.config.DEFAULT_REFRESH_INTERVAL = ...``).
"""

import datetime
import logging
import os

logger = logging.getLogger(__name__)

_DEFAULT_REFRESH_MINUTES = 10


def _refresh_minutes() -> int:
    value = os.environ.get("FEEDKEEPER_REFRESH_MINUTES", "").strip()
    if not value:
        return _DEFAULT_REFRESH_MINUTES
    try:
        return int(value)
    except ValueError:
        logger.warning(
            "Ignoring invalid FEEDKEEPER_REFRESH_MINUTES=%r, using %d",
            value,
            _DEFAULT_REFRESH_MINUTES,
        )
        return _DEFAULT_REFRESH_MINUTES


# Used when a document carries no <ttl>.
DEFAULT_REFRESH_INTERVAL = datetime.timedelta(minutes=_refresh_minutes())

# When False, identity stores neither remember nor report identifiers.
CACHE_ITEM_IDS = True
