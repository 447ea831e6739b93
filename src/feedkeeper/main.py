from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from .atom import decode_atom
from .detect import FeedFormat, detect_format
from .errors import StructuralDecodeError
from .jsonfeed import decode_jsonfeed
from .models import Feed
from .rss import decode_rss1, decode_rss2
from .store import IdentityStore
from .xmlutil import ensure_utf8_declaration

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes, IdentityStore], Feed]
Fetcher = Callable[[], Union[str, bytes]]

_DECODERS: dict[FeedFormat, Decoder] = {
    FeedFormat.RSS2: decode_rss2,
    FeedFormat.RSS1: decode_rss1,
    FeedFormat.ATOM: decode_atom,
    FeedFormat.JSON_FEED: decode_jsonfeed,
}


def _as_bytes(source: Union[str, bytes]) -> bytes:
    if isinstance(source, str):
        # Already decoded; the declaration must not name the old charset.
        return ensure_utf8_declaration(source).encode("utf-8", errors="replace")
    return source


def decode(data: bytes, fmt: FeedFormat, store: IdentityStore) -> Feed:
    """Run the decoder registered for ``fmt``."""
    return _DECODERS[fmt](data, store)


def parse(
    source: Union[str, bytes],
    store: Optional[IdentityStore] = None,
    *,
    url: str = "",
) -> Feed:
    """Parse one fetched feed document.

    Args:
        source: document content as bytes, or as an already decoded string
        store: identifiers delivered by earlier fetches of the same feed;
            items found in it are skipped and new ones are recorded. A fresh
            store is used when omitted.
        url: the address the document was fetched from; overrides any
            self link found in the document

    Returns:
        Feed holding the newly seen items

    Raises:
        StructuralDecodeError: If content is empty, malformed or not a feed
        UnsupportedCharsetError: If the declared charset is unknown
    """
    data = _as_bytes(source)
    if not data.strip():
        raise StructuralDecodeError("Empty content")
    if store is None:
        store = IdentityStore()

    fmt = detect_format(data)
    logger.debug("Detected %s document (%d bytes)", fmt.value, len(data))
    feed = decode(data, fmt, store)
    if url:
        feed.update_url = url
    return feed


def fetch_feed(
    fetch: Fetcher, url: str = "", store: Optional[IdentityStore] = None
) -> Feed:
    """Retrieve a document through ``fetch`` and parse it.

    ``fetch`` is any zero-argument callable returning the document; errors
    it raises propagate unchanged.
    """
    return parse(fetch(), store, url=url)
