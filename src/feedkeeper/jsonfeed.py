"""JSON Feed 1.0/1.1 decoder.

JSON Feed spec: https://jsonfeed.org/
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import orjson

from .decoding import ItemCollector, apply_date, next_refresh
from .errors import StructuralDecodeError
from .models import Enclosure, Feed, FeedParserDict, Image, Item
from .store import IdentityStore

logger = logging.getLogger(__name__)


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _load(data: bytes) -> dict:
    data = data.lstrip()
    if data.startswith(b"\xef\xbb\xbf"):
        data = data[3:]
    try:
        json_data = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise StructuralDecodeError(f"Failed to parse JSON content: {e}") from e

    if not isinstance(json_data, dict):
        raise StructuralDecodeError("Invalid JSON Feed: top level is not an object")

    version = json_data.get("version")
    is_jsonfeed = isinstance(version, str) and "jsonfeed.org" in version
    if not is_jsonfeed and not isinstance(json_data.get("items"), list):
        raise StructuralDecodeError("Invalid JSON Feed: unrecognised version")
    if not isinstance(json_data.get("items"), list):
        raise StructuralDecodeError("Invalid JSON Feed: missing items")
    return json_data


def _read_item(item: dict) -> FeedParserDict:
    attachments = item.get("attachments")
    tags = item.get("tags")
    return FeedParserDict(
        id=_str(item.get("id")),
        url=_str(item.get("url")),
        title=_str(item.get("title")),
        summary=_str(item.get("summary")),
        content_html=item.get("content_html") or "",
        content_text=item.get("content_text") or "",
        date_published=_str(item.get("date_published")),
        date_modified=_str(item.get("date_modified")),
        image=_str(item.get("image")),
        tags=[_str(tag) for tag in tags if _str(tag)] if isinstance(tags, list) else [],
        attachments=[
            a for a in attachments if isinstance(a, dict)
        ] if isinstance(attachments, list) else [],
    )


def _size(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(_str(value))
    except ValueError:
        return 0


def _to_item(wire: FeedParserDict) -> Item:
    item = Item(
        title=wire.title,
        summary=wire.summary,
        # Prefer content_html, fall back to content_text
        content=wire.content_html or wire.content_text,
        categories=list(wire.tags),
        link=wire.url,
        image=Image(url=wire.image) if wire.image else None,
        enclosures=[
            Enclosure(
                url=_str(attachment.get("url")),
                type=_str(attachment.get("mime_type")),
                length=_size(attachment.get("size_in_bytes")),
            )
            for attachment in wire.attachments
            if _str(attachment.get("url"))
        ],
    )
    apply_date(item, wire.date_modified or wire.date_published)
    return item


def _feed_image(json_data: dict) -> Optional[Image]:
    url = _str(json_data.get("icon")) or _str(json_data.get("favicon"))
    if url:
        return Image(title=_str(json_data.get("title")), url=url)
    return None


def decode_jsonfeed(data: bytes, store: IdentityStore) -> Feed:
    """Decode a JSON Feed document.

    A feed with an empty ``items`` list decodes to a feed with no items;
    a document without ``items`` at all is a structural error.
    """
    json_data = _load(data)
    feed = Feed(
        title=_str(json_data.get("title")),
        description=_str(json_data.get("description")),
        link=_str(json_data.get("home_page_url")),
        update_url=_str(json_data.get("feed_url")),
        image=_feed_image(json_data),
        refresh=next_refresh(),
    )

    collector = ItemCollector(feed, store)
    for raw in json_data["items"]:
        if not isinstance(raw, dict):
            continue
        wire = _read_item(raw)
        collector.add(_to_item(wire), wire.id)

    logger.debug("Decoded JSON Feed %r: %d new items", feed.title, feed.unread)
    return feed
