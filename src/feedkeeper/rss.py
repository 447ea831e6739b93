"""RSS 0.91/0.92/2.0 and RSS 1.0 (RDF) decoders.

Elements are matched by local name, so namespaced extensions such as
``content:encoded`` and ``dc:date`` are picked up alongside the core
vocabulary.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .decoding import ItemCollector, apply_date, next_refresh
from .errors import StructuralDecodeError
from .models import Enclosure, Feed, FeedParserDict, Image, Item
from .store import IdentityStore
from .xmlutil import (
    RDF_NS,
    attr_local,
    coerce_int,
    local_name,
    parse_xml_root,
    raise_for_non_feed_root,
    text_of,
)

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

_RDF_ABOUT_ATTR = f"{{{RDF_NS}}}about"


def _find_local(parent: _Element, name: str) -> Optional[_Element]:
    for child in parent:
        if local_name(child.tag) == name:
            return child
    return None


def _read_image(el: Optional[_Element]) -> Optional[FeedParserDict]:
    if el is None:
        return None
    image = FeedParserDict(title="", url="", height="", width="")
    for child in el:
        name = local_name(child.tag)
        if name in image:
            image[name] = text_of(child)
    if not image.url:
        image.url = attr_local(el, "resource") or ""
    return image


def _read_channel(channel: _Element) -> FeedParserDict:
    out = FeedParserDict(
        title="",
        description="",
        link="",
        self_link="",
        image=None,
        ttl="",
        skipHours=[],
        skipDays=[],
        item=[],
    )
    for child in channel:
        name = local_name(child.tag)
        if name in ("title", "description") and not out[name]:
            out[name] = text_of(child)
        elif name == "link":
            # <atom:link> shares the local name; it carries href, not text.
            href = child.get("href")
            if href is None:
                if not out.link:
                    out.link = text_of(child)
            elif child.get("rel") == "self" and not out.self_link:
                out.self_link = href.strip()
        elif name == "image" and out.image is None:
            out.image = _read_image(child)
        elif name == "ttl":
            out.ttl = text_of(child)
        elif name == "skipHours":
            out.skipHours = [
                text_of(hour) for hour in child if local_name(hour.tag) == "hour"
            ]
        elif name == "skipDays":
            out.skipDays = [
                text_of(day) for day in child if local_name(day.tag) == "day"
            ]
        elif name == "item":
            out.item.append(child)
    return out


def _read_item(el: _Element) -> FeedParserDict:
    out = FeedParserDict(
        title="",
        description="",
        encoded="",
        category=[],
        link="",
        pubDate="",
        date="",
        guid="",
        isPermaLink=None,
        about=el.get(_RDF_ABOUT_ATTR, ""),
        enclosure=[],
    )
    for child in el:
        name = local_name(child.tag)
        if name in ("title", "description", "encoded", "pubDate", "date"):
            if not out[name]:
                out[name] = text_of(child)
        elif name == "link":
            if child.get("href") is None and not out.link:
                out.link = text_of(child)
        elif name == "guid":
            if not out.guid:
                out.guid = text_of(child)
                out.isPermaLink = child.get("isPermaLink")
        elif name == "category":
            term = text_of(child)
            if term:
                out.category.append(term)
        elif name == "enclosure":
            out.enclosure.append(
                FeedParserDict(
                    url=attr_local(child, "url") or attr_local(child, "resource") or "",
                    type=attr_local(child, "type") or "",
                    length=attr_local(child, "length") or "",
                )
            )
    return out


def _to_image(wire: Optional[FeedParserDict]) -> Optional[Image]:
    if wire is None:
        return None
    return Image(
        title=wire.title,
        url=wire.url,
        height=coerce_int(wire.height),
        width=coerce_int(wire.width),
    )


def _to_item(wire: FeedParserDict) -> Item:
    item = Item(
        title=wire.title,
        summary=wire.description,
        content=wire.encoded,
        categories=list(wire.category),
        link=wire.link,
        enclosures=[
            Enclosure(url=enc.url, type=enc.type, length=coerce_int(enc.length))
            for enc in wire.enclosure
            if enc.url
        ],
    )
    # dc:date wins over pubDate
    apply_date(item, wire.date or wire.pubDate)
    return item


def _new_feed(channel: FeedParserDict) -> Feed:
    return Feed(
        title=channel.title,
        description=channel.description,
        link=channel.link,
        update_url=channel.self_link,
        image=_to_image(channel.image),
        refresh=next_refresh(
            coerce_int(channel.ttl),
            [coerce_int(hour) for hour in channel.skipHours if hour],
            [day for day in channel.skipDays if day],
        ),
    )


def decode_rss2(data: bytes, store: IdentityStore) -> Feed:
    """Decode an RSS 0.9x or 2.0 document."""
    root = parse_xml_root(data)
    raise_for_non_feed_root(root)
    if local_name(root.tag).lower() != "rss":
        raise StructuralDecodeError(f"Invalid RSS feed: unexpected root {root.tag!r}")

    channel_el = _find_local(root, "channel")
    if channel_el is None:
        raise StructuralDecodeError("Invalid RSS feed: missing channel element")

    channel = _read_channel(channel_el)
    if not channel.item:
        # RSS 0.91 feeds sometimes close the channel before their items.
        channel.item = [child for child in root if local_name(child.tag) == "item"]
    if not channel.item:
        raise StructuralDecodeError("Invalid RSS feed: channel has no items")

    feed = _new_feed(channel)
    collector = ItemCollector(feed, store)
    for el in channel.item:
        wire = _read_item(el)
        item = _to_item(wire)
        if not item.link and wire.guid.startswith(("http://", "https://")):
            if wire.isPermaLink != "false":
                item.link = wire.guid
        collector.add(item, wire.guid)

    logger.debug("Decoded RSS feed %r: %d new items", feed.title, feed.unread)
    return feed


def decode_rss1(data: bytes, store: IdentityStore) -> Feed:
    """Decode an RSS 1.0 (RDF) document.

    Items sit beside the channel under ``rdf:RDF`` and are identified by
    their ``rdf:about`` attribute.
    """
    root = parse_xml_root(data)
    raise_for_non_feed_root(root)
    if local_name(root.tag) != "RDF":
        raise StructuralDecodeError(f"Invalid RSS 1.0 feed: unexpected root {root.tag!r}")

    channel_el = _find_local(root, "channel")
    if channel_el is None:
        raise StructuralDecodeError("Invalid RSS 1.0 feed: missing channel element")

    channel = _read_channel(channel_el)
    # The channel's <image> only references the real one by rdf:resource.
    image = _read_image(_find_local(root, "image"))
    if image is not None:
        channel.image = image
    items = [child for child in root if local_name(child.tag) == "item"]
    if not items:
        raise StructuralDecodeError("Invalid RSS 1.0 feed: no items")

    feed = _new_feed(channel)
    collector = ItemCollector(feed, store)
    for el in items:
        wire = _read_item(el)
        collector.add(_to_item(wire), wire.guid or wire.about)

    logger.debug("Decoded RSS 1.0 feed %r: %d new items", feed.title, feed.unread)
    return feed
