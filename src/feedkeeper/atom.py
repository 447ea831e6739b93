from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

from .decoding import ItemCollector, apply_date, next_refresh
from .errors import StructuralDecodeError
from .models import Enclosure, Feed, FeedParserDict, Image, Item
from .store import IdentityStore
from .xmlutil import (
    coerce_int,
    inner_xml,
    local_name,
    namespace,
    parse_xml_root,
    raise_for_non_feed_root,
    text_of,
)

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

ATOM_NAMESPACES = frozenset(
    {
        "http://www.w3.org/2005/Atom",
        "https://www.w3.org/2005/Atom",
        "http://purl.org/atom/ns#",
    }
)
_ATOM_03 = "http://purl.org/atom/ns#"


@lru_cache(maxsize=4)
def _atom_ns_tags(atom_ns: str) -> dict[str, str]:
    """Namespace-qualified tag names, computed once per namespace.

    Atom 0.3 names its dates ``issued``/``modified`` and its subtitle
    ``tagline``.
    """
    ns = f"{{{atom_ns}}}"
    is_atom_03 = atom_ns == _ATOM_03
    return {
        "id": ns + "id",
        "title": ns + "title",
        "subtitle": ns + ("tagline" if is_atom_03 else "subtitle"),
        "summary": ns + "summary",
        "content": ns + "content",
        "link": ns + "link",
        "category": ns + "category",
        "logo": ns + "logo",
        "icon": ns + "icon",
        "entry": ns + "entry",
        "published": ns + ("issued" if is_atom_03 else "published"),
        "updated": ns + ("modified" if is_atom_03 else "updated"),
    }


def _content_text(el: _Element) -> str:
    content_type = el.get("type", "text")
    if content_type in ("xhtml", "application/xhtml+xml"):
        return inner_xml(el)
    return (el.text or "").strip()


def _read_links(el: _Element, tags: dict[str, str]) -> list[FeedParserDict]:
    return [
        FeedParserDict(
            href=(link.get("href") or "").strip(),
            rel=link.get("rel", ""),
            type=link.get("type", ""),
            length=link.get("length", ""),
        )
        for link in el.findall(tags["link"])
    ]


def _alternate(links: list[FeedParserDict]) -> str:
    for link in links:
        if link.rel in ("", "alternate") and link.href:
            return link.href
    return ""


def _read_entry(el: _Element, tags: dict[str, str]) -> FeedParserDict:
    out = FeedParserDict(
        id="",
        title="",
        summary="",
        content="",
        updated="",
        published="",
        link=_read_links(el, tags),
        category=[],
    )
    for child in el:
        tag = child.tag
        if tag == tags["content"]:
            if not out.content:
                out.content = _content_text(child)
        elif tag == tags["summary"]:
            if not out.summary:
                out.summary = _content_text(child)
        elif tag == tags["category"]:
            term = (child.get("term") or "").strip()
            if term:
                out.category.append(term)
        else:
            for name in ("id", "title", "updated", "published"):
                if tag == tags[name] and not out[name]:
                    out[name] = text_of(child)
    return out


def _to_item(wire: FeedParserDict) -> Item:
    item = Item(
        title=wire.title,
        summary=wire.summary,
        content=wire.content,
        categories=list(wire.category),
        link=_alternate(wire.link),
        enclosures=[
            Enclosure(url=link.href, type=link.type, length=coerce_int(link.length))
            for link in wire.link
            if link.rel == "enclosure" and link.href
        ],
    )
    apply_date(item, wire.updated or wire.published)
    return item


def _feed_image(root: _Element, tags: dict[str, str]) -> Optional[Image]:
    for name in ("logo", "icon"):
        url = text_of(root.find(tags[name]))
        if url:
            return Image(url=url)
    return None


def decode_atom(data: bytes, store: IdentityStore) -> Feed:
    """Decode an Atom 1.0 or 0.3 document.

    This is also where undetected formats end up; anything whose root is
    not an Atom ``feed`` element is a structural error.
    """
    root = parse_xml_root(data)
    raise_for_non_feed_root(root)
    atom_ns = namespace(root.tag)
    if local_name(root.tag) != "feed" or atom_ns not in ATOM_NAMESPACES:
        raise StructuralDecodeError(f"Unknown feed type: {root.tag}")

    tags = _atom_ns_tags(atom_ns)
    links = _read_links(root, tags)
    feed = Feed(
        title=text_of(root.find(tags["title"])),
        description=text_of(root.find(tags["subtitle"])),
        link=_alternate(links),
        update_url=next((link.href for link in links if link.rel == "self"), ""),
        image=_feed_image(root, tags),
        refresh=next_refresh(),
    )

    entries = root.findall(tags["entry"])
    if not entries:
        raise StructuralDecodeError("Invalid Atom feed: no entries")

    collector = ItemCollector(feed, store)
    for el in entries:
        wire = _read_entry(el, tags)
        collector.add(_to_item(wire), wire.id)

    logger.debug("Decoded Atom feed %r: %d new items", feed.title, feed.unread)
    return feed
