"""Serialize a held feed so a caller can store it between refresh cycles."""

from __future__ import annotations

import dataclasses
import datetime
from typing import Any, Optional

import orjson

from .errors import StructuralDecodeError
from .models import Enclosure, Feed, Image, Item


def _datetime_from(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    return datetime.datetime.fromisoformat(value)


def _image_from(data: Optional[dict]) -> Optional[Image]:
    if not data:
        return None
    return Image(**data)


def _item_to_dict(item: Item) -> dict[str, Any]:
    out = dataclasses.asdict(item)
    out["date"] = item.date.isoformat() if item.date else None
    return out


def _item_from_dict(data: dict) -> Item:
    data = dict(data)
    data["date"] = _datetime_from(data.get("date"))
    data["image"] = _image_from(data.get("image"))
    data["enclosures"] = [Enclosure(**enc) for enc in data.get("enclosures", [])]
    return Item(**data)


def feed_to_dict(feed: Feed) -> dict[str, Any]:
    """Plain-data form of ``feed``; warnings are not persisted."""
    return {
        "title": feed.title,
        "description": feed.description,
        "link": feed.link,
        "update_url": feed.update_url,
        "image": dataclasses.asdict(feed.image) if feed.image else None,
        "items": [_item_to_dict(item) for item in feed.items],
        "known_ids": sorted(feed.known_ids),
        "refresh": feed.refresh.isoformat() if feed.refresh else None,
        "unread": feed.unread,
    }


def feed_from_dict(data: dict) -> Feed:
    try:
        return Feed(
            title=data.get("title", ""),
            description=data.get("description", ""),
            link=data.get("link", ""),
            update_url=data.get("update_url", ""),
            image=_image_from(data.get("image")),
            items=[_item_from_dict(item) for item in data.get("items", [])],
            known_ids=set(data.get("known_ids", [])),
            refresh=_datetime_from(data.get("refresh")),
            unread=data.get("unread", 0),
        )
    except (TypeError, ValueError) as e:
        raise StructuralDecodeError(f"Invalid feed state: {e}") from e


def dump_feed(feed: Feed) -> bytes:
    return orjson.dumps(feed_to_dict(feed))


def load_feed(data: bytes) -> Feed:
    try:
        loaded = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise StructuralDecodeError(f"Invalid feed state: {e}") from e
    if not isinstance(loaded, dict):
        raise StructuralDecodeError("Invalid feed state: top level is not an object")
    return feed_from_dict(loaded)
