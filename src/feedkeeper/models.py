from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import ItemIdentityWarning

_RE_IMG_TAG = re.compile(r"<img[^>]*>", re.IGNORECASE)


class FeedParserDict(dict):
    """A dictionary that allows access to its keys as attributes.

    Decoders use it for the schema-shaped intermediate form of a document,
    keyed by the wire format's own field names.
    """

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(
                f"'FeedParserDict' object has no attribute '{name}'"
            )

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value


@dataclass
class Image:
    title: str = ""
    url: str = ""
    height: int = 0
    width: int = 0


@dataclass
class Enclosure:
    url: str = ""
    type: str = ""
    length: int = 0


@dataclass
class Item:
    """One story or entry within a feed."""

    title: str = ""
    summary: str = ""
    content: str = ""
    categories: list[str] = field(default_factory=list)
    link: str = ""
    date: Optional[datetime.datetime] = None
    date_valid: bool = False
    id: str = ""
    enclosures: list[Enclosure] = field(default_factory=list)
    image: Optional[Image] = None
    read: bool = False

    def raw_content(self) -> str:
        """Return the content body with any <img> tags removed."""
        return _RE_IMG_TAG.sub("", self.content)


@dataclass
class Feed:
    """Canonical representation of one syndication source.

    ``known_ids`` holds the identifier of every item ever appended to
    ``items``; ``unread`` counts the items appended since the last
    :meth:`mark_all_read`.
    """

    title: str = ""
    description: str = ""
    link: str = ""
    update_url: str = ""
    image: Optional[Image] = None
    items: list[Item] = field(default_factory=list)
    known_ids: set[str] = field(default_factory=set)
    refresh: Optional[datetime.datetime] = None
    unread: int = 0
    warnings: list[ItemIdentityWarning] = field(
        default_factory=list, compare=False, repr=False
    )

    def is_due(self, now: Optional[datetime.datetime] = None) -> bool:
        """Whether the refresh instant has passed; a naive ``now`` is read as UTC."""
        if self.refresh is None:
            return True
        now = now or datetime.datetime.now(datetime.timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=datetime.timezone.utc)
        return now >= self.refresh

    def mark_all_read(self) -> None:
        for item in self.items:
            item.read = True
        self.unread = 0
