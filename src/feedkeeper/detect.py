from __future__ import annotations

import enum
import re

_RE_RSS1_NAMESPACE = re.compile(rb"""=\s*["']http://purl\.org/rss/1\.0/["']""")

# JSON documents are only recognised by their first bytes.
_SNIFF_PREFIX = 64


class FeedFormat(enum.Enum):
    RSS2 = "rss2"  # also RSS 0.91/0.92
    RSS1 = "rss1"
    ATOM = "atom"
    JSON_FEED = "jsonfeed"


def _looks_like_json(data: bytes) -> bool:
    head = data[:_SNIFF_PREFIX].lstrip()
    if head.startswith(b"\xef\xbb\xbf"):
        head = head[3:].lstrip()
    return head.startswith(b"{")


def detect_format(data: bytes) -> FeedFormat:
    """Pick a decoder by sniffing the raw bytes; no parsing is done.

    Anything unrecognised is routed to the Atom decoder, which reports
    documents that are not Atom either.
    """
    if _looks_like_json(data):
        return FeedFormat.JSON_FEED
    if b"<rss" in data:
        return FeedFormat.RSS2
    if _RE_RSS1_NAMESPACE.search(data):
        return FeedFormat.RSS1
    return FeedFormat.ATOM
