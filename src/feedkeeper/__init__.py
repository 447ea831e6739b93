from .charset import charset_reader
from .detect import FeedFormat, detect_format
from .errors import (
    FeedError,
    ItemIdentityWarning,
    RefreshNotReadyError,
    StructuralDecodeError,
    TimestampInvalid,
    UnknownTimezoneError,
    UnsupportedCharsetError,
)
from .main import decode, fetch_feed, parse
from .merge import merge, update
from .models import Enclosure, Feed, Image, Item
from .state import dump_feed, load_feed
from .store import IdentityStore, cache_parsed_item_ids, shared_store
from .timeparse import ParsedTime, parse_time

__all__ = [
    "Enclosure",
    "Feed",
    "FeedError",
    "FeedFormat",
    "IdentityStore",
    "Image",
    "Item",
    "ItemIdentityWarning",
    "ParsedTime",
    "RefreshNotReadyError",
    "StructuralDecodeError",
    "TimestampInvalid",
    "UnknownTimezoneError",
    "UnsupportedCharsetError",
    "cache_parsed_item_ids",
    "charset_reader",
    "decode",
    "detect_format",
    "dump_feed",
    "fetch_feed",
    "load_feed",
    "merge",
    "parse",
    "parse_time",
    "shared_store",
    "update",
]
