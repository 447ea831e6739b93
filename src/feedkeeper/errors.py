from __future__ import annotations

import datetime
from typing import Optional


class FeedError(Exception):
    """Base class for errors raised by feedkeeper."""


class StructuralDecodeError(FeedError, ValueError):
    """The document is not well-formed or lacks a required root element."""


class UnsupportedCharsetError(FeedError, LookupError):
    def __init__(self, charset: str):
        super().__init__(f"unsupported charset: {charset!r}")
        self.charset = charset


class RefreshNotReadyError(FeedError):
    """Raised when a feed is updated before its refresh instant.

    Callers should retry later; this is not a fetch failure.
    """

    def __init__(self, refresh: datetime.datetime):
        super().__init__(f"feed is not due for refresh until {refresh.isoformat()}")
        self.refresh = refresh


class TimestampInvalid(FeedError, ValueError):
    def __init__(self, value: str, reason: Optional[str] = None):
        super().__init__(reason or f"unrecognised timestamp: {value!r}")
        self.value = value


class UnknownTimezoneError(TimestampInvalid):
    def __init__(self, value: str, zone: str):
        super().__init__(value, f"unknown timezone {zone!r} in {value!r}")
        self.zone = zone


class ItemIdentityWarning(UserWarning):
    """An item had neither an identifier nor a link and was dropped."""
