"""Charset normalization for XML documents.

Every reader returned by :func:`charset_reader` yields UTF-8 bytes, whatever
the declared encoding of the underlying stream. Readers are pulled lazily by
lxml, a chunk or a single byte at a time.
"""

from __future__ import annotations

import codecs
from typing import BinaryIO, Optional, Union

from .errors import UnsupportedCharsetError

# http://www.iana.org/assignments/character-sets
_UTF8_NAMES = frozenset({"", "utf-8"})
_ISO_8859_1_NAMES = frozenset(
    name.lower()
    for name in (
        "ISO_8859-1:1987",
        "ISO-8859-1",
        "iso-ir-100",
        "ISO_8859-1",
        "latin1",
        "l1",
        "IBM819",
        "CP819",
        "csISOLatin1",
    )
)

_READ_CHUNK = 4096


def is_charset_utf8(charset: str) -> bool:
    return charset.strip().lower() in _UTF8_NAMES


def is_charset_iso_8859_1(charset: str) -> bool:
    return charset.strip().lower() in _ISO_8859_1_NAMES


class Latin1Reader:
    """Transcode ISO-8859-1 to UTF-8, one source byte at a time.

    Bytes below 0x80 pass through unchanged; higher bytes are the Unicode
    code point of the same value and expand to two UTF-8 bytes.
    """

    def __init__(self, raw: BinaryIO):
        self._raw = raw
        self._pending = bytearray()

    def read_byte(self) -> Optional[int]:
        if not self._pending:
            b = self._raw.read(1)
            if not b:
                return None
            if b[0] < 0x80:
                return b[0]
            self._pending.extend(chr(b[0]).encode("utf-8"))
        return self._pending.pop(0)

    def read(self, size: int = -1) -> bytes:
        out = bytearray()
        while size is None or size < 0 or len(out) < size:
            b = self.read_byte()
            if b is None:
                break
            out.append(b)
        return bytes(out)


class CodecReader:
    """Transcode any text codec known to Python to UTF-8."""

    def __init__(self, raw: BinaryIO, encoding: str):
        self._raw = raw
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = bytearray()
        self._eof = False

    def _fill(self, size: int) -> None:
        while not self._eof and (size < 0 or len(self._buffer) < size):
            chunk = self._raw.read(_READ_CHUNK)
            self._eof = not chunk
            self._buffer.extend(self._decoder.decode(chunk, self._eof).encode("utf-8"))

    def read(self, size: int = -1) -> bytes:
        if size is None:
            size = -1
        self._fill(size)
        if size < 0:
            size = len(self._buffer)
        out = bytes(self._buffer[:size])
        del self._buffer[:size]
        return out

    def read_byte(self) -> Optional[int]:
        b = self.read(1)
        return b[0] if b else None


def _lookup_text_codec(charset: str) -> Optional[str]:
    try:
        info = codecs.lookup(charset)
    except LookupError:
        return None
    # bytes-to-bytes and str-to-str codecs (base64, rot13, ...) share the
    # registry; only keep codecs that turn bytes into text.
    try:
        probe = info.incrementaldecoder().decode(b"", True)
    except (TypeError, AttributeError):
        return None
    if not isinstance(probe, str):
        return None
    return info.name


def charset_reader(
    charset: str, stream: BinaryIO
) -> Union[BinaryIO, Latin1Reader, CodecReader]:
    """Wrap ``stream`` so that reading from it yields UTF-8.

    Raises:
        UnsupportedCharsetError: if ``charset`` names no known text encoding
    """
    if is_charset_utf8(charset):
        return stream
    if is_charset_iso_8859_1(charset):
        return Latin1Reader(stream)
    encoding = _lookup_text_codec(charset.strip())
    if encoding is None:
        raise UnsupportedCharsetError(charset)
    return CodecReader(stream, encoding)
