from __future__ import annotations

import io
import re
from typing import TYPE_CHECKING, Optional

from lxml import etree

from .charset import charset_reader
from .errors import StructuralDecodeError

if TYPE_CHECKING:
    from lxml.etree import _Element

_RE_XML_DECL_ENCODING = re.compile(
    r'(<\?xml[^>]*encoding=["\'])([^"\']+)(["\'][^>]*\?>)', re.IGNORECASE
)
_RE_XML_DECL_ENCODING_BYTES = re.compile(
    rb'(<\?xml[^>]*encoding=["\'])([^"\']+)(["\'][^>]*\?>)', re.IGNORECASE
)

_XML_START_PATTERNS = (b"<?xml", b"<rss", b"<feed", b"<rdf:rdf", b"<?xml-stylesheet")
_DECLARATION_WINDOW = 2000

_NON_FEED_MESSAGES: dict[str, str] = {
    "html": "Received HTML page instead of feed",
    "body": "Received HTML fragment instead of feed",
    "opml": "Received OPML document instead of feed",
    "urlset": "Received XML sitemap instead of feed",
    "sitemapindex": "Received XML sitemap instead of feed",
    "error": "Feed server returned error",
}

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"


def declared_charset(content: bytes) -> str:
    """Return the charset named by the BOM or XML declaration, or ''."""
    if content.startswith((b"\xff\xfe", b"\xfe\xff")):
        return "utf-16"
    if content.startswith(b"\xef\xbb\xbf"):
        return "utf-8"

    match = _RE_XML_DECL_ENCODING_BYTES.search(content[:2000])
    if match is None:
        return ""
    charset = match.group(2).decode("ascii", errors="replace").strip()
    # Some servers declare utf-16 over a document that is plainly 8-bit.
    if charset.lower().startswith("utf-16") and b"\x00" not in content[:200]:
        return "utf-8"
    return charset


def ensure_utf8_declaration(content: str) -> str:
    """Make the XML declaration of a decoded document claim UTF-8."""
    if not content.lstrip().startswith("<?xml"):
        return content
    return _RE_XML_DECL_ENCODING.sub(r"\1utf-8\3", content, count=1)


def clean_feed_bytes(content: bytes) -> bytes:
    """Strip leading whitespace and junk before the XML document."""
    stripped = content.lstrip()
    preview = stripped[:2000].lower()

    if preview.startswith(b"\xef\xbb\xbf"):
        preview = preview[3:]
        stripped = stripped[3:]

    if preview.startswith((b"<?xml", b"<rss", b"<feed", b"<rdf")):
        return stripped
    if preview.startswith((b"<!doctype html", b"<html")):
        raise StructuralDecodeError("Content appears to be HTML, not a feed")

    search_chunk = content[:8192].lower()
    earliest = -1
    for pattern in _XML_START_PATTERNS:
        idx = search_chunk.find(pattern)
        if idx != -1 and (earliest == -1 or idx < earliest):
            earliest = idx
    if earliest != -1:
        return content[earliest:]
    return stripped


class _Utf8Declared:
    """Rewrite the declaration at the head of a UTF-8 stream to say UTF-8."""

    def __init__(self, reader):
        self._reader = reader
        self._head: Optional[bytes] = None

    def read(self, size: int = -1) -> bytes:
        if self._head is None:
            head = self._reader.read(_DECLARATION_WINDOW)
            self._head = _RE_XML_DECL_ENCODING_BYTES.sub(rb"\1utf-8\3", head, count=1)
        if not self._head:
            return self._reader.read(size)
        if size is None or size < 0:
            out = self._head + self._reader.read()
            self._head = b""
            return out
        out, self._head = self._head[:size], self._head[size:]
        return out


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(
        encoding="utf-8",
        ns_clean=True,
        recover=False,
        collect_ids=False,
        resolve_entities=False,
        no_network=True,
    )


def parse_xml_root(content: bytes) -> _Element:
    """Parse an XML document through the charset hook.

    Raises:
        StructuralDecodeError: if the document is empty or not well-formed
        UnsupportedCharsetError: if the declared charset is unknown
    """
    content = clean_feed_bytes(content)
    if not content.strip():
        raise StructuralDecodeError("Empty content")

    reader = charset_reader(declared_charset(content), io.BytesIO(content))
    try:
        tree = etree.parse(_Utf8Declared(reader), parser=_xml_parser())
    except etree.XMLSyntaxError as e:
        raise StructuralDecodeError(f"Failed to parse XML content: {e}") from e

    root = tree.getroot()
    if root is None:
        raise StructuralDecodeError("Failed to parse XML: no root element")
    return root


def local_name(tag: object) -> str:
    """Tag name without its namespace; '' for comments and PIs."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def namespace(tag: str) -> Optional[str]:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def text_of(el: Optional[_Element]) -> str:
    if el is None or not el.text:
        return ""
    return el.text.strip()


def attr_local(el: _Element, name: str) -> Optional[str]:
    """Attribute value matched by local name, in any namespace."""
    value = el.get(name)
    if value is not None:
        return value.strip()
    for key, value in el.attrib.items():
        if local_name(key) == name:
            return value.strip()
    return None


def coerce_int(value: Optional[str]) -> int:
    if not value:
        return 0
    try:
        return int(value.strip())
    except (ValueError, TypeError):
        return 0


def inner_xml(el: _Element) -> str:
    """Serialize the children of ``el`` (for Atom xhtml content)."""
    parts = [el.text or ""]
    for child in el:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts).strip()


def raise_for_non_feed_root(root: _Element) -> None:
    message = _NON_FEED_MESSAGES.get(local_name(root.tag).lower())
    if message is not None:
        raise StructuralDecodeError(message)
