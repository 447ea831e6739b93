"""Shared test fixtures for feedkeeper tests."""

import pytest

from feedkeeper import IdentityStore, config


SAMPLE_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <atom:link href="https://example.com/feed.xml" rel="self" type="application/rss+xml"/>
    <description>A test RSS feed</description>
    <item>
      <title>First Article</title>
      <link>https://example.com/article-1</link>
      <guid>article-1</guid>
      <description>Description of the first article</description>
      <pubDate>Fri, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <guid>article-2</guid>
      <description>Description of the second article</description>
      <pubDate>Fri, 13 Feb 2026 09:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""

# SAMPLE_RSS_XML plus one new item at the end.
SAMPLE_RSS_XML_NEXT = SAMPLE_RSS_XML.replace(
    "  </channel>",
    """    <item>
      <title>Third Article</title>
      <link>https://example.com/article-3</link>
      <guid>article-3</guid>
      <pubDate>Sat, 14 Feb 2026 08:00:00 GMT</pubDate>
    </item>
  </channel>""",
)

SAMPLE_RSS1_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/"
         xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel rdf:about="https://example.com/rss">
    <title>RDF Feed</title>
    <link>https://example.com</link>
    <description>An RSS 1.0 feed</description>
    <image rdf:resource="https://example.com/logo.png"/>
  </channel>
  <image rdf:about="https://example.com/logo.png">
    <title>RDF Logo</title>
    <url>https://example.com/logo.png</url>
    <link>https://example.com</link>
  </image>
  <item rdf:about="https://example.com/rdf-1">
    <title>RDF Item</title>
    <link>https://example.com/rdf-1</link>
    <description>RDF description</description>
    <dc:date>2026-02-13T10:00:00Z</dc:date>
  </item>
</rdf:RDF>"""

SAMPLE_ATOM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test Atom Feed</title>
  <link href="https://example.com"/>
  <link rel="self" href="https://example.com/atom.xml"/>
  <subtitle>A test Atom feed</subtitle>
  <logo>https://example.com/logo.png</logo>
  <entry>
    <title>Atom Entry 1</title>
    <link href="https://example.com/entry-1"/>
    <link rel="enclosure" href="https://example.com/ep1.mp3" type="audio/mpeg" length="1234"/>
    <id>urn:uuid:entry-1</id>
    <summary>Summary of entry 1</summary>
    <category term="news"/>
    <published>2026-02-12T10:00:00Z</published>
    <updated>2026-02-13T10:00:00Z</updated>
  </entry>
</feed>"""

SAMPLE_JSON_FEED = """{
  "version": "https://jsonfeed.org/version/1.1",
  "title": "JSON Feed",
  "home_page_url": "https://example.com/",
  "feed_url": "https://example.com/feed.json",
  "description": "A test JSON feed",
  "icon": "https://example.com/icon.png",
  "items": [
    {
      "id": "1",
      "url": "https://example.com/json-1",
      "title": "JSON Item",
      "content_html": "<p>Hello <b>world</b></p>",
      "date_published": "2026-02-12T10:00:00Z",
      "date_modified": "2026-02-13T10:00:00+01:00",
      "tags": ["a", "b"],
      "image": "https://example.com/json-1.png",
      "attachments": [
        {"url": "https://example.com/json-1.mp3", "mime_type": "audio/mpeg", "size_in_bytes": 42}
      ]
    }
  ]
}"""

SAMPLE_NOT_A_FEED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<html>
  <body>This is not a feed</body>
</html>"""


@pytest.fixture(autouse=True)
def _cache_item_ids():
    """Every test starts with identifier caching enabled."""
    config.CACHE_ITEM_IDS = True
    yield
    config.CACHE_ITEM_IDS = True


@pytest.fixture
def store():
    return IdentityStore()


@pytest.fixture
def sample_rss_xml():
    """Sample valid RSS 2.0 XML."""
    return SAMPLE_RSS_XML


@pytest.fixture
def sample_rss_xml_next():
    """The RSS 2.0 sample after one more item was published."""
    return SAMPLE_RSS_XML_NEXT


@pytest.fixture
def sample_rss1_xml():
    return SAMPLE_RSS1_XML


@pytest.fixture
def sample_atom_xml():
    """Sample valid Atom XML."""
    return SAMPLE_ATOM_XML


@pytest.fixture
def sample_json_feed():
    return SAMPLE_JSON_FEED


@pytest.fixture
def sample_not_a_feed_xml():
    """Sample XML that is not a feed."""
    return SAMPLE_NOT_A_FEED_XML
