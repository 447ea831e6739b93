import datetime

import pytest

from feedkeeper import StructuralDecodeError, parse

UTC = datetime.timezone.utc


def test_parse_atom_feed(sample_atom_xml):
    feed = parse(sample_atom_xml)
    assert feed.title == "Test Atom Feed"
    assert feed.description == "A test Atom feed"
    assert feed.link == "https://example.com"
    assert feed.update_url == "https://example.com/atom.xml"
    assert feed.image.url == "https://example.com/logo.png"
    assert feed.unread == 1

    entry = feed.items[0]
    assert entry.id == "urn:uuid:entry-1"
    assert entry.link == "https://example.com/entry-1"
    assert entry.summary == "Summary of entry 1"
    assert entry.categories == ["news"]
    # updated wins over published
    assert entry.date == datetime.datetime(2026, 2, 13, 10, 0, tzinfo=UTC)
    assert entry.date_valid
    assert len(entry.enclosures) == 1
    assert entry.enclosures[0].url == "https://example.com/ep1.mp3"
    assert entry.enclosures[0].type == "audio/mpeg"
    assert entry.enclosures[0].length == 1234


def test_atom_xhtml_content():
    xml = """<feed xmlns="http://www.w3.org/2005/Atom"><title>t</title>
      <entry>
        <id>tag:example.com,2024:1</id>
        <content type="xhtml"><div xmlns="http://www.w3.org/1999/xhtml"><p>Hi</p></div></content>
      </entry>
    </feed>"""
    entry = parse(xml).items[0]
    assert "<p>Hi</p>" in entry.content
    assert entry.summary == "Hi"


def test_atom_entry_without_id_uses_alternate_link():
    xml = """<feed xmlns="http://www.w3.org/2005/Atom"><title>t</title>
      <entry>
        <link rel="replies" href="https://example.com/comments"/>
        <link rel="alternate" href="https://example.com/post"/>
        <published>2024-01-01T00:00:00+02:00</published>
      </entry>
    </feed>"""
    entry = parse(xml).items[0]
    assert entry.id == "https://example.com/post"
    assert entry.date == datetime.datetime(2023, 12, 31, 22, 0, tzinfo=UTC)


def test_atom_03_feed():
    xml = """<?xml version="1.0"?>
<feed version="0.3" xmlns="http://purl.org/atom/ns#">
  <title>Old Atom</title>
  <tagline>Still around</tagline>
  <entry>
    <id>old-1</id>
    <modified>2004-06-01T12:00:00Z</modified>
  </entry>
</feed>"""
    feed = parse(xml)
    assert feed.description == "Still around"
    assert feed.items[0].date == datetime.datetime(2004, 6, 1, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "xml",
    [
        '<feed xmlns="http://www.w3.org/2005/Atom"><title>t</title></feed>',
        "<feed><entry><id>1</id></entry></feed>",
        '<?xml version="1.0"?><opml version="2.0"><body/></opml>',
        "not xml at all",
    ],
)
def test_atom_structural_errors(xml):
    with pytest.raises(StructuralDecodeError):
        parse(xml)


def test_non_feed_root_is_reported(sample_not_a_feed_xml):
    with pytest.raises(StructuralDecodeError, match="HTML"):
        parse(sample_not_a_feed_xml)
