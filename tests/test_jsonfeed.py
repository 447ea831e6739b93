import datetime

import pytest

from feedkeeper import FeedFormat, IdentityStore, StructuralDecodeError, decode, parse

UTC = datetime.timezone.utc


def test_parse_json_feed(sample_json_feed):
    feed = parse(sample_json_feed)
    assert feed.title == "JSON Feed"
    assert feed.description == "A test JSON feed"
    assert feed.link == "https://example.com/"
    assert feed.update_url == "https://example.com/feed.json"
    assert feed.image.url == "https://example.com/icon.png"

    item = feed.items[0]
    assert item.id == "1"
    assert item.link == "https://example.com/json-1"
    assert item.content == "<p>Hello <b>world</b></p>"
    assert item.summary == "Hello world"
    assert item.categories == ["a", "b"]
    assert item.image.url == "https://example.com/json-1.png"
    # date_modified wins over date_published
    assert item.date == datetime.datetime(2026, 2, 13, 9, 0, tzinfo=UTC)
    assert item.enclosures[0].url == "https://example.com/json-1.mp3"
    assert item.enclosures[0].type == "audio/mpeg"
    assert item.enclosures[0].length == 42


def test_json_feed_without_version_but_with_items():
    data = b'{"title": "bare", "items": [{"url": "https://example.com/x", "content_text": "plain"}]}'
    feed = decode(data, FeedFormat.JSON_FEED, IdentityStore())
    assert feed.items[0].id == "https://example.com/x"
    assert feed.items[0].content == "plain"
    assert feed.items[0].summary == "plain"


def test_json_feed_numeric_ids_and_empty_items():
    data = b'{"version": "https://jsonfeed.org/version/1", "items": [{"id": 7}, {"id": 7}]}'
    feed = parse(data)
    assert [item.id for item in feed.items] == ["7"]

    empty = parse(b'{"version": "https://jsonfeed.org/version/1", "items": []}')
    assert empty.items == []
    assert empty.unread == 0


def test_json_item_without_identity_is_dropped():
    data = b'{"version": "https://jsonfeed.org/version/1.1", "items": [{"title": "orphan"}]}'
    feed = parse(data)
    assert feed.items == []
    assert len(feed.warnings) == 1


@pytest.mark.parametrize(
    "data",
    [
        b'{"version": "https://jsonfeed.org/version/1"}',
        b'{"title": "no version, no items"}',
        b'{"items": [}',
        b"[]",
    ],
)
def test_json_structural_errors(data):
    with pytest.raises(StructuralDecodeError):
        decode(data, FeedFormat.JSON_FEED, IdentityStore())
