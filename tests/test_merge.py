import datetime

import pytest

from feedkeeper import (
    IdentityStore,
    RefreshNotReadyError,
    dump_feed,
    load_feed,
    merge,
    parse,
    update,
)

UTC = datetime.timezone.utc
LATER = datetime.timedelta(hours=1)


def test_merge_same_document_twice_is_idempotent(sample_rss_xml):
    held = parse(sample_rss_xml)
    assert held.unread == 2

    fresh = parse(sample_rss_xml)
    merge(held, fresh, now=held.refresh + LATER)
    assert held.unread == 2
    assert [item.id for item in held.items] == ["article-1", "article-2"]


def test_merge_appends_one_new_item(sample_rss_xml, sample_rss_xml_next):
    held = parse(sample_rss_xml)
    before = list(held.items)

    fresh = parse(sample_rss_xml_next)
    result = merge(held, fresh, now=held.refresh + LATER)
    assert result is held
    assert held.unread == 3
    assert held.items[:2] == before
    assert held.items[2].id == "article-3"
    assert "article-3" in held.known_ids
    assert held.refresh == fresh.refresh


def test_merge_replaces_feed_metadata(sample_rss_xml):
    held = parse(sample_rss_xml)
    fresh = parse(sample_rss_xml.replace("Test Feed", "Renamed Feed"))
    merge(held, fresh, now=held.refresh + LATER)
    assert held.title == "Renamed Feed"


def test_merge_before_refresh_is_refused(sample_rss_xml, sample_rss_xml_next):
    held = parse(sample_rss_xml)
    snapshot = dump_feed(held)
    fresh = parse(sample_rss_xml_next)

    with pytest.raises(RefreshNotReadyError) as excinfo:
        merge(held, fresh, now=held.refresh - datetime.timedelta(seconds=1))
    assert excinfo.value.refresh == held.refresh
    assert dump_feed(held) == snapshot


def test_mark_all_read_resets_unread(sample_rss_xml, sample_rss_xml_next):
    held = parse(sample_rss_xml)
    held.mark_all_read()
    assert held.unread == 0
    assert all(item.read for item in held.items)

    merge(held, parse(sample_rss_xml_next), now=held.refresh + LATER)
    assert held.unread == 1
    assert held.items[2].read is False


def test_update_fetches_and_merges(sample_rss_xml, sample_rss_xml_next):
    held = parse(sample_rss_xml, url="https://example.com/rss")
    calls = []

    def fetch():
        calls.append(1)
        return sample_rss_xml_next.encode("utf-8")

    update(held, fetch, now=held.refresh + LATER)
    assert len(calls) == 1
    assert held.unread == 3
    assert held.update_url == "https://example.com/rss"

    with pytest.raises(RefreshNotReadyError):
        update(held, fetch, now=held.refresh - LATER)
    assert len(calls) == 1


def test_update_with_shared_store_skips_delivered_items(sample_rss_xml):
    store = IdentityStore()
    held = parse(sample_rss_xml, store)
    update(held, lambda: sample_rss_xml, store, now=held.refresh + LATER)
    assert held.unread == 2
    assert len(held.items) == 2


def test_fetch_errors_propagate(sample_rss_xml):
    held = parse(sample_rss_xml)

    def fetch():
        raise ConnectionError("offline")

    with pytest.raises(ConnectionError):
        update(held, fetch, now=held.refresh + LATER)
    assert held.unread == 2


def test_state_round_trip(sample_rss_xml, sample_rss_xml_next):
    held = parse(sample_rss_xml)
    held.items[0].read = True
    restored = load_feed(dump_feed(held))
    assert restored == held
    assert restored.refresh == held.refresh

    merge(restored, parse(sample_rss_xml_next), now=restored.refresh + LATER)
    assert restored.unread == 3
    assert [item.id for item in restored.items] == ["article-1", "article-2", "article-3"]


def test_feed_without_refresh_is_always_due(sample_rss_xml, sample_rss_xml_next):
    held = parse(sample_rss_xml)
    held.refresh = None
    assert held.is_due()

    merge(held, parse(sample_rss_xml_next))
    assert held.unread == 3
    assert held.refresh is not None


def test_naive_now_is_read_as_utc(sample_rss_xml):
    held = parse(sample_rss_xml)
    naive = held.refresh.astimezone(UTC).replace(tzinfo=None)
    assert held.is_due(naive + LATER)
    assert not held.is_due(naive - LATER)

    with pytest.raises(RefreshNotReadyError):
        merge(held, parse(sample_rss_xml), now=naive - LATER)
