from datetime import datetime, timezone

import pytest
import requests

from news_enricher.fetchers import rss
from news_enricher.models import FeedSource

FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example News</title>
    <link>https://ex.com/</link>
    <description>Example</description>
    <item>
      <title>Markets close higher</title>
      <link>https://ex.com/markets</link>
      <description>&lt;p&gt;Hello &lt;b&gt;world&lt;/b&gt;&lt;/p&gt;</description>
      <pubDate>Mon, 06 Sep 2021 16:45:00 GMT</pubDate>
    </item>
    <item>
      <title>Title only</title>
      <link>https://ex.com/title-only</link>
    </item>
    <item>
      <title>No link here</title>
      <description>Orphan</description>
    </item>
  </channel>
</rss>
"""

SOURCE = FeedSource(name="Configured name", url="https://ex.com/feed.xml")


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_parse_feed_items_in_feed_order():
    items = rss.parse_feed_items(FEED, SOURCE)
    assert [i.title for i in items] == ["Markets close higher", "Title only", "No link here"]

    first = items[0]
    assert first.link == "https://ex.com/markets"
    assert first.raw_summary == "Hello world"
    assert first.published == datetime(2021, 9, 6, 16, 45, tzinfo=timezone.utc)
    assert first.source_name == "Example News"


def test_summary_falls_back_to_title_and_date_may_be_missing():
    items = rss.parse_feed_items(FEED, SOURCE)
    assert items[1].raw_summary == "Title only"
    assert items[1].published is None
    assert items[2].link is None


def test_source_name_falls_back_to_configured_name():
    feed = b"<rss version='2.0'><channel><item><title>A</title><link>https://ex.com/a</link></item></channel></rss>"
    items = rss.parse_feed_items(feed, SOURCE)
    assert items[0].source_name == "Configured name"


def test_fetch_rss_entries_uses_requests(monkeypatch):
    calls = {}

    def fake_get(url, headers=None, timeout=None):
        calls.update(url=url, headers=headers, timeout=timeout)
        return FakeResponse(200, FEED)

    monkeypatch.setattr(rss.requests, "get", fake_get)
    items = rss.fetch_rss_entries(SOURCE, timeout=7)
    assert len(items) == 3
    assert calls["url"] == SOURCE.url
    assert calls["timeout"] == 7
    assert "Mozilla" in calls["headers"]["User-Agent"]


def test_fetch_rss_entries_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(rss.requests, "get", lambda *a, **k: FakeResponse(503))
    with pytest.raises(requests.HTTPError):
        rss.fetch_rss_entries(SOURCE)


def test_fetch_rss_entries_rejects_other_source_types():
    with pytest.raises(ValueError):
        rss.fetch_rss_entries(FeedSource(name="x", url="https://ex.com", type="http"))
