from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import feedparser
import requests

from ..models import FeedItem, FeedSource
from ..processors.normalize import build_summary, clean_html_to_text
from ..utils.logging import get_logger

logger = get_logger("enricher.fetchers.rss")

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/123 Safari/537.36"
    )
}


def _parse_datetime(entry: dict) -> Optional[datetime]:
    # feedparser normalizes dates to UTC struct_time in *_parsed
    for key in ("published_parsed", "updated_parsed"):
        tm = entry.get(key)
        if tm:
            try:
                return datetime(*tm[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                return None
    return None


def parse_feed_items(payload: bytes | str, source: FeedSource) -> List[FeedItem]:
    """Turn a raw RSS/Atom document into ``FeedItem`` records, in feed order."""
    parsed = feedparser.parse(payload)
    if getattr(parsed, "bozo", False):
        # bozo is set on recoverable feed errors; entries may still be usable
        logger.debug("Feed 'bozo' flagged for %s: %s", source.url, getattr(parsed, "bozo_exception", None))

    feed_title = (parsed.feed.get("title") or "").strip() if getattr(parsed, "feed", None) else ""
    source_name = feed_title or source.name

    items: List[FeedItem] = []
    for entry in getattr(parsed, "entries", []) or []:
        title = (entry.get("title") or "").strip() or None
        link = (entry.get("link") or "").strip() or None

        content_val = None
        contents = entry.get("content")
        if contents and isinstance(contents, list):
            content_val = contents[0].get("value")

        description = entry.get("summary")
        snippet = clean_html_to_text(description or content_val)
        items.append(
            FeedItem(
                title=title,
                link=link,
                published=_parse_datetime(entry),
                raw_summary=build_summary(snippet, content_val, title),
                source_name=source_name,
            )
        )
    return items


def fetch_rss_entries(source: FeedSource, *, timeout: int = 30) -> List[FeedItem]:
    """Fetch and parse RSS/Atom feed entries.

    The request goes through ``requests`` for consistent timeouts and
    headers; ``feedparser`` handles the feed formats.
    """
    if source.type != "rss":
        raise ValueError("fetch_rss_entries requires a source of type 'rss'")

    logger.debug("Fetching RSS from %s", source.url)
    try:
        resp = requests.get(source.url, headers=_DEFAULT_HEADERS, timeout=timeout)
        if resp.status_code >= 400:
            logger.warning("RSS fetch failed (%s): %s", resp.status_code, source.url)
            resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("RSS request error for %s: %s", source.url, exc)
        raise

    items = parse_feed_items(resp.content, source)
    logger.info("Fetched %d RSS entries from %s", len(items), source.name)
    return items
