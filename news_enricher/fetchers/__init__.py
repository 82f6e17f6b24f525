"""Content fetching layer: RSS feeds and article pages."""

from .rss import fetch_rss_entries, parse_feed_items
from .http import fetch_html

__all__ = ["fetch_rss_entries", "parse_feed_items", "fetch_html"]
