"""Main-image extraction for article pages.

Tiers are tried in order and the first hit wins:

1. social-sharing meta tags (Open Graph, Twitter cards)
2. JSON-LD structured data (``image`` / ``thumbnailUrl`` fields)
3. first ``<img>`` inside the article content container
4. first ``<img>`` anywhere in the page carrying ``src`` or ``srcset``
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

import httpx
from bs4 import BeautifulSoup
from bs4.element import Tag

from ..fetchers.http import DEFAULT_TIMEOUT, fetch_html
from ..utils.logging import get_logger
from .urls import resolve_url, select_best_from_srcset

logger = get_logger("enricher.processors.images")

META_IMAGE_KEYS = (
    "og:image:secure_url",
    "og:image:url",
    "og:image",
    "twitter:image",
    "twitter:image:src",
)

CONTENT_CONTAINER_SELECTORS = (
    "article",
    "[itemprop='articleBody']",
    ".article-body",
    ".article-content",
    ".post-content",
    ".entry-content",
    ".post",
    ".content",
)

LAZY_SRC_ATTRS = ("data-src", "data-original", "data-lazy-src")

MAX_JSON_LD_DEPTH = 32


def _meta_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    for key in META_IMAGE_KEYS:
        tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
        if tag is None:
            continue
        resolved = resolve_url(tag.get("content"), base_url)
        if resolved:
            return resolved
    return None


def _image_field_values(value: Any) -> List[Any]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v if isinstance(v, str) else v.get("url") if isinstance(v, dict) else None for v in value]
    if isinstance(value, dict) and value.get("url"):
        return [value["url"]]
    return []


def collect_json_ld_images(data: Any, *, max_depth: int = MAX_JSON_LD_DEPTH) -> List[Any]:
    """Collect ``image`` and ``thumbnailUrl`` values from parsed JSON-LD.

    Walks the tree depth-first with an explicit stack so that discovery
    order matches a recursive pre-order walk. Nodes deeper than
    ``max_depth`` are dropped.
    """
    found: List[Any] = []
    stack = [(data, 0)]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            logger.debug("JSON-LD walk truncated at depth %d", depth)
            continue
        if isinstance(node, list):
            stack.extend((child, depth + 1) for child in reversed(node))
            continue
        if not isinstance(node, dict):
            continue
        if node.get("image"):
            found.extend(_image_field_values(node["image"]))
        thumbnail = node.get("thumbnailUrl")
        if thumbnail:
            found.extend(_image_field_values(thumbnail))
        stack.extend((child, depth + 1) for child in reversed(list(node.values())))
    return found


def _json_ld_blocks(soup: BeautifulSoup) -> Iterable[Any]:
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string if script.string is not None else script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            yield json.loads(raw)
        except ValueError as exc:
            logger.debug("Skipping malformed JSON-LD block: %s", exc)


def _structured_data_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    for block in _json_ld_blocks(soup):
        for candidate in collect_json_ld_images(block):
            resolved = resolve_url(candidate, base_url)
            if resolved:
                return resolved
    return None


def _img_source(img: Tag, base_url: str) -> Optional[str]:
    """Probe one ``<img>``: lazy-load attributes, then srcset, then src."""
    for attr in LAZY_SRC_ATTRS:
        resolved = resolve_url(img.get(attr), base_url)
        if resolved:
            return resolved
    best = select_best_from_srcset(img.get("srcset"), base_url)
    if best:
        return best
    return resolve_url(img.get("src"), base_url)


def _content_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    for selector in CONTENT_CONTAINER_SELECTORS:
        img = soup.select_one(f"{selector} img")
        if img is not None:
            return _img_source(img, base_url)
    return None


def _fallback_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    img = soup.find(lambda tag: tag.name == "img" and (tag.get("src") or tag.get("srcset")))
    if img is None:
        return None
    return _img_source(img, base_url)


_TIERS = (
    ("meta", _meta_image),
    ("json-ld", _structured_data_image),
    ("content", _content_image),
    ("fallback", _fallback_image),
)


def find_main_image(html: Optional[str], base_url: str) -> Optional[str]:
    """Pick the most representative image URL from already fetched HTML."""
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    for tier, probe in _TIERS:
        found = probe(soup, base_url)
        if found:
            logger.debug("Image for %s found via %s tier: %s", base_url, tier, found)
            return found
    return None


class ImageExtractor:
    """Fetch article pages and extract their main image.

    The HTTP client is injected so a single connection pool (and, in
    tests, a mock transport) can be shared across every article.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.client = client
        self.timeout = timeout
        self.headers = headers or {}

    async def extract_main_image(self, article_url: str) -> Optional[str]:
        html = await fetch_html(article_url, self.client, headers=self.headers, timeout=self.timeout)
        if html is None:
            return None
        image = find_main_image(html, article_url)
        if image is None:
            logger.debug("No image found on %s", article_url)
        return image
