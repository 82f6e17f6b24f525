from __future__ import annotations

import asyncio
from typing import Dict, Optional
from urllib.parse import urlparse

import httpx

from ..utils.logging import get_logger

logger = get_logger("enricher.fetchers.http")

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/123 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
}

DEFAULT_TIMEOUT = 5.0


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


async def fetch_html(
    url: str,
    client: httpx.AsyncClient,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Optional[str]:
    """Fetch a page and return its HTML text, or None on any failure.

    Non-2xx statuses, timeouts and connection errors are logged and
    reported as None; nothing is raised to the caller.
    """
    if not url or not _is_http_url(url):
        logger.debug("Skipping fetch of non-http URL: %r", url)
        return None

    merged = {**DEFAULT_HEADERS, **(headers or {})}
    try:
        # httpx times each connect/read separately; wait_for caps the whole transfer
        resp = await asyncio.wait_for(
            client.get(url, headers=merged, timeout=timeout, follow_redirects=True),
            timeout,
        )
    except (httpx.TimeoutException, asyncio.TimeoutError):
        logger.info("Page fetch timed out after %.1fs: %s", timeout, url)
        return None
    except httpx.HTTPError as exc:
        logger.info("Page fetch failed for %s: %s", url, exc)
        return None

    if not resp.is_success:
        logger.info("Page fetch returned HTTP %s: %s", resp.status_code, url)
        return None

    try:
        return resp.text
    except (UnicodeDecodeError, LookupError) as exc:
        logger.info("Undecodable page body for %s: %s", url, exc)
        return None
