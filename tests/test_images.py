import asyncio
import json

import httpx

from news_enricher.fetchers import fetch_html
from news_enricher.processors.images import ImageExtractor, collect_json_ld_images, find_main_image

BASE = "https://ex.com/a"


def _page(head: str = "", body: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def _ld(data) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


def test_og_image_is_resolved_against_page_url():
    html = _page('<meta property="og:image" content="/img/x.png">')
    assert find_main_image(html, BASE) == "https://ex.com/img/x.png"


def test_meta_tags_follow_priority_order():
    html = _page(
        '<meta name="twitter:image" content="https://ex.com/twitter.jpg">'
        '<meta property="og:image" content="https://ex.com/og.jpg">'
        '<meta property="og:image:secure_url" content="https://ex.com/secure.jpg">'
    )
    assert find_main_image(html, BASE) == "https://ex.com/secure.jpg"


def test_meta_tag_with_empty_content_falls_through():
    html = _page(
        '<meta property="og:image" content="">'
        '<meta name="twitter:image" content="/tw.png">'
    )
    assert find_main_image(html, BASE) == "https://ex.com/tw.png"


def test_meta_beats_structured_data_and_content_images():
    html = _page(
        '<meta property="og:image" content="/og.jpg">' + _ld({"image": "/ld.jpg"}),
        '<article><img src="/inline.jpg"></article>',
    )
    assert find_main_image(html, BASE) == "https://ex.com/og.jpg"


def test_json_ld_image_string():
    html = _page(_ld({"@type": "Article", "image": "https://ex.com/y.jpg"}))
    assert find_main_image(html, BASE) == "https://ex.com/y.jpg"


def test_json_ld_nested_graph_with_image_object():
    data = {"@context": "https://schema.org", "@graph": [{"@type": "WebPage"}, {"@type": "NewsArticle", "image": {"url": "/z.jpg"}}]}
    assert find_main_image(_page(_ld(data)), BASE) == "https://ex.com/z.jpg"


def test_malformed_json_ld_block_is_skipped():
    html = _page(
        '<script type="application/ld+json">{"image": "broken.jpg",</script>'
        + _ld([{"thumbnailUrl": "/thumb.jpg"}])
    )
    assert find_main_image(html, BASE) == "https://ex.com/thumb.jpg"


def test_json_ld_data_uri_candidates_are_skipped():
    html = _page(_ld({"image": ["data:image/png;base64,AAAA", {"url": "/second.jpg"}]}))
    assert find_main_image(html, BASE) == "https://ex.com/second.jpg"


def test_collect_json_ld_images_preserves_discovery_order():
    data = {
        "image": "a.jpg",
        "thumbnailUrl": "t.jpg",
        "child": {"image": ["b.jpg", {"url": "c.jpg"}]},
        "other": [{"image": {"url": "d.jpg"}}],
    }
    assert collect_json_ld_images(data) == ["a.jpg", "t.jpg", "b.jpg", "c.jpg", "d.jpg"]


def test_collect_json_ld_images_caps_depth():
    node = {"image": "deep.jpg"}
    for _ in range(100):
        node = {"child": node}
    assert collect_json_ld_images(node) == []
    assert collect_json_ld_images(node, max_depth=200) == ["deep.jpg"]


def test_collect_json_ld_images_ignores_scalars():
    assert collect_json_ld_images("just a string") == []
    assert collect_json_ld_images(None) == []
    assert collect_json_ld_images([1, 2.5, True]) == []


def test_content_image_prefers_lazy_load_attribute():
    html = _page(body='<article><img src="/placeholder.gif" data-src="/real.jpg"></article>')
    assert find_main_image(html, BASE) == "https://ex.com/real.jpg"


def test_content_image_prefers_srcset_over_src():
    html = _page(body='<article><img src="/small.jpg" srcset="/m.jpg 600w, /l.jpg 1200w"></article>')
    assert find_main_image(html, BASE) == "https://ex.com/l.jpg"


def test_content_container_beats_earlier_page_images():
    html = _page(body='<header><img src="/logo.png"></header><div class="post-content"><img src="/story.jpg"></div>')
    assert find_main_image(html, BASE) == "https://ex.com/story.jpg"


def test_fallback_uses_first_image_with_a_source():
    html = _page(body='<article><img alt="no source"></article><div><img alt="x"><img src="/b.jpg"></div>')
    assert find_main_image(html, BASE) == "https://ex.com/b.jpg"


def test_page_without_any_image_returns_none():
    html = _page("<title>Plain</title>", "<p>Just text.</p>")
    assert find_main_image(html, BASE) is None
    assert find_main_image("", BASE) is None
    assert find_main_image(None, BASE) is None


def test_extractor_fetches_and_extracts(page_client):
    pages = {BASE: _page('<meta property="og:image" content="/img/x.png">')}

    async def run():
        async with page_client(pages) as client:
            return await ImageExtractor(client).extract_main_image(BASE)

    assert asyncio.run(run()) == "https://ex.com/img/x.png"


def test_extractor_is_idempotent(page_client):
    pages = {BASE: _page(body='<article><img src="/photo.jpg"></article>')}

    async def run():
        async with page_client(pages) as client:
            extractor = ImageExtractor(client)
            return [await extractor.extract_main_image(BASE) for _ in range(3)]

    assert asyncio.run(run()) == ["https://ex.com/photo.jpg"] * 3


def test_extractor_absorbs_error_status(page_client):
    pages = {BASE: (500, _page('<meta property="og:image" content="/img/x.png">'))}

    async def run():
        async with page_client(pages) as client:
            return await ImageExtractor(client).extract_main_image(BASE)

    assert asyncio.run(run()) is None


def test_extractor_absorbs_timeouts_and_connection_errors(page_client):
    request = httpx.Request("GET", BASE)
    other = "https://down.example/a"
    pages = {
        BASE: httpx.ReadTimeout("timed out", request=request),
        other: httpx.ConnectError("refused", request=httpx.Request("GET", other)),
    }

    async def run():
        async with page_client(pages) as client:
            extractor = ImageExtractor(client, timeout=0.1)
            return await extractor.extract_main_image(BASE), await extractor.extract_main_image(other)

    assert asyncio.run(run()) == (None, None)


def test_extractor_rejects_non_http_links(page_client):
    async def run():
        async with page_client({}) as client:
            return await ImageExtractor(client).extract_main_image("ftp://ex.com/file")

    assert asyncio.run(run()) is None


def test_extractor_sends_configured_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.headers)
        return httpx.Response(200, html=_page())

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            extractor = ImageExtractor(client, headers={"User-Agent": "TestAgent/1.0"})
            return await extractor.extract_main_image(BASE)

    assert asyncio.run(run()) is None
    assert seen["user-agent"] == "TestAgent/1.0"
    assert "accept-language" in seen


class _TrickleStream(httpx.AsyncByteStream):
    """Body that arrives one byte at a time, each well inside a read timeout."""

    async def __aiter__(self):
        for _ in range(40):
            await asyncio.sleep(0.05)
            yield b"x"


def test_fetch_is_bounded_by_overall_timeout():
    def handler(request):
        return httpx.Response(200, headers={"content-type": "text/html"}, stream=_TrickleStream())

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            loop = asyncio.get_running_loop()
            started = loop.time()
            html = await fetch_html(BASE, client, timeout=0.3)
            return html, loop.time() - started

    html, elapsed = asyncio.run(run())
    assert html is None
    assert elapsed < 1.5
