from __future__ import annotations

from typing import Callable, Dict, Tuple, Union

import httpx
import pytest

Page = Union[str, Tuple[int, str]]


@pytest.fixture
def page_client() -> Callable[[Dict[str, Page]], httpx.AsyncClient]:
    """Build an AsyncClient that serves canned pages and 404s everything else.

    A page value may be an exception instance, which is raised for that URL.
    """

    def factory(pages: Dict[str, object]) -> httpx.AsyncClient:
        def handler(request: httpx.Request) -> httpx.Response:
            page = pages.get(str(request.url))
            if page is None:
                return httpx.Response(404, text="not found")
            if isinstance(page, Exception):
                raise page
            if isinstance(page, tuple):
                status, body = page
                return httpx.Response(status, html=body)
            return httpx.Response(200, html=page)

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
