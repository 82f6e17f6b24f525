"""URL helpers for image extraction: absolutize references, pick from srcset."""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from ..models import ImageCandidate

_width_re = re.compile(r"^(\d+)w$", re.IGNORECASE)

# Reserved characters and "%" stay as they are, so existing escapes survive
_PATH_SAFE = "/%:@!$&'()*+,;="
_QUERY_SAFE = _PATH_SAFE + "?"


def resolve_url(reference: Optional[str], base_url: str) -> Optional[str]:
    """Return ``reference`` as an absolute URL against ``base_url``, or None.

    Empty references and ``data:`` payloads yield None, as does anything
    that does not compose into a URL with both scheme and host.
    Characters not allowed in a URL (spaces, non-ASCII) are percent-encoded.
    """
    if not reference or not isinstance(reference, str):
        return None
    reference = reference.strip()
    if not reference or reference[:5].lower() == "data:":
        return None
    try:
        resolved = urljoin(base_url or "", reference)
        parts = urlsplit(resolved)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return urlunsplit(
        (
            parts.scheme,
            parts.netloc,
            quote(parts.path, safe=_PATH_SAFE),
            quote(parts.query, safe=_QUERY_SAFE),
            quote(parts.fragment, safe=_QUERY_SAFE),
        )
    )


def parse_srcset(srcset: Optional[str], base_url: str) -> List[ImageCandidate]:
    candidates: List[ImageCandidate] = []
    if not srcset:
        return candidates
    for part in srcset.split(","):
        tokens = part.split()
        if not tokens:
            continue
        href = resolve_url(tokens[0], base_url)
        if href is None:
            continue
        width = 0
        if len(tokens) > 1:
            match = _width_re.match(tokens[1])
            if match:
                width = int(match.group(1))
        candidates.append(ImageCandidate(href=href, width=width))
    return candidates


def select_best_from_srcset(srcset: Optional[str], base_url: str) -> Optional[str]:
    """Return the widest rendition listed in a ``srcset`` attribute.

    Descriptors other than ``<n>w`` count as width 0. ``sorted`` is stable,
    so equal widths keep their listed order.
    """
    candidates = sorted(parse_srcset(srcset, base_url), key=lambda c: c.width, reverse=True)
    return candidates[0].href if candidates else None
