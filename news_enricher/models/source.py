from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

SourceType = Literal["rss"]


@dataclass(slots=True)
class FeedSource:
    """Configuration for one RSS/Atom feed."""

    name: str
    url: str
    type: SourceType = "rss"
    max_items: Optional[int] = None
    enabled: bool = True
