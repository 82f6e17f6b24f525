from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True, slots=True)
class FeedItem:
    """One feed entry as handed over by the feed fetcher, before enrichment."""

    title: Optional[str]
    link: Optional[str]
    published: Optional[datetime] = None
    raw_summary: Optional[str] = None
    source_name: Optional[str] = None


@dataclass(slots=True)
class ImageCandidate:
    href: str
    width: int = 0


@dataclass(slots=True)
class ArticleRecord:
    title: str
    link: str
    published: datetime
    summary: str
    source_name: str
    image: Optional[str] = None

    # Classifier-derived fields
    category: str = "general"
    confidence: float = 0.0
    explanation: str = ""
    classifier_scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready mapping with the camelCase keys the web client reads."""
        return {
            "title": self.title,
            "link": self.link,
            "pubDate": self.published.isoformat(),
            "summary": self.summary,
            "source": self.source_name,
            "image": self.image,
            "category": self.category,
            "confidence": self.confidence,
            "aiReasoning": self.explanation,
            "scores": dict(self.classifier_scores),
        }
