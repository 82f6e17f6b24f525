from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

_DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123 Safari/537.36"


@dataclass(slots=True)
class EnrichmentConfig:
    """Runtime knobs for fetching and enrichment, read from the environment."""

    max_items_per_feed: int = field(default_factory=lambda: int(os.getenv("ENRICH_MAX_ITEMS_PER_FEED", "10")))
    image_timeout_ms: int = field(default_factory=lambda: int(os.getenv("ENRICH_IMAGE_TIMEOUT_MS", "5000")))
    max_concurrent_fetches: int = field(default_factory=lambda: int(os.getenv("ENRICH_MAX_CONCURRENT_FETCHES", "8")))
    user_agent: str = field(default_factory=lambda: os.getenv("ENRICH_USER_AGENT", _DEFAULT_USER_AGENT))
    accept_language: str = field(
        default_factory=lambda: os.getenv("ENRICH_ACCEPT_LANGUAGE", "fr-FR,fr;q=0.9,en;q=0.8")
    )
    classifier_backend: str = field(default_factory=lambda: os.getenv("CLASSIFIER_BACKEND", "keyword"))
    training_csv: Optional[str] = field(default_factory=lambda: os.getenv("CLASSIFIER_TRAINING_CSV") or None)
    fallback_category: str = field(default_factory=lambda: os.getenv("CLASSIFIER_FALLBACK_CATEGORY", "general"))

    @property
    def image_timeout(self) -> float:
        return self.image_timeout_ms / 1000.0

    @property
    def page_headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept-Language": self.accept_language}
