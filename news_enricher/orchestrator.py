from __future__ import annotations

import asyncio
import math
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .fetchers import fetch_rss_entries
from .models import ArticleRecord, FeedItem, FeedSource
from .processors.classifiers import ClassificationResult, Classifier
from .processors.images import ImageExtractor
from .processors.normalize import NO_SUMMARY
from .utils.logging import get_logger

logger = get_logger("enricher.orchestrator")

FeedFetcher = Callable[[FeedSource], List[FeedItem]]

DEFAULT_ESTIMATE_SECONDS = 10


def category_distribution(records: Iterable[ArticleRecord]) -> Dict[str, int]:
    return dict(Counter(r.category for r in records))


class Orchestrator:
    """Turn feed items into enriched article records.

    Classifier and image extractor are injected; nothing here keeps
    per-article state, so items of one run are enriched concurrently,
    bounded by ``max_concurrent`` page fetches.
    """

    def __init__(
        self,
        classifier: Classifier,
        image_extractor: ImageExtractor,
        *,
        sources: Sequence[FeedSource] = (),
        max_items_per_source: int | None = 10,
        max_concurrent: int = 8,
        fallback_category: str = "general",
        feed_fetcher: FeedFetcher = fetch_rss_entries,
    ) -> None:
        self.classifier = classifier
        self.image_extractor = image_extractor
        self.sources = [s for s in sources if s.enabled]
        self.max_items_per_source = max_items_per_source
        self.max_concurrent = max(1, max_concurrent)
        self.fallback_category = fallback_category
        self.feed_fetcher = feed_fetcher

    def classify(self, text: str) -> ClassificationResult:
        """Classify text directly; not-trained errors propagate."""
        return self.classifier.classify(text)

    def classifier_stats(self) -> Dict[str, object]:
        return self.classifier.stats()

    def _classify_article(self, title: str, summary: str) -> ClassificationResult:
        try:
            result = self.classifier.classify(f"{title} {summary}")
        except Exception as exc:  # noqa: BLE001 - a classifier fault must not drop the article
            logger.warning("Classification failed for '%s': %s; using '%s'", title, exc, self.fallback_category)
            return ClassificationResult(
                category=self.fallback_category,
                confidence=0.0,
                explanation=f"Classification unavailable: {exc}",
            )
        logger.debug("Classified '%s' as %s (%.2f)", title[:50], result.category, result.confidence)
        return result

    async def _extract_image(self, link: str, semaphore: asyncio.Semaphore) -> Optional[str]:
        try:
            async with semaphore:
                return await self.image_extractor.extract_main_image(link)
        except Exception as exc:  # noqa: BLE001 - a missing image is never fatal
            logger.warning("Image extraction failed for %s: %s", link, exc)
            return None

    async def enrich_item(
        self,
        item: FeedItem,
        *,
        semaphore: Optional[asyncio.Semaphore] = None,
    ) -> Optional[ArticleRecord]:
        """Build one ``ArticleRecord`` for ``item``; None only when it has no link."""
        if not item.link:
            logger.info("Dropping feed item without link: %r", item.title)
            return None

        title = item.title or "Untitled"
        summary = item.raw_summary or item.title or NO_SUMMARY
        image = await self._extract_image(item.link, semaphore or asyncio.Semaphore(1))
        result = self._classify_article(title, summary)

        return ArticleRecord(
            title=title,
            link=item.link,
            published=item.published or datetime.now(timezone.utc),
            summary=summary,
            source_name=item.source_name or "Unknown source",
            image=image,
            category=result.category,
            confidence=result.confidence,
            explanation=result.explanation,
            classifier_scores=dict(result.scores),
        )

    async def enrich_items(
        self,
        items: Iterable[FeedItem],
        *,
        semaphore: Optional[asyncio.Semaphore] = None,
    ) -> List[ArticleRecord]:
        """Enrich items concurrently; output keeps input order."""
        semaphore = semaphore or asyncio.Semaphore(self.max_concurrent)
        records = await asyncio.gather(*(self.enrich_item(i, semaphore=semaphore) for i in items))
        return [r for r in records if r is not None]

    def _limit_for(self, source: FeedSource) -> Optional[int]:
        if source.max_items is not None:
            return source.max_items
        return self.max_items_per_source

    async def fetch_source(
        self,
        source: FeedSource,
        *,
        semaphore: Optional[asyncio.Semaphore] = None,
    ) -> List[ArticleRecord]:
        """Fetch and enrich one feed; a failing feed yields an empty list."""
        try:
            items = await asyncio.to_thread(self.feed_fetcher, source)
        except Exception as exc:  # noqa: BLE001 - one bad feed must not sink the run
            logger.warning("Failed to fetch feed %s (%s): %s", source.name, source.url, exc)
            return []

        limit = self._limit_for(source)
        if limit is not None and limit >= 0:
            items = items[:limit]
        records = await self.enrich_items(items, semaphore=semaphore)
        logger.info("Enriched %d articles from %s", len(records), source.name)
        return records

    async def list_articles(self, *, category: Optional[str] = None) -> List[ArticleRecord]:
        """Aggregate every configured feed, newest first.

        Articles with equal publish dates keep feed order.
        """
        if not self.sources:
            logger.warning("No enabled feed sources configured")
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent)
        per_source = await asyncio.gather(*(self.fetch_source(s, semaphore=semaphore) for s in self.sources))
        records = [r for batch in per_source for r in batch]
        records.sort(key=lambda r: r.published, reverse=True)

        distribution = category_distribution(records)
        logger.info(
            "Aggregated %d articles from %d feeds; categories: %s",
            len(records),
            len(self.sources),
            ", ".join(f"{c}={n}" for c, n in sorted(distribution.items())) or "none",
        )

        if category is not None:
            records = [r for r in records if r.category == category]
        return records

    async def estimate_seconds(self) -> int:
        """Rough duration of a full ``list_articles`` run.

        Times one fetch of the first feed and scales by the feed count,
        doubled to cover enrichment, which can round to 0 for an instant
        probe. Falls back to a fixed guess.
        """
        if not self.sources:
            return DEFAULT_ESTIMATE_SECONDS
        t0 = time.perf_counter()
        try:
            await asyncio.to_thread(self.feed_fetcher, self.sources[0])
        except Exception as exc:  # noqa: BLE001
            logger.info("Estimate probe failed for %s: %s", self.sources[0].url, exc)
            return DEFAULT_ESTIMATE_SECONDS
        elapsed = time.perf_counter() - t0
        return math.ceil(elapsed * len(self.sources) * 2)
