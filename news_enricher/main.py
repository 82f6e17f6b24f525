"""Application entrypoint for the news enricher.

High-level flow:
1) load configuration and build the classifier
2) fetch every feed and enrich its items (image + topic)
3) print the aggregated list, or serve it over HTTP
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import httpx
from dotenv import load_dotenv

from .models import ArticleRecord
from .orchestrator import Orchestrator
from .processors.classifiers import Classifier, ClassifierError, create_classifier
from .processors.images import ImageExtractor
from .utils.config_loader import ConfigError, SourcesConfig, load_sources_config
from .utils.logging import configure_logging, get_logger
from .utils.pipeline_config import EnrichmentConfig


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Aggregate RSS feeds and enrich each article with a main image and a topic"
    )
    parser.add_argument(
        "--config",
        default="config/sources.yaml",
        help="Path to feed sources configuration file (YAML)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: LOG_LEVEL env or INFO)",
    )
    parser.add_argument(
        "--classifier",
        choices=["keyword", "bayes"],
        default=None,
        help="Classification backend (default: CLASSIFIER_BACKEND env or keyword)",
    )
    parser.add_argument(
        "--training-csv",
        default=None,
        help="category,text CSV used to train the bayes backend",
    )
    parser.add_argument(
        "--max-items-per-source",
        type=int,
        default=None,
        help="Limit number of items enriched per feed",
    )
    parser.add_argument(
        "--category",
        default=None,
        help="Only output articles classified into this category",
    )
    parser.add_argument(
        "--classify",
        metavar="TEXT",
        default=None,
        help="Classify TEXT, print the result as JSON and exit",
    )
    parser.add_argument("--serve", action="store_true", help="Start the HTTP API")
    parser.add_argument("--host", default="127.0.0.1", help="API bind address")
    parser.add_argument("--port", type=int, default=3000, help="API port (default: 3000)")
    return parser.parse_args(argv)


def build_orchestrator(
    settings: EnrichmentConfig,
    sources_config: SourcesConfig,
    classifier: Classifier,
    client: httpx.AsyncClient,
) -> Orchestrator:
    extractor = ImageExtractor(client, timeout=settings.image_timeout, headers=settings.page_headers)
    return Orchestrator(
        classifier,
        extractor,
        sources=sources_config.sources,
        max_items_per_source=settings.max_items_per_feed,
        max_concurrent=settings.max_concurrent_fetches,
        fallback_category=settings.fallback_category,
    )


async def _aggregate_once(
    settings: EnrichmentConfig,
    sources_config: SourcesConfig,
    classifier: Classifier,
    category: Optional[str],
) -> List[ArticleRecord]:
    async with httpx.AsyncClient() as client:
        orch = build_orchestrator(settings, sources_config, classifier, client)
        return await orch.list_articles(category=category)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("enricher.main")

    settings = EnrichmentConfig()
    if args.classifier:
        settings.classifier_backend = args.classifier
    if args.training_csv:
        settings.training_csv = args.training_csv
    if args.max_items_per_source is not None:
        settings.max_items_per_feed = args.max_items_per_source

    config_path = Path(args.config)
    sources_config = SourcesConfig()
    if config_path.exists() or args.classify is None:
        logger.info("Loading sources configuration from %s", config_path)
        try:
            sources_config = load_sources_config(config_path)
        except ConfigError as exc:
            logger.error("Failed to load configuration: %s", exc)
            return 1
        logger.info("Loaded %d feed source(s)", len(sources_config.enabled_sources))

    try:
        classifier = create_classifier(
            backend=settings.classifier_backend,
            keywords=sources_config.categories,
            training_csv=settings.training_csv,
        )
    except (ClassifierError, ValueError) as exc:
        logger.error("Failed to set up classifier: %s", exc)
        return 1

    if args.classify is not None:
        result = classifier.classify(args.classify)
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return 0

    if args.serve:
        import uvicorn

        from .api import create_app

        client = httpx.AsyncClient()
        orch = build_orchestrator(settings, sources_config, classifier, client)
        app = create_app(orch, http_client=client)
        logger.info("Starting API on http://%s:%d", args.host, args.port)
        uvicorn.run(app, host=args.host, port=args.port)
        return 0

    records = asyncio.run(_aggregate_once(settings, sources_config, classifier, args.category))
    json.dump([r.to_dict() for r in records], sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
