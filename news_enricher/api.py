"""HTTP API over the enrichment pipeline."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Any, AsyncIterator, Dict, List, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .orchestrator import Orchestrator
from .processors.classifiers import ClassifierNotTrainedError
from .utils.logging import get_logger

logger = get_logger("enricher.api")


class ClassifyRequest(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    source: Optional[str] = None


def get_orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


Pipeline = Annotated[Orchestrator, Depends(get_orchestrator)]


def create_app(orchestrator: Orchestrator, *, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """Build the app around an already wired orchestrator.

    When given, ``http_client`` (the one behind the image extractor) is
    closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        if http_client is not None:
            await http_client.aclose()

    app = FastAPI(title="News Enricher", version="1.0.0", lifespan=lifespan)
    app.state.orchestrator = orchestrator
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/news")
    async def news(pipeline: Pipeline) -> List[Dict[str, Any]]:
        records = await pipeline.list_articles()
        return [r.to_dict() for r in records]

    @app.get("/news/{category}")
    async def news_by_category(category: str, pipeline: Pipeline) -> List[Dict[str, Any]]:
        records = await pipeline.list_articles(category=category)
        logger.info("Category %s: %d articles", category, len(records))
        return [r.to_dict() for r in records]

    @app.get("/ai/stats")
    async def ai_stats(pipeline: Pipeline) -> Dict[str, Any]:
        return {
            "ai": pipeline.classifier_stats(),
            "server": {"timestamp": datetime.now(timezone.utc).isoformat()},
        }

    @app.post("/ai/test")
    async def ai_test(body: ClassifyRequest, pipeline: Pipeline) -> Dict[str, Any]:
        if not body.title or not body.title.strip():
            raise HTTPException(status_code=400, detail="title is required")
        try:
            result = pipeline.classify(f"{body.title} {body.summary or ''}")
        except ClassifierNotTrainedError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return {
            "article": {"title": body.title, "summary": body.summary, "source": body.source},
            "classification": result.to_dict(),
        }

    @app.get("/estimate")
    async def estimate(pipeline: Pipeline) -> Dict[str, int]:
        return {"estimate": await pipeline.estimate_seconds()}

    return app
