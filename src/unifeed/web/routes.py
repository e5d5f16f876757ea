"""API route handlers for the Unifeed web API."""

from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from unifeed.storage.connection import get_connection
from unifeed.web.models import (
    AcknowledgeRequest,
    AcknowledgeResponse,
    FeedItem,
    FeedResponse,
    SourceCounts,
    SourceInfo,
    SourceListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()


@health_router.get("/health")
def health(request: Request) -> JSONResponse:
    """Check database connectivity and return health status."""
    database_path = request.app.state.database_path
    try:
        with get_connection(database_path) as conn:
            conn.execute("SELECT 1 FROM seen_ledger LIMIT 1")
        return JSONResponse({"status": "healthy", "database": "ok"})
    except (sqlite3.Error, OSError) as exc:
        logger.warning("Health check failed: %s", exc)
        return JSONResponse(
            {"status": "unhealthy", "database": "error", "detail": str(exc)},
            status_code=503,
        )


@router.get("/feed", response_model=FeedResponse)
def feed(
    request: Request,
    sources: str | None = Query(None, description="Comma-separated source names"),
) -> FeedResponse:
    service = request.app.state.service
    requested = None
    if sources is not None:
        requested = [s.strip() for s in sources.split(",") if s.strip()]

    snapshot = service.refresh(requested)
    return FeedResponse(
        items=[FeedItem(**item.to_dict()) for item in snapshot.items],
        count=len(snapshot.items),
        total_fetched=snapshot.total_fetched,
        sources={
            source: SourceCounts(new=s.new, total=s.total, latest=s.latest)
            for source, s in snapshot.sources.items()
        },
        has_new_content=snapshot.has_new_content,
        sources_with_new=snapshot.sources_with_new,
        failed_sources=snapshot.failed_sources,
        unknown_sources=snapshot.unknown_sources,
    )


@router.post("/feed/acknowledge", response_model=AcknowledgeResponse)
def acknowledge(request: Request, body: AcknowledgeRequest) -> AcknowledgeResponse:
    service = request.app.state.service
    return AcknowledgeResponse(acknowledged=service.acknowledge(body.ids))


@router.get("/sources", response_model=SourceListResponse)
def list_sources(request: Request) -> SourceListResponse:
    service = request.app.state.service
    registered = service.registry.registered()
    health_rows = service.health.snapshot() if service.health is not None else {}
    ledger_stats = service.ledger.stats()

    names = sorted(registered | set(health_rows) | set(ledger_stats))
    return SourceListResponse(
        sources=[
            SourceInfo(
                source=name,
                registered=name in registered,
                health=health_rows.get(name),
                ledger=ledger_stats.get(name),
            )
            for name in names
        ]
    )
