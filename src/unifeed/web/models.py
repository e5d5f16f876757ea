"""Pydantic v2 request and response models for the Unifeed web API."""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------
class FeedItem(BaseModel):
    id: str
    source: str
    title: str
    url: str | None = None
    content: str | None = None
    author: str
    timestamp: int
    score: int | None = None
    comment_count: int | None = None
    comments_url: str | None = None
    thumbnail: str | None = None
    embed: dict | None = None


class SourceCounts(BaseModel):
    new: int
    total: int
    latest: int | None = None


class FeedResponse(BaseModel):
    items: list[FeedItem]
    count: int
    total_fetched: int
    sources: dict[str, SourceCounts]
    has_new_content: bool
    sources_with_new: list[str]
    failed_sources: list[str]
    unknown_sources: list[str]


# ---------------------------------------------------------------------------
# Acknowledge
# ---------------------------------------------------------------------------
class AcknowledgeRequest(BaseModel):
    ids: list[str] = Field(min_length=1)


class AcknowledgeResponse(BaseModel):
    acknowledged: int


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------
class LedgerStats(BaseModel):
    strategy: str
    size: int
    updated_at: str | None = None


class SourceHealthEntry(BaseModel):
    consecutive_failures: int
    last_error: str | None = None
    last_failed_at: str | None = None
    last_succeeded_at: str | None = None


class SourceInfo(BaseModel):
    source: str
    registered: bool
    health: SourceHealthEntry | None = None
    ledger: LedgerStats | None = None


class SourceListResponse(BaseModel):
    sources: list[SourceInfo]
