"""Schemas for the Yelp ingestion trigger (POST /yelp/ingest)."""

from typing import Optional

from pydantic import BaseModel, Field


class IngestRequest(BaseModel):
    """
    Ingestion options. Every field is optional.

    - localities: Yelp search locations; defaults to settings.ingest_default_localities
    - max_per_locality: target number of businesses kept per locality after filtering
    - fetch_photos: call Business Details per candidate to get the full photo list
    - min_rating: candidates rated below this are dropped while paging search results
    - exclude_chains: drop well-known chain brands (see app.services.chain_filter)
    - require_photos: drop candidates that end up with no photo at all
    """
    localities: Optional[list[str]] = None
    max_per_locality: int = Field(default=50, ge=1, le=200)
    fetch_photos: bool = True
    min_rating: float = Field(default=3.0, ge=0, le=5)
    exclude_chains: bool = True
    require_photos: bool = True


class LocalityResult(BaseModel):
    locality: str
    count: int = 0
    processed: int = 0
    skipped: int = 0
    filtered: int = 0


class IngestResults(BaseModel):
    """
    Counters for one ingestion run.
    total counts candidates kept after chain filtering and truncation;
    filtered counts candidates dropped as chains or by truncation.
    """
    total: int = 0
    processed: int = 0
    skipped: int = 0
    filtered: int = 0
    errors: list[str] = []
    per_locality: list[LocalityResult] = []


class IngestResponse(BaseModel):
    success: bool = True
    results: IngestResults


class IngestInfoResponse(BaseModel):
    message: str
    localities: list[str]
