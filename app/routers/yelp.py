"""Yelp data endpoints: business ingestion and the Yelp review cache."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.routers.businesses import get_business_or_404
from app.schemas.ingest import IngestInfoResponse, IngestRequest, IngestResponse
from app.schemas.review import (
    ReviewExpireResponse,
    ReviewRead,
    ReviewSyncResponse,
    ReviewSyncStatusResponse,
)
from app.services.ingestion import run_ingestion
from app.services.review_sync import (
    expire_stale_yelp_reviews,
    get_sync_status,
    sync_yelp_reviews,
)
from app.services.yelp_client import YelpClient, get_yelp_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["yelp"])


@router.post("/yelp/ingest", response_model=IngestResponse)
async def ingest_businesses(
    body: IngestRequest | None = None,
    db: Session = Depends(get_db),
    yelp: YelpClient = Depends(get_yelp_client),
):
    """
    Fetch coffee shops from Yelp for each locality and upsert them.

    Per-business and per-locality failures are reported in results.errors.
    Anything else fails the whole run with {"success": false, "error": ...}
    and no partial counters.

    ```bash
    curl -X POST http://localhost:8000/api/v1/yelp/ingest \\
      -H "Content-Type: application/json" \\
      -d '{"localities": ["Brownsville, TX"], "max_per_locality": 20, "min_rating": 3.0}'
    ```
    """
    body = body or IngestRequest()
    logger.info(
        f"Starting ingestion: localities={body.localities or 'default'}, "
        f"max_per_locality={body.max_per_locality}, exclude_chains={body.exclude_chains}"
    )
    results = await run_ingestion(db, yelp, body)
    return IngestResponse(results=results)


@router.get("/yelp/ingest", response_model=IngestInfoResponse)
def ingest_info():
    """Usage info and the localities ingested by default."""
    return IngestInfoResponse(
        message="Yelp ingestion endpoint. Use POST to start ingestion.",
        localities=list(settings.ingest_default_localities),
    )


@router.get("/reviews/yelp/sync", response_model=ReviewSyncStatusResponse)
def yelp_review_sync_status(
    business_id: str = Query(..., description="Business (Yelp) id"),
    db: Session = Depends(get_db),
):
    """How many Yelp reviews are stored and whether they are missing or older than 24h."""
    status = get_sync_status(db, business_id)
    return ReviewSyncStatusResponse(
        count=status.count,
        expired_count=status.expired_count,
        needs_sync=status.needs_sync,
    )


@router.post("/reviews/yelp/sync", response_model=ReviewSyncResponse)
async def sync_yelp_reviews_for_business(
    business_id: str = Query(..., description="Business (Yelp) id"),
    db: Session = Depends(get_db),
    yelp: YelpClient = Depends(get_yelp_client),
):
    """Replace the business's stored Yelp reviews with the ones Yelp returns now."""
    get_business_or_404(db, business_id)
    rows = await sync_yelp_reviews(db, yelp, business_id)
    return ReviewSyncResponse(
        synced_count=len(rows),
        reviews=[ReviewRead.model_validate(r) for r in rows],
    )


@router.post("/reviews/yelp/expire", response_model=ReviewExpireResponse)
def expire_yelp_reviews(
    business_id: str = Query(..., description="Business (Yelp) id"),
    db: Session = Depends(get_db),
):
    """
    Delete the business's Yelp reviews fetched more than 24h ago.
    Independent of sync: the business has no Yelp reviews until the next successful sync.
    """
    deleted = expire_stale_yelp_reviews(db, business_id)
    return ReviewExpireResponse(deleted_count=deleted)
