"""
Yelp review cache for a business.

Yelp reviews are stored as source="yelp" rows stamped with yelp_fetched_at.
They are fresh for 24 hours. A sync replaces all of a business's Yelp rows with
the set Yelp currently returns; delete and insert share one transaction, and
nothing is touched unless the fetch succeeded.

expire_stale_yelp_reviews is a separate maintenance step and is never called by
sync. Running it without a following successful sync leaves the business with
no Yelp reviews until the next sync.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StorageError
from app.models.review import Review, REVIEW_SOURCE_YELP
from app.services.yelp_client import YelpClient

logger = logging.getLogger(__name__)

YELP_REVIEW_TTL_HOURS = 24

STATE_FRESH = "fresh"
STATE_STALE = "stale"
STATE_EMPTY = "empty"


@dataclass
class SyncStatus:
    count: int
    expired_count: int
    state: str

    @property
    def needs_sync(self) -> bool:
        return self.state in (STATE_STALE, STATE_EMPTY)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _is_expired(fetched_at: Optional[datetime], now: datetime) -> bool:
    fetched_at = _as_utc(fetched_at)
    return fetched_at is None or (now - fetched_at) > timedelta(hours=YELP_REVIEW_TTL_HOURS)


def _yelp_reviews_query(db: Session, business_id: str):
    return db.query(Review).filter(
        Review.business_id == business_id,
        Review.source == REVIEW_SOURCE_YELP,
    )


def get_sync_status(db: Session, business_id: str, now: Optional[datetime] = None) -> SyncStatus:
    """
    Classify the business's stored Yelp reviews.

    empty: none stored. fresh: the newest fetch is within 24h. stale: otherwise.
    expired_count counts rows whose own fetch time is missing or older than 24h.
    """
    now = now or datetime.now(timezone.utc)
    fetched = [r.yelp_fetched_at for r in _yelp_reviews_query(db, business_id).all()]

    if not fetched:
        return SyncStatus(count=0, expired_count=0, state=STATE_EMPTY)

    expired_count = sum(1 for f in fetched if _is_expired(f, now))
    known = [_as_utc(f) for f in fetched if f is not None]
    newest = max(known) if known else None
    state = STATE_STALE if _is_expired(newest, now) else STATE_FRESH
    return SyncStatus(count=len(fetched), expired_count=expired_count, state=state)


async def sync_yelp_reviews(
    db: Session,
    yelp: YelpClient,
    business_id: str,
    now: Optional[datetime] = None,
) -> list[Review]:
    """
    Replace the business's stored Yelp reviews with what Yelp returns now.

    Raises UpstreamAPIError if the fetch fails (nothing is changed), or
    StorageError if the replace fails (rolled back, old rows kept).
    """
    yelp_reviews = await yelp.get_business_reviews(business_id)
    fetched_at = now or datetime.now(timezone.utc)

    rows = [
        Review(
            business_id=business_id,
            source=REVIEW_SOURCE_YELP,
            rating=r.rating,
            content=r.text,
            title=None,  # Yelp reviews carry no title
            photos=None,
            helpful_count=0,
            user_id=None,
            yelp_review_id=r.id,
            yelp_user_name=r.user.name,
            yelp_user_avatar_url=r.user.image_url,
            yelp_url=r.url,
            yelp_fetched_at=fetched_at,
        )
        for r in yelp_reviews
    ]

    try:
        deleted = _yelp_reviews_query(db, business_id).delete(synchronize_session=False)
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Yelp review replace failed for business_id={business_id}: {e}")
        raise StorageError(f"Failed to store Yelp reviews: {e.__class__.__name__}")

    for row in rows:
        db.refresh(row)
    logger.info(f"Synced Yelp reviews for business_id={business_id}: replaced={deleted}, inserted={len(rows)}")
    return rows


def expire_stale_yelp_reviews(db: Session, business_id: str, now: Optional[datetime] = None) -> int:
    """Delete the business's Yelp reviews fetched more than 24h ago. Returns rows deleted."""
    now = now or datetime.now(timezone.utc)
    stale = [r for r in _yelp_reviews_query(db, business_id).all() if _is_expired(r.yelp_fetched_at, now)]
    try:
        for row in stale:
            db.delete(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Expiring Yelp reviews failed for business_id={business_id}: {e}")
        raise StorageError(f"Failed to expire Yelp reviews: {e.__class__.__name__}")
    logger.info(f"Expired {len(stale)} Yelp reviews for business_id={business_id}")
    return len(stale)
