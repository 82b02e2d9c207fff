import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.business import Business
from app.schemas.business import (
    BusinessAiSummaryResponse,
    BusinessCard,
    BusinessDetail,
    BusinessDetailResponse,
    BusinessListResponse,
)
from app.services.ai_summary_service import generate_ai_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses", tags=["businesses"])


def _primary_image(business: Business) -> Optional[str]:
    """First stored photo, falling back to the Yelp image."""
    if business.photos:
        return business.photos[0]
    return business.image_url


def business_to_card(business: Business) -> BusinessCard:
    return BusinessCard(
        id=business.id,
        name=business.name,
        image_url=_primary_image(business),
        rating=business.rating or 0,
        review_count=business.review_count or 0,
        price=business.price,
        categories=business.categories or [],
        city=business.city,
        state=business.state,
        ai_summary=business.ai_summary,
    )


def business_to_detail(business: Business) -> BusinessDetail:
    if business.photos:
        photos = list(business.photos)
    else:
        photos = [business.image_url] if business.image_url else []
    address = business.display_address or ", ".join(
        p for p in (business.address_line1, business.city, business.state) if p
    )
    return BusinessDetail(
        id=business.id,
        name=business.name,
        photos=photos,
        rating=business.rating or 0,
        review_count=business.review_count or 0,
        price=business.price,
        categories=business.categories or [],
        city=business.city,
        state=business.state,
        address=address,
        phone=business.display_phone or business.phone or "",
        ai_summary=business.ai_summary,
    )


def _has_category(business: Business, title: str) -> bool:
    return any(c.get("title") == title for c in business.categories or [])


def get_business_or_404(db: Session, business_id: str) -> Business:
    business = db.query(Business).filter(Business.id == business_id).first()
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")
    return business


@router.get("", response_model=BusinessListResponse)
def list_businesses(
    city: Optional[str] = Query(None, description="Exact city, e.g. 'McAllen'"),
    price: Optional[str] = Query(None, description="Price tier: $, $$, $$$ or $$$$"),
    rating: Optional[float] = Query(None, ge=0, le=5, description="Minimum rating"),
    category: Optional[str] = Query(None, description="Category title, e.g. 'Coffee & Tea'"),
    limit: int = Query(60, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """List business cards with optional city, price, minimum rating and category filters."""
    query = db.query(Business)
    if city:
        query = query.filter(Business.city == city)
    if price:
        query = query.filter(Business.price == price)
    if rating is not None:
        query = query.filter(Business.rating >= rating)
    query = query.order_by(Business.rating.desc(), Business.name)

    if category:
        # categories is a JSON list of {alias, title}; matched in Python so SQLite tests behave like Postgres
        businesses = [b for b in query.all() if _has_category(b, category)][:limit]
    else:
        businesses = query.limit(limit).all()

    return BusinessListResponse(businesses=[business_to_card(b) for b in businesses])


@router.get("/{business_id}", response_model=BusinessDetailResponse)
def get_business(business_id: str, db: Session = Depends(get_db)):
    """Business detail with photos, formatted address and display phone."""
    business = get_business_or_404(db, business_id)
    return BusinessDetailResponse(business=business_to_detail(business))


@router.post("/{business_id}/ai-summary", response_model=BusinessAiSummaryResponse)
def refresh_business_ai_summary(business_id: str, db: Session = Depends(get_db)):
    """
    Generate (or regenerate) ai_summary with Gemini and store it.
    Returns 503 when no summary could be produced (quota cooldown or empty reply).
    """
    business = get_business_or_404(db, business_id)
    try:
        summary = generate_ai_summary(db, business)
    except Exception as e:
        logger.exception("Failed to generate ai_summary for business %s: %s", business.id, e)
        summary = None
    if summary is None:
        raise HTTPException(status_code=503, detail="AI summary unavailable, try again later")

    business.ai_summary = summary
    db.commit()
    db.refresh(business)
    logger.info(f"Stored AI summary for business id={business.id}")
    return BusinessAiSummaryResponse(business_id=business.id, ai_summary=summary)
