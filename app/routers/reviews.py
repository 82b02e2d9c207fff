import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.auth import get_current_profile
from app.core.errors import AuthorizationError, ValidationError
from app.db.session import get_db
from app.models.profile import Profile
from app.models.review import Review, REVIEW_SOURCE_USER, REVIEW_SOURCE_YELP
from app.routers.businesses import get_business_or_404
from app.schemas.review import (
    DeleteResponse,
    RatingSummary,
    ReviewCreate,
    ReviewListResponse,
    ReviewRead,
    ReviewResponse,
    ReviewStatsResponse,
    ReviewUpdate,
)
from app.services.reviews import summarize_ratings, validate_user_review

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])

SORT_ORDERS = {
    "newest": Review.created_at.desc(),
    "oldest": Review.created_at.asc(),
    "highest": Review.rating.desc(),
    "lowest": Review.rating.asc(),
    "helpful": Review.helpful_count.desc(),
}


def _get_owned_user_review(db: Session, review_id: UUID, profile: Profile, action: str) -> Review:
    """The user review with this id if the caller wrote it; 404 if missing, 403 otherwise."""
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    if review.source != REVIEW_SOURCE_USER or review.user_id != profile.id:
        logger.warning(f"Profile {profile.id} tried to {action} review {review_id} it does not own")
        raise AuthorizationError(f"You can only {action} your own reviews")
    return review


@router.get("", response_model=ReviewListResponse)
def list_reviews(
    business_id: str = Query(..., description="Business (Yelp) id"),
    source: Literal["user", "yelp", "all"] = Query("all"),
    sort: Literal["newest", "oldest", "highest", "lowest", "helpful"] = Query("newest"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Reviews for a business, user reviews joined with their author's profile."""
    query = (
        db.query(Review)
        .options(joinedload(Review.author))
        .filter(Review.business_id == business_id)
    )
    if source != "all":
        query = query.filter(Review.source == source)

    reviews = query.order_by(SORT_ORDERS[sort]).offset(offset).limit(limit).all()
    return ReviewListResponse(
        reviews=[ReviewRead.model_validate(r) for r in reviews],
        count=len(reviews),
    )


@router.get("/stats", response_model=ReviewStatsResponse)
def review_stats(
    business_id: str = Query(..., description="Business (Yelp) id"),
    db: Session = Depends(get_db),
):
    """Average rating and 1-5 distribution, separately for user and Yelp reviews."""
    rows = db.query(Review.source, Review.rating).filter(Review.business_id == business_id).all()
    user_ratings = [rating for source, rating in rows if source == REVIEW_SOURCE_USER]
    yelp_ratings = [rating for source, rating in rows if source == REVIEW_SOURCE_YELP]

    return ReviewStatsResponse(
        user_reviews=RatingSummary(**summarize_ratings(user_ratings)),
        yelp_reviews=RatingSummary(**summarize_ratings(yelp_ratings)),
        total_reviews=len(user_ratings) + len(yelp_ratings),
    )


@router.post("", response_model=ReviewResponse, status_code=201)
def create_review(
    body: ReviewCreate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Create the caller's review of a business. One user review per business."""
    content = body.content.strip()
    title = (body.title or "").strip() or None
    validate_user_review(rating=body.rating, content=content, title=title)
    get_business_or_404(db, body.business_id)

    existing = (
        db.query(Review)
        .filter(
            Review.business_id == body.business_id,
            Review.user_id == profile.id,
            Review.source == REVIEW_SOURCE_USER,
        )
        .first()
    )
    if existing:
        raise ValidationError("You have already reviewed this business")

    review = Review(
        business_id=body.business_id,
        user_id=profile.id,
        source=REVIEW_SOURCE_USER,
        rating=body.rating,
        title=title,
        content=content,
        photos=body.photos or None,
        helpful_count=0,
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        # uq_reviews_user_business: a concurrent create won the race
        db.rollback()
        raise ValidationError("You have already reviewed this business")
    db.refresh(review)
    logger.info(f"Created review id={review.id} business_id={review.business_id} user_id={profile.id}")
    return ReviewResponse(review=ReviewRead.model_validate(review))


@router.patch("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: UUID,
    body: ReviewUpdate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Edit the caller's own review; only fields present in the body change."""
    review = _get_owned_user_review(db, review_id, profile, "edit")

    changes = body.model_dump(exclude_unset=True)
    if "title" in changes:
        changes["title"] = (changes["title"] or "").strip() or None
    if changes.get("content") is not None:
        changes["content"] = changes["content"].strip()
    validate_user_review(
        rating=changes.get("rating"),
        content=changes.get("content"),
        title=changes.get("title"),
    )

    if "rating" in changes and changes["rating"] is not None:
        review.rating = changes["rating"]
    if "title" in changes:
        review.title = changes["title"]
    if "content" in changes and changes["content"] is not None:
        review.content = changes["content"]
    if "photos" in changes:
        review.photos = changes["photos"]

    db.commit()
    db.refresh(review)
    return ReviewResponse(review=ReviewRead.model_validate(review))


@router.delete("/{review_id}", response_model=DeleteResponse)
def delete_review(
    review_id: UUID,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Delete the caller's own review."""
    review = _get_owned_user_review(db, review_id, profile, "delete")
    db.delete(review)
    db.commit()
    logger.info(f"Deleted review id={review_id} user_id={profile.id}")
    return DeleteResponse(message="Review deleted successfully")
