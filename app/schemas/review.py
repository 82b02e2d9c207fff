from pydantic import BaseModel, ConfigDict, StrictInt
from uuid import UUID
from datetime import datetime
from typing import Literal, Optional

from app.schemas.profile import ProfileSummary


class ReviewCreate(BaseModel):
    """
    Body for POST /reviews.
    Length and range rules (rating 1-5, content 10-5000, title <= 100) are enforced by
    app.services.reviews so violations surface as ValidationError with a readable message.
    """
    business_id: str
    rating: StrictInt
    content: str
    title: Optional[str] = None
    photos: Optional[list[str]] = None


class ReviewUpdate(BaseModel):
    """Body for PATCH /reviews/{id}; only fields present in the request are applied."""
    rating: Optional[StrictInt] = None
    title: Optional[str] = None
    content: Optional[str] = None
    photos: Optional[list[str]] = None


class ReviewRead(BaseModel):
    id: UUID
    business_id: str
    user_id: Optional[str] = None
    source: Literal["user", "yelp"]
    rating: int
    title: Optional[str] = None
    content: str
    photos: Optional[list[str]] = None
    helpful_count: int = 0
    yelp_review_id: Optional[str] = None
    yelp_user_name: Optional[str] = None
    yelp_user_avatar_url: Optional[str] = None
    yelp_url: Optional[str] = None
    yelp_fetched_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    profile: Optional[ProfileSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ReviewListResponse(BaseModel):
    success: bool = True
    reviews: list[ReviewRead]
    count: int


class ReviewResponse(BaseModel):
    success: bool = True
    review: ReviewRead


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class RatingSummary(BaseModel):
    average_rating: float = 0
    total_reviews: int = 0
    rating_distribution: dict[int, int]


class ReviewStatsResponse(BaseModel):
    success: bool = True
    user_reviews: RatingSummary
    yelp_reviews: RatingSummary
    total_reviews: int


class ReviewSyncStatusResponse(BaseModel):
    """GET /reviews/yelp/sync: count of stored Yelp reviews and whether a refresh is due."""
    success: bool = True
    count: int
    expired_count: int
    needs_sync: bool


class ReviewSyncResponse(BaseModel):
    success: bool = True
    synced_count: int
    reviews: list[ReviewRead]


class ReviewExpireResponse(BaseModel):
    success: bool = True
    deleted_count: int
