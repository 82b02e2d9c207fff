"""Reviews from two sources: users of the app and the Yelp API."""

import uuid
from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    DateTime,
    ForeignKey,
    Index,
    CheckConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from app.db.base import Base

REVIEW_SOURCE_USER = "user"
REVIEW_SOURCE_YELP = "yelp"


class Review(Base):
    """
    One review of a business.

    source="user" rows belong to a profile (user_id) and are edited only by it.
    source="yelp" rows have no user_id; they are replaced wholesale by the
    Yelp review sync and carry yelp_* metadata plus the fetch timestamp.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        CheckConstraint("source IN ('user', 'yelp')", name="ck_reviews_source"),
        # At most one user-authored review per (business, user)
        Index(
            "uq_reviews_user_business",
            "business_id",
            "user_id",
            unique=True,
            postgresql_where=text("source = 'user'"),
            sqlite_where=text("source = 'user'"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(String, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True, index=True)
    source = Column(String(8), nullable=False, default=REVIEW_SOURCE_USER)
    rating = Column(Integer, nullable=False)
    title = Column(String(100), nullable=True)
    content = Column(Text, nullable=False)
    photos = Column(JSONB, nullable=True)
    helpful_count = Column(Integer, default=0, nullable=False)
    # Yelp-only fields
    yelp_review_id = Column(String, nullable=True)
    yelp_user_name = Column(String, nullable=True)
    yelp_user_avatar_url = Column(String, nullable=True)
    yelp_url = Column(String, nullable=True)
    yelp_fetched_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    business = relationship("Business", back_populates="reviews")
    author = relationship("Profile", back_populates="reviews")

    @property
    def profile(self):
        """Author profile for user reviews; Yelp reviews have none."""
        if self.source != REVIEW_SOURCE_USER:
            return None
        return self.author
