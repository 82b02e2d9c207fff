"""Validation and aggregation rules for reviews."""

from typing import Iterable, Optional

from app.core.errors import ValidationError

RATING_MIN = 1
RATING_MAX = 5
CONTENT_MIN_LENGTH = 10
CONTENT_MAX_LENGTH = 5000
TITLE_MAX_LENGTH = 100


def validate_rating(rating) -> None:
    # bool is an int subclass; True must not pass as a 1-star rating
    if isinstance(rating, bool) or not isinstance(rating, int) or not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationError("Rating must be an integer between 1 and 5")


def validate_content(content: str) -> None:
    if len(content) < CONTENT_MIN_LENGTH:
        raise ValidationError("Review content must be at least 10 characters")
    if len(content) > CONTENT_MAX_LENGTH:
        raise ValidationError("Review content must be at most 5000 characters")


def validate_title(title: Optional[str]) -> None:
    if title is not None and len(title) > TITLE_MAX_LENGTH:
        raise ValidationError("Title must be at most 100 characters")


def validate_user_review(
    rating=None,
    content: Optional[str] = None,
    title: Optional[str] = None,
) -> None:
    """Check the fields that are present; raises ValidationError on the first violation."""
    if rating is not None:
        validate_rating(rating)
    if content is not None:
        validate_content(content)
    validate_title(title)


def summarize_ratings(ratings: Iterable[int]) -> dict:
    """Average, count and 5..1 distribution for a set of ratings."""
    ratings = list(ratings)
    distribution = {star: 0 for star in range(RATING_MAX, RATING_MIN - 1, -1)}
    for r in ratings:
        if r in distribution:
            distribution[r] += 1
    return {
        "average_rating": sum(ratings) / len(ratings) if ratings else 0,
        "total_reviews": len(ratings),
        "rating_distribution": distribution,
    }
