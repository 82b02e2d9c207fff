"""Normalize Yelp businesses and upsert them into the businesses table."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StorageError
from app.models.business import Business
from app.schemas.business import BusinessCategory, BusinessRecord
from app.schemas.yelp import YelpBusiness

logger = logging.getLogger(__name__)

MAX_PHOTOS = 10


def build_photo_list(image_url: str | None, photos: list[str] | None) -> list[str]:
    """Primary image first, then detail photos; no duplicates or blanks, at most MAX_PHOTOS."""
    result: list[str] = []
    for url in [image_url, *(photos or [])]:
        if url and url not in result:
            result.append(url)
        if len(result) >= MAX_PHOTOS:
            break
    return result


def transform_yelp_business(yelp_business: YelpBusiness) -> BusinessRecord:
    """Map a Yelp business (search or details) to the canonical stored shape."""
    location = yelp_business.location
    photos = build_photo_list(yelp_business.image_url, yelp_business.photos)

    return BusinessRecord(
        id=yelp_business.id,
        name=yelp_business.name,
        image_url=yelp_business.image_url,
        yelp_url=yelp_business.url,
        price=yelp_business.price,
        rating=yelp_business.rating,
        review_count=yelp_business.review_count,
        categories=[BusinessCategory(alias=c.alias, title=c.title) for c in yelp_business.categories],
        latitude=yelp_business.coordinates.latitude,
        longitude=yelp_business.coordinates.longitude,
        address_line1=location.address1,
        address_line2=location.address2,
        address_line3=location.address3,
        city=location.city,
        state=location.state,
        zip_code=location.zip_code,
        country=location.country,
        display_address=", ".join(location.display_address),
        phone=yelp_business.phone,
        display_phone=yelp_business.display_phone,
        photos=photos or None,
        ai_summary=None,
    )


def upsert_business(db: Session, record: BusinessRecord) -> Business:
    """
    Insert or update the businesses row keyed by the Yelp id.
    Existing rows get every Yelp-sourced field refreshed; ai_summary is left alone.
    Raises StorageError (after rollback) if the write fails.
    """
    values = record.model_dump(exclude={"ai_summary"})
    try:
        business = db.query(Business).filter(Business.id == record.id).first()
        if business:
            for field, value in values.items():
                setattr(business, field, value)
        else:
            business = Business(**values)
            db.add(business)
        db.commit()
        db.refresh(business)
        return business
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to upsert business id={record.id}: {e}")
        raise StorageError(str(e).splitlines()[0] if str(e) else e.__class__.__name__)
