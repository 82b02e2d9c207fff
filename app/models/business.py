from sqlalchemy import Column, String, Text, Float, Integer, DateTime, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.db.base import Base


class Business(Base):
    __tablename__ = "businesses"

    # Yelp business id; stable across re-ingestion and used as the upsert key
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=True)
    yelp_url = Column(String, nullable=True)
    price = Column(String(4), nullable=True)  # "$" | "$$" | "$$$" | "$$$$"
    rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=True)
    categories = Column(JSONB, nullable=True)  # [{"alias": ..., "title": ...}]
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    address_line1 = Column(String, nullable=True)
    address_line2 = Column(String, nullable=True)
    address_line3 = Column(String, nullable=True)
    city = Column(String, nullable=True, index=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    country = Column(String, nullable=True)
    display_address = Column(Text, nullable=True)
    phone = Column(String, nullable=True)
    display_phone = Column(String, nullable=True)
    photos = Column(JSONB, nullable=True)  # up to 10 URLs, primary image first
    ai_summary = Column(Text, nullable=True)  # filled out of band, never by ingestion
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    reviews = relationship("Review", back_populates="business", cascade="all, delete-orphan")
    pins = relationship("UserPin", back_populates="business", cascade="all, delete-orphan")
