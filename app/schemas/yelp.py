"""Schemas for Yelp Fusion API responses.

Only the fields SipLocal stores are modelled; everything else Yelp returns is
ignored. Missing or null values fall back to the same defaults the business
details normalization has always used (rating 0, empty strings, empty lists).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class YelpCategory(BaseModel):
    alias: str = ""
    title: str = ""


class YelpCoordinates(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class YelpLocation(BaseModel):
    address1: Optional[str] = None
    address2: Optional[str] = None
    address3: Optional[str] = None
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""
    display_address: list[str] = []

    @field_validator("city", "state", "zip_code", "country", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""

    @field_validator("display_address", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return value or []


class YelpBusiness(BaseModel):
    """Business from /businesses/search or /businesses/{id}. photos is only populated by the latter."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    image_url: Optional[str] = None
    url: Optional[str] = None
    price: Optional[str] = None
    rating: float = 0
    review_count: int = 0
    categories: list[YelpCategory] = []
    coordinates: YelpCoordinates = Field(default_factory=YelpCoordinates)
    location: YelpLocation = Field(default_factory=YelpLocation)
    phone: str = ""
    display_phone: str = ""
    is_closed: bool = False  # permanently closed
    photos: list[str] = []

    @field_validator("image_url", "price", mode="before")
    @classmethod
    def _empty_to_none(cls, value):
        return value or None

    @field_validator("rating", "review_count", mode="before")
    @classmethod
    def _null_to_zero(cls, value):
        return value or 0

    @field_validator("phone", "display_phone", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return value or ""

    @field_validator("is_closed", mode="before")
    @classmethod
    def _null_to_false(cls, value):
        return bool(value)

    @field_validator("categories", "photos", mode="before")
    @classmethod
    def _null_to_list(cls, value):
        return value or []

    @field_validator("coordinates", mode="before")
    @classmethod
    def _null_to_coordinates(cls, value):
        return value or {}

    @field_validator("location", mode="before")
    @classmethod
    def _null_to_location(cls, value):
        return value or {}


class YelpSearchPage(BaseModel):
    """One page of /businesses/search."""

    businesses: list[YelpBusiness] = []
    total: int = 0


class YelpReviewUser(BaseModel):
    id: Optional[str] = None
    name: str = ""
    image_url: Optional[str] = None
    profile_url: Optional[str] = None


class YelpReview(BaseModel):
    """Review from /businesses/{id}/reviews."""

    model_config = ConfigDict(extra="ignore")

    id: str
    rating: int
    text: str = ""
    url: Optional[str] = None
    time_created: Optional[str] = None
    user: YelpReviewUser = Field(default_factory=YelpReviewUser)
