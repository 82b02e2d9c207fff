from pydantic import BaseModel
from typing import Optional


class BusinessCategory(BaseModel):
    alias: str = ""
    title: str = ""


class BusinessRecord(BaseModel):
    """Canonical stored shape of a business (one row of the businesses table)."""
    id: str
    name: str
    image_url: Optional[str] = None
    yelp_url: Optional[str] = None
    price: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    categories: list[BusinessCategory] = []
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    address_line3: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    display_address: Optional[str] = None
    phone: Optional[str] = None
    display_phone: Optional[str] = None
    photos: Optional[list[str]] = None
    ai_summary: Optional[str] = None


class BusinessCard(BaseModel):
    """Compact business used by list and board views."""
    id: str
    name: str
    image_url: Optional[str] = None
    rating: float = 0
    review_count: int = 0
    price: Optional[str] = None
    categories: list[BusinessCategory] = []
    city: Optional[str] = None
    state: Optional[str] = None
    ai_summary: Optional[str] = None


class BusinessDetail(BaseModel):
    id: str
    name: str
    photos: list[str] = []
    rating: float = 0
    review_count: int = 0
    price: Optional[str] = None
    categories: list[BusinessCategory] = []
    city: Optional[str] = None
    state: Optional[str] = None
    address: str = ""
    phone: str = ""
    ai_summary: Optional[str] = None


class BusinessListResponse(BaseModel):
    success: bool = True
    businesses: list[BusinessCard]


class BusinessDetailResponse(BaseModel):
    success: bool = True
    business: BusinessDetail


class BusinessAiSummaryResponse(BaseModel):
    success: bool = True
    business_id: str
    ai_summary: str
