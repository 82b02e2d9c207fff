from pydantic import BaseModel, ConfigDict
from uuid import UUID
from datetime import datetime
from typing import Literal, Optional

from app.schemas.business import BusinessCard

PinStatus = Literal["favorite", "want_to_try"]


class PinCreate(BaseModel):
    """
    Body for POST /pins. Pinning a business the caller already pinned updates
    the existing pin instead of creating a second one.
    """
    business_id: str
    status: PinStatus = "want_to_try"
    user_notes: Optional[str] = None
    user_image_url: Optional[str] = None


class PinUpdate(BaseModel):
    status: Optional[PinStatus] = None
    user_notes: Optional[str] = None
    user_image_url: Optional[str] = None


class PinRead(BaseModel):
    id: UUID
    business_id: str
    user_id: str
    status: PinStatus
    user_notes: Optional[str] = None
    user_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PinWithBusiness(PinRead):
    business: Optional[BusinessCard] = None


class PinResponse(BaseModel):
    success: bool = True
    pin: PinRead


class PinListResponse(BaseModel):
    success: bool = True
    pins: list[PinWithBusiness]


class PinCheckResponse(BaseModel):
    success: bool = True
    is_pinned: bool
    pin: Optional[PinRead] = None
