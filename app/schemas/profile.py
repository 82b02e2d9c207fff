from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class ProfileSummary(BaseModel):
    """Author info joined into review and pin responses."""
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileRead(ProfileSummary):
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Partial update for PUT /me; omitted fields are left unchanged."""
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
