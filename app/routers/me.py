import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.auth import get_current_profile
from app.models.profile import Profile
from app.schemas.profile import ProfileRead, ProfileUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=ProfileRead)
def get_me(profile: Profile = Depends(get_current_profile)):
    """
    The authenticated caller's profile.
    The profile row is created by auth on the first authenticated request.
    """
    return ProfileRead.model_validate(profile)


@router.put("", response_model=ProfileRead)
def update_me(
    body: ProfileUpdate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """
    Update display name and/or avatar (partial).

    ```bash
    curl -X PUT http://localhost:8000/api/v1/me \\
      -H "Authorization: Bearer <token>" \\
      -H "Content-Type: application/json" \\
      -d '{"full_name": "Ana Garza"}'
    ```
    """
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        logger.info(f"No changes to apply for profile id={profile.id}")
        return ProfileRead.model_validate(profile)

    for field, value in changes.items():
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    logger.info(f"Updated profile id={profile.id}: fields={list(changes.keys())}")
    return ProfileRead.model_validate(profile)
