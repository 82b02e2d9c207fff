import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.auth import get_current_profile
from app.core.errors import AuthorizationError
from app.db.session import get_db
from app.models.pin import UserPin
from app.models.profile import Profile
from app.routers.businesses import business_to_card, get_business_or_404
from app.schemas.pin import (
    PinCheckResponse,
    PinCreate,
    PinListResponse,
    PinRead,
    PinResponse,
    PinUpdate,
    PinWithBusiness,
)
from app.schemas.review import DeleteResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pins", tags=["pins"])


def _get_owned_pin(db: Session, pin_id: UUID, profile: Profile, action: str) -> UserPin:
    pin = db.query(UserPin).filter(UserPin.id == pin_id).first()
    if not pin:
        raise HTTPException(status_code=404, detail="Pin not found")
    if pin.user_id != profile.id:
        logger.warning(f"Profile {profile.id} tried to {action} pin {pin_id} it does not own")
        raise AuthorizationError(f"You can only {action} your own pins")
    return pin


def _pin_with_business(pin: UserPin) -> PinWithBusiness:
    data = PinRead.model_validate(pin).model_dump()
    return PinWithBusiness(
        **data,
        business=business_to_card(pin.business) if pin.business else None,
    )


@router.get("", response_model=PinListResponse)
def list_pins(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """The caller's pins, newest first, each with its business card."""
    pins = (
        db.query(UserPin)
        .options(joinedload(UserPin.business))
        .filter(UserPin.user_id == profile.id)
        .order_by(UserPin.created_at.desc())
        .all()
    )
    return PinListResponse(pins=[_pin_with_business(p) for p in pins])


@router.get("/check", response_model=PinCheckResponse)
def check_pin(
    business_id: str = Query(..., description="Business (Yelp) id"),
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Whether the caller has pinned this business."""
    pin = (
        db.query(UserPin)
        .filter(UserPin.user_id == profile.id, UserPin.business_id == business_id)
        .first()
    )
    return PinCheckResponse(
        is_pinned=pin is not None,
        pin=PinRead.model_validate(pin) if pin else None,
    )


@router.post("", response_model=PinResponse)
def pin_business(
    body: PinCreate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """
    Pin a business for the caller.
    If the caller already pinned it, the existing pin is updated (status, notes, image).
    """
    get_business_or_404(db, body.business_id)

    pin = (
        db.query(UserPin)
        .filter(UserPin.user_id == profile.id, UserPin.business_id == body.business_id)
        .first()
    )
    if pin:
        pin.status = body.status
        pin.user_notes = body.user_notes or None
        pin.user_image_url = body.user_image_url or None
    else:
        pin = UserPin(
            user_id=profile.id,
            business_id=body.business_id,
            status=body.status,
            user_notes=body.user_notes or None,
            user_image_url=body.user_image_url or None,
        )
        db.add(pin)

    try:
        db.commit()
    except IntegrityError:
        # uq_user_pins_user_business: a concurrent pin was created first, update that one
        db.rollback()
        pin = (
            db.query(UserPin)
            .filter(UserPin.user_id == profile.id, UserPin.business_id == body.business_id)
            .one()
        )
        pin.status = body.status
        pin.user_notes = body.user_notes or None
        pin.user_image_url = body.user_image_url or None
        db.commit()
    db.refresh(pin)
    return PinResponse(pin=PinRead.model_validate(pin))


@router.patch("/{pin_id}", response_model=PinResponse)
def update_pin(
    pin_id: UUID,
    body: PinUpdate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Change status, notes or image of the caller's own pin."""
    pin = _get_owned_pin(db, pin_id, profile, "edit")
    changes = body.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        pin.status = changes["status"]
    if "user_notes" in changes:
        pin.user_notes = changes["user_notes"] or None
    if "user_image_url" in changes:
        pin.user_image_url = changes["user_image_url"] or None

    db.commit()
    db.refresh(pin)
    return PinResponse(pin=PinRead.model_validate(pin))


@router.delete("/{pin_id}", response_model=DeleteResponse)
def delete_pin(
    pin_id: UUID,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Remove the caller's own pin."""
    pin = _get_owned_pin(db, pin_id, profile, "delete")
    db.delete(pin)
    db.commit()
    return DeleteResponse(message="Pin removed")
