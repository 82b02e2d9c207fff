from app.models.profile import Profile
from app.models.business import Business
from app.models.review import Review
from app.models.pin import UserPin

__all__ = [
    "Profile",
    "Business",
    "Review",
    "UserPin",
]
