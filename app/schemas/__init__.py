from app.schemas.business import (
    BusinessRecord,
    BusinessCard,
    BusinessDetail,
    BusinessListResponse,
    BusinessDetailResponse,
)
from app.schemas.profile import ProfileSummary, ProfileRead, ProfileUpdate
from app.schemas.review import (
    ReviewCreate,
    ReviewUpdate,
    ReviewRead,
    ReviewListResponse,
    ReviewResponse,
    ReviewStatsResponse,
    ReviewSyncStatusResponse,
    ReviewSyncResponse,
)
from app.schemas.pin import PinCreate, PinUpdate, PinRead, PinWithBusiness
from app.schemas.ingest import IngestRequest, IngestResults, LocalityResult, IngestResponse
from app.schemas.yelp import YelpBusiness, YelpReview, YelpSearchPage

__all__ = [
    "BusinessRecord",
    "BusinessCard",
    "BusinessDetail",
    "BusinessListResponse",
    "BusinessDetailResponse",
    "ProfileSummary",
    "ProfileRead",
    "ProfileUpdate",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewRead",
    "ReviewListResponse",
    "ReviewResponse",
    "ReviewStatsResponse",
    "ReviewSyncStatusResponse",
    "ReviewSyncResponse",
    "PinCreate",
    "PinUpdate",
    "PinRead",
    "PinWithBusiness",
    "IngestRequest",
    "IngestResults",
    "LocalityResult",
    "IngestResponse",
    "YelpBusiness",
    "YelpReview",
    "YelpSearchPage",
]
