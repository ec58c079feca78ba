# app/api/routes/providers.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.rate_limit import relaxed_limit
from app.core.security import get_current_user, require_user_type
from app.db.base import get_db
from app.db.models.user import User
from app.schemas.booking import BookingResponse
from app.schemas.provider import ProviderCreate, ProviderPage, ProviderResponse, ProviderUpdate
from app.schemas.provider_dashboard import DashboardResponse, NewRequestsResponse, StatsResponse
from app.schemas.review import ProviderReviewsResponse, ReviewReply, ReviewResponse
from app.services import bookings as booking_service
from app.services import providers as provider_service
from app.services import reviews as review_service
from app.services.filters import page_meta

router = APIRouter(prefix="/providers", tags=["providers"])

provider_only = require_user_type("provider")


@router.post("", response_model=ProviderResponse, status_code=status.HTTP_201_CREATED)
def create_provider_profile(
    payload: ProviderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return provider_service.create_provider(db, current_user, payload.model_dump())


@router.get("", response_model=ProviderPage)
@relaxed_limit
def search_providers(
    request: Request,
    category_id: Optional[int] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0.0, le=5.0),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, description="km around lat/lng"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """
    Approved providers, best rated first.
    Distance filtering (lat/lng/radius) is applied before pagination.
    """
    items, total = provider_service.search_providers(db, category_id, min_rating, lat, lng, radius, page, limit)
    return {"data": items, "meta": page_meta(total, page, limit)}


@router.get("/me", response_model=ProviderResponse)
def my_profile(db: Session = Depends(get_db), current_user: User = Depends(provider_only)):
    return provider_service.get_my_provider(db, current_user)


@router.get("/me/stats", response_model=StatsResponse)
def my_stats(db: Session = Depends(get_db), current_user: User = Depends(provider_only)):
    return provider_service.provider_stats(db, current_user)


@router.get("/me/dashboard", response_model=DashboardResponse)
def my_dashboard(db: Session = Depends(get_db), current_user: User = Depends(provider_only)):
    return provider_service.provider_dashboard(db, current_user)


@router.get("/me/requests", response_model=NewRequestsResponse)
def my_new_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only),
):
    """Open requests in my categories and service area that I have not quoted yet."""
    items, total = provider_service.new_requests(db, current_user, page, limit)
    return {"data": items, "meta": page_meta(total, page, limit)}


@router.get("/me/bookings", response_model=list[BookingResponse])
def my_bookings(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only),
):
    provider = provider_service.get_my_provider(db, current_user)
    return booking_service.bookings_for_provider(db, provider.id, status)


@router.get("/me/reviews", response_model=ProviderReviewsResponse)
def my_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only),
):
    provider = provider_service.get_my_provider(db, current_user)
    return _reviews_page(db, provider, page, limit)


@router.post("/me/reviews/{review_id}/reply", response_model=ReviewResponse)
def reply_to_review(
    review_id: int,
    payload: ReviewReply,
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only),
):
    return review_service.reply_to_review(db, current_user, review_id, payload.reply)


@router.get("/{provider_id}", response_model=ProviderResponse)
@relaxed_limit
def get_provider(request: Request, provider_id: int, db: Session = Depends(get_db)):
    return provider_service.get_provider(db, provider_id)


@router.put("/{provider_id}", response_model=ProviderResponse)
def update_provider(
    provider_id: int,
    payload: ProviderUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return provider_service.update_provider(db, current_user, provider_id, payload.model_dump(exclude_unset=True))


def _reviews_page(db: Session, provider, page: int, limit: int) -> dict:
    rows, total = review_service.reviews_for_provider(db, provider, page, limit)
    return {
        "data": rows,
        "stats": {
            "average": provider.rating_avg,
            "total": provider.total_reviews,
            "breakdown": review_service.rating_breakdown(db, provider),
        },
        "meta": page_meta(total, page, limit),
    }
