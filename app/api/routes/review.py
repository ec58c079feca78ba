# app/api/routes/review.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.base import get_db
from app.db.models.user import User
from app.schemas.review import ReviewCreate, ReviewReply, ReviewResponse
from app.core.security import get_current_user, require_user_type
from app.services import providers as provider_service
from app.services import reviews as review_service

router = APIRouter(prefix="/reviews", tags=["reviews"])

# Create review (customer)
@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    review_in: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user_type("customer")),
):
    return review_service.create_review(db, current_user, review_in.booking_id, review_in.rating, review_in.comment)

# List reviews for a provider (public)
@router.get("/provider/{provider_id}", response_model=list[ReviewResponse])
def list_provider_reviews(
    provider_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    provider = provider_service.get_provider(db, provider_id)
    rows, _ = review_service.reviews_for_provider(db, provider, page, limit)
    return rows

# Reviewee (provider) replies once
@router.post("/{review_id}/reply", response_model=ReviewResponse)
def reply_to_review(
    review_id: int,
    payload: ReviewReply,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return review_service.reply_to_review(db, current_user, review_id, payload.reply)
