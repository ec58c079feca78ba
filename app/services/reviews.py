# app/services/reviews.py
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.db.base import transaction
from app.db.models.booking import Booking
from app.db.models.provider import Provider
from app.db.models.review import Review
from app.db.models.user import User

logger = logging.getLogger(__name__)


def recalculate_provider_rating(db: Session, provider: Provider) -> None:
    """Recompute the denormalized rating from all reviews of the provider's user.

    Runs inside the caller's transaction; pending inserts/deletes are flushed first.
    """
    db.flush()
    total, avg = (
        db.query(func.count(Review.id), func.avg(Review.rating))
        .filter(Review.reviewee_id == provider.user_id)
        .one()
    )
    provider.total_reviews = int(total or 0)
    provider.rating_avg = float(avg) if avg is not None else 0.0


def get_review(db: Session, review_id: int) -> Review:
    review = db.get(Review, review_id)
    if not review:
        raise NotFoundError("Review not found")
    return review


def create_review(db: Session, user: User, booking_id: int, rating: int, comment: Optional[str] = None) -> Review:
    if not 1 <= rating <= 5:
        raise ValidationError("rating must be between 1 and 5")

    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    if booking.customer_id != user.id:
        raise ForbiddenError("Booking does not belong to you")

    if booking.status != "completed":
        raise InvalidStateError("Can only review completed bookings")

    existing = db.query(Review).filter(Review.booking_id == booking.id).first()
    if existing:
        raise ConflictError("Review for this booking already exists")

    provider = booking.provider
    review = Review(
        booking_id=booking.id,
        reviewer_id=user.id,
        reviewee_id=provider.user_id,
        rating=rating,
        comment=comment,
    )
    with transaction(db, "Review for this booking already exists"):
        db.add(review)
        recalculate_provider_rating(db, provider)

    logger.info("booking %s reviewed %s/5; provider %s now %.2f", booking.id, rating, provider.id, provider.rating_avg)
    return review


def reply_to_review(db: Session, user: User, review_id: int, reply: str) -> Review:
    review = get_review(db, review_id)

    if review.reviewee_id != user.id:
        raise ForbiddenError("Not authorized to reply to this review")

    if review.provider_reply:
        raise InvalidStateError("This review already has a reply")

    if not reply or not reply.strip():
        raise ValidationError("reply must not be empty")

    with transaction(db):
        review.provider_reply = reply.strip()

    logger.info("provider user %s replied to review %s", user.id, review.id)
    return review


def delete_review(db: Session, review_id: int) -> None:
    review = get_review(db, review_id)
    provider = db.query(Provider).filter(Provider.user_id == review.reviewee_id).first()

    with transaction(db):
        db.delete(review)
        if provider:
            recalculate_provider_rating(db, provider)

    logger.info("review %s deleted", review_id)


def reviews_for_provider(db: Session, provider: Provider, page: int = 1, limit: int = 10):
    q = db.query(Review).filter(Review.reviewee_id == provider.user_id)
    total = q.count()
    rows = q.order_by(Review.created_at.desc(), Review.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def rating_breakdown(db: Session, provider: Provider) -> dict[int, int]:
    rows = (
        db.query(Review.rating, func.count(Review.id))
        .filter(Review.reviewee_id == provider.user_id)
        .group_by(Review.rating)
        .all()
    )
    counts = {star: 0 for star in range(1, 6)}
    for rating, count in rows:
        counts[int(rating)] = int(count)
    return counts
