# app/services/quotes.py
"""
Quote lifecycle: pending -> accepted | rejected | expired (all terminal).

Accepting a quote is one transaction: the quote is accepted, sibling pending
quotes on the same request are rejected, the request moves to in_progress and
exactly one booking is created at the quoted price.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.db.base import transaction
from app.db.models.booking import Booking
from app.db.models.provider import Provider
from app.db.models.quote import Quote
from app.db.models.service_request import ServiceRequest
from app.db.models.user import User
from app.services.visibility import active_category_ids

logger = logging.getLogger(__name__)


def get_provider_for_user(db: Session, user: User) -> Provider:
    provider = db.query(Provider).filter(Provider.user_id == user.id).first()
    if not provider:
        raise NotFoundError("Provider profile not found")
    return provider


def get_quote(db: Session, quote_id: int) -> Quote:
    quote = db.get(Quote, quote_id)
    if not quote:
        raise NotFoundError("Quote not found")
    return quote


def create_quote(
    db: Session,
    user: User,
    request_id: int,
    price: float,
    message: str,
    valid_until: datetime,
) -> Quote:
    provider = get_provider_for_user(db, user)
    if not provider.is_approved:
        logger.warning("unapproved provider %s tried to quote request %s", provider.id, request_id)
        raise ForbiddenError("Provider is not approved yet")

    request = db.get(ServiceRequest, request_id)
    if not request:
        raise NotFoundError("Service request not found")

    if request.status != "open":
        raise InvalidStateError(f"Cannot quote a request that is {request.status}")

    if request.category_id not in active_category_ids(provider):
        raise ForbiddenError("Provider does not offer services in this category")

    if price < 0:
        raise ValidationError("price must not be negative")
    if valid_until <= datetime.utcnow():
        raise ValidationError("valid_until must be in the future")

    existing = db.query(Quote).filter(Quote.request_id == request.id, Quote.provider_id == provider.id).first()
    if existing:
        raise ConflictError("You have already quoted this request")

    quote = Quote(
        request_id=request.id,
        provider_id=provider.id,
        price=price,
        message=message,
        valid_until=valid_until,
        status="pending",
    )
    with transaction(db, "You have already quoted this request"):
        db.add(quote)

    logger.info("provider %s quoted %.2f on request %s (quote %s)", provider.id, price, request.id, quote.id)
    return quote


def accept_quote(db: Session, user: User, quote_id: int, scheduled_date: Optional[datetime] = None) -> Booking:
    quote = get_quote(db, quote_id)

    with transaction(db, "This request already has an active booking"):
        # serialize concurrent accepts on the same request
        request = (
            db.query(ServiceRequest)
            .filter(ServiceRequest.id == quote.request_id)
            .with_for_update()
            .populate_existing()
            .one()
        )
        db.refresh(quote)
        if request.customer_id != user.id:
            raise ForbiddenError("Not authorized to accept quotes on this request")
        if quote.status != "pending":
            raise InvalidStateError(f"Quote is already {quote.status}")
        if quote.valid_until < datetime.utcnow():
            raise InvalidStateError("Quote has expired")
        if request.status != "open":
            raise InvalidStateError(f"Request is {request.status}, not open")

        scheduled = scheduled_date or request.preferred_date
        if scheduled is None:
            raise ValidationError("scheduled_date is required when the request has no preferred date")

        quote.status = "accepted"
        siblings = (
            db.query(Quote)
            .filter(Quote.request_id == request.id, Quote.id != quote.id, Quote.status == "pending")
            .all()
        )
        for sibling in siblings:
            sibling.status = "rejected"

        request.status = "in_progress"

        booking = Booking(
            quote_id=quote.id,
            request_id=request.id,
            customer_id=request.customer_id,
            provider_id=quote.provider_id,
            scheduled_date=scheduled,
            status="pending",
            total_price=quote.price,
            payment_status="pending",
        )
        db.add(booking)

    logger.info(
        "quote %s accepted on request %s; booking %s created, %d sibling quotes rejected",
        quote.id, request.id, booking.id, len(siblings),
    )
    return booking


def reject_quote(db: Session, user: User, quote_id: int) -> Quote:
    quote = get_quote(db, quote_id)
    if quote.request.customer_id != user.id:
        raise ForbiddenError("Not authorized to reject quotes on this request")
    if quote.status != "pending":
        raise InvalidStateError(f"Quote is already {quote.status}")

    with transaction(db):
        quote.status = "rejected"

    logger.info("quote %s rejected", quote.id)
    return quote


def expire_stale_quotes(db: Session, now: Optional[datetime] = None) -> int:
    """Mark pending quotes past their valid_until as expired. Returns how many."""
    now = now or datetime.utcnow()
    with transaction(db):
        stale = db.query(Quote).filter(Quote.status == "pending", Quote.valid_until < now).all()
        for quote in stale:
            quote.status = "expired"

    if stale:
        logger.info("expired %d stale quotes", len(stale))
    return len(stale)


def quotes_for_provider(db: Session, user: User, status: Optional[str] = None) -> list[Quote]:
    provider = get_provider_for_user(db, user)
    q = db.query(Quote).filter(Quote.provider_id == provider.id)
    if status:
        q = q.filter(Quote.status == status)
    return q.order_by(Quote.created_at.desc()).all()


def can_view_quotes(user: Optional[User], request: ServiceRequest) -> bool:
    """Competing quotes are visible to the request owner and admins only."""
    return user is not None and (request.customer_id == user.id or user.user_type == "admin")


def quotes_for_request(db: Session, user: User, request_id: int) -> list[Quote]:
    request = db.get(ServiceRequest, request_id)
    if not request:
        raise NotFoundError("Service request not found")
    if not can_view_quotes(user, request):
        raise ForbiddenError("Not authorized to view quotes on this request")
    return list(request.quotes)
