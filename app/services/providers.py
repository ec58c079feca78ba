# app/services/providers.py
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.db.base import transaction
from app.db.models.booking import Booking
from app.db.models.category import Category
from app.db.models.provider import Provider
from app.db.models.quote import Quote
from app.db.models.service import Service
from app.db.models.user import User
from app.services.bookings import ACTIVE_STATUSES
from app.services.filters import build_provider_filters, search
from app.services.visibility import count_visible_requests, visible_requests_for_provider

logger = logging.getLogger(__name__)


def create_provider(db: Session, user: User, data: dict) -> Provider:
    if user.user_type != "provider":
        raise ForbiddenError("User must be registered as a provider")

    existing = db.query(Provider).filter(Provider.user_id == user.id).first()
    if existing:
        raise ConflictError("User already has a provider profile")

    provider = Provider(user_id=user.id, is_approved=False, rating_avg=0.0, total_reviews=0, **data)
    with transaction(db, "User already has a provider profile"):
        db.add(provider)

    logger.info("provider profile %s created for user %s", provider.id, user.id)
    return provider


def get_provider(db: Session, provider_id: int) -> Provider:
    provider = db.get(Provider, provider_id)
    if not provider:
        raise NotFoundError("Provider not found")
    return provider


def get_my_provider(db: Session, user: User) -> Provider:
    provider = db.query(Provider).filter(Provider.user_id == user.id).first()
    if not provider:
        raise NotFoundError("Provider profile not found")
    return provider


def update_provider(db: Session, user: User, provider_id: int, changes: dict) -> Provider:
    provider = get_provider(db, provider_id)
    if provider.user_id != user.id:
        raise ForbiddenError("Not authorized to update this provider")

    with transaction(db):
        for field, value in changes.items():
            setattr(provider, field, value)
    return provider


def set_approval(db: Session, provider_id: int, approved: bool) -> Provider:
    provider = get_provider(db, provider_id)
    with transaction(db):
        provider.is_approved = approved
    logger.info("provider %s approval set to %s", provider.id, approved)
    return provider


def search_providers(
    db: Session,
    category_id: Optional[int] = None,
    min_rating: Optional[float] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: Optional[float] = None,
    page: int = 1,
    limit: int = 10,
):
    filters = build_provider_filters(category_id, min_rating, lat, lng, radius)
    query = (
        db.query(Provider)
        .options(selectinload(Provider.user))
        .order_by(Provider.rating_avg.desc(), Provider.id.asc())
    )
    return search(query, filters, page, limit)


def new_requests(db: Session, user: User, page: int = 1, limit: int = 10):
    provider = get_my_provider(db, user)
    return visible_requests_for_provider(db, provider, page, limit)


def provider_stats(db: Session, user: User) -> dict:
    provider = get_my_provider(db, user)

    total_quotes = db.query(func.count(Quote.id)).filter(Quote.provider_id == provider.id).scalar() or 0
    accepted_quotes = db.query(func.count(Quote.id)).filter(
        Quote.provider_id == provider.id, Quote.status == "accepted"
    ).scalar() or 0
    active_bookings = db.query(func.count(Booking.id)).filter(
        Booking.provider_id == provider.id, Booking.status.in_(ACTIVE_STATUSES)
    ).scalar() or 0
    completed_bookings = db.query(func.count(Booking.id)).filter(
        Booking.provider_id == provider.id, Booking.status == "completed"
    ).scalar() or 0
    total_earnings = db.query(func.coalesce(func.sum(Booking.total_price), 0)).filter(
        Booking.provider_id == provider.id,
        Booking.status == "completed",
        Booking.payment_status == "paid",
    ).scalar() or 0.0

    return {
        "total_quotes": int(total_quotes),
        "accepted_quotes": int(accepted_quotes),
        "conversion_rate": (accepted_quotes / total_quotes) * 100 if total_quotes else 0.0,
        "active_bookings": int(active_bookings),
        "completed_bookings": int(completed_bookings),
        "total_earnings": float(total_earnings),
        "rating": provider.rating_avg,
        "total_reviews": provider.total_reviews,
    }


def provider_dashboard(db: Session, user: User) -> dict:
    provider = get_my_provider(db, user)

    recent, _ = visible_requests_for_provider(db, provider, page=1, limit=3)
    active = (
        db.query(Booking)
        .filter(Booking.provider_id == provider.id, Booking.status.in_(ACTIVE_STATUSES))
        .order_by(Booking.scheduled_date.asc())
        .limit(3)
        .all()
    )
    completed = db.query(func.count(Booking.id)).filter(
        Booking.provider_id == provider.id, Booking.status == "completed"
    ).scalar() or 0
    active_count = db.query(func.count(Booking.id)).filter(
        Booking.provider_id == provider.id, Booking.status.in_(ACTIVE_STATUSES)
    ).scalar() or 0

    return {
        "stats": {
            "new_requests": count_visible_requests(db, provider),
            "active_orders": int(active_count),
            "completed": int(completed),
            "rating": provider.rating_avg,
        },
        "recent_requests": recent,
        "active_bookings": active,
    }


# ---- provider offerings ----

def _check_price_range(price_min: Optional[float], price_max: Optional[float]) -> None:
    if price_min is not None and price_max is not None and price_min > price_max:
        raise ValidationError("price_min must not exceed price_max")


def create_service(db: Session, user: User, data: dict) -> Service:
    provider = get_my_provider(db, user)

    category = db.get(Category, data["category_id"])
    if not category or not category.is_active:
        raise NotFoundError("Category not found")
    _check_price_range(data.get("price_min"), data.get("price_max"))

    service = Service(provider_id=provider.id, **data)
    with transaction(db):
        db.add(service)

    logger.info("provider %s now offers %s (service %s)", provider.id, category.slug, service.id)
    return service


def _owned_service(db: Session, user: User, service_id: int) -> Service:
    service = db.get(Service, service_id)
    if not service:
        raise NotFoundError("Service not found")
    provider = get_my_provider(db, user)
    if service.provider_id != provider.id:
        raise ForbiddenError("You cannot change another provider's service")
    return service


def update_service(db: Session, user: User, service_id: int, changes: dict) -> Service:
    service = _owned_service(db, user, service_id)
    if "category_id" in changes:
        category = db.get(Category, changes["category_id"])
        if not category or not category.is_active:
            raise NotFoundError("Category not found")
    _check_price_range(
        changes.get("price_min", service.price_min),
        changes.get("price_max", service.price_max),
    )
    with transaction(db):
        for field, value in changes.items():
            setattr(service, field, value)
    return service


def deactivate_service(db: Session, user: User, service_id: int) -> Service:
    service = _owned_service(db, user, service_id)
    with transaction(db):
        service.is_active = False
    return service
