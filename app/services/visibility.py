# app/services/visibility.py
"""
Which open requests a provider is shown as "new requests".

A request is visible to provider P iff it is open, its category is one of
P's active service categories, P has not quoted it yet, and its location lies
inside P's service area. Results are newest first.
"""
import logging

from sqlalchemy.orm import Session, selectinload

from app.db.models.provider import Provider
from app.db.models.service_request import ServiceRequest
from app.services.filters import (
    NotQuotedByFilter,
    RequestCategoryFilter,
    RequestNearFilter,
    RequestStatusFilter,
    QueryFilter,
    search,
)

logger = logging.getLogger(__name__)


def active_category_ids(provider: Provider) -> set[int]:
    return {s.category_id for s in provider.services if s.is_active}


def visibility_filters(provider: Provider) -> list[QueryFilter]:
    return [
        RequestStatusFilter("open"),
        RequestCategoryFilter(frozenset(active_category_ids(provider))),
        NotQuotedByFilter(provider.id),
        RequestNearFilter(
            provider.service_area_lat,
            provider.service_area_lng,
            provider.service_area_radius,
        ),
    ]


def _candidates(db: Session):
    return (
        db.query(ServiceRequest)
        .options(selectinload(ServiceRequest.category))
        .order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc())
    )


def visible_requests_for_provider(db: Session, provider: Provider, page: int = 1, limit: int = 10):
    """Returns (requests_on_page, total_visible)."""
    if not active_category_ids(provider):
        return [], 0
    items, total = search(_candidates(db), visibility_filters(provider), page, limit)
    logger.debug("provider %s sees %s open requests", provider.id, total)
    return items, total


def count_visible_requests(db: Session, provider: Provider) -> int:
    _, total = visible_requests_for_provider(db, provider, page=1, limit=1)
    return total


def is_visible_to(provider: Provider, request: ServiceRequest) -> bool:
    """Same rule evaluated for a single, already loaded request."""
    if request.status != "open":
        return False
    if request.category_id not in active_category_ids(provider):
        return False
    if any(q.provider_id == provider.id for q in request.quotes):
        return False
    return RequestNearFilter(
        provider.service_area_lat,
        provider.service_area_lng,
        provider.service_area_radius,
    ).matches(request)
