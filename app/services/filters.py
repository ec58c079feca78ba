# app/services/filters.py
"""
Composable search filters.

Each optional search field is its own small frozen dataclass. Column filters
narrow a SQLAlchemy query via `apply`; geographic filters cannot be expressed
portably in SQL, so they implement `matches` and run in memory on the
candidate rows *before* pagination.
"""
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from sqlalchemy import or_

from app.db.models.provider import Provider
from app.db.models.quote import Quote
from app.db.models.service import Service
from app.db.models.service_request import ServiceRequest
from app.db.models.user import User
from app.services.geo import haversine_km


class QueryFilter:
    def apply(self, query):
        return query

    def matches(self, row) -> bool:
        return True


# ---- service requests ----

@dataclass(frozen=True)
class RequestStatusFilter(QueryFilter):
    status: str

    def apply(self, query):
        return query.filter(ServiceRequest.status == self.status)


@dataclass(frozen=True)
class RequestCategoryFilter(QueryFilter):
    category_ids: frozenset

    def apply(self, query):
        return query.filter(ServiceRequest.category_id.in_(self.category_ids))


@dataclass(frozen=True)
class PostalPrefixFilter(QueryFilter):
    """Matches requests in the same postal region (first two characters)."""
    postal_code: str

    def apply(self, query):
        return query.filter(ServiceRequest.postal_code.startswith(self.postal_code[:2]))


@dataclass(frozen=True)
class NotQuotedByFilter(QueryFilter):
    provider_id: int

    def apply(self, query):
        return query.filter(~ServiceRequest.quotes.any(Quote.provider_id == self.provider_id))


@dataclass(frozen=True)
class RequestNearFilter(QueryFilter):
    lat: float
    lng: float
    radius_km: float

    def matches(self, row) -> bool:
        return haversine_km(self.lat, self.lng, row.lat, row.lng) <= self.radius_km


# ---- providers ----

@dataclass(frozen=True)
class ApprovedProviderFilter(QueryFilter):
    approved: bool = True

    def apply(self, query):
        return query.filter(Provider.is_approved == self.approved)


@dataclass(frozen=True)
class MinRatingFilter(QueryFilter):
    min_rating: float

    def apply(self, query):
        return query.filter(Provider.rating_avg >= self.min_rating)


@dataclass(frozen=True)
class ProviderCategoryFilter(QueryFilter):
    """Providers with at least one active service in the category."""
    category_id: int

    def apply(self, query):
        return query.filter(
            Provider.services.any((Service.category_id == self.category_id) & (Service.is_active == True))  # noqa: E712
        )


@dataclass(frozen=True)
class ProviderNearFilter(QueryFilter):
    lat: float
    lng: float
    radius_km: float

    def matches(self, row) -> bool:
        return haversine_km(self.lat, self.lng, row.service_area_lat, row.service_area_lng) <= self.radius_km


# ---- users ----

@dataclass(frozen=True)
class UserTypeFilter(QueryFilter):
    user_type: str

    def apply(self, query):
        return query.filter(User.user_type == self.user_type)


@dataclass(frozen=True)
class UserSearchFilter(QueryFilter):
    text: str

    def apply(self, query):
        like = f"%{self.text.strip()}%"
        return query.filter(or_(User.email.ilike(like), User.name.ilike(like)))


def apply_filters(query, filters: Iterable[QueryFilter]):
    for f in filters:
        query = f.apply(query)
    return query


def match_all(rows: Iterable, filters: Sequence[QueryFilter]) -> list:
    return [row for row in rows if all(f.matches(row) for f in filters)]


def has_row_filters(filters: Sequence[QueryFilter]) -> bool:
    return any(type(f).matches is not QueryFilter.matches for f in filters)


def search(query, filters: Sequence[QueryFilter], page: int, limit: int) -> tuple[list, int]:
    """
    Apply column filters in SQL and row filters in memory, then paginate.
    Returns (page_items, total_matching).
    """
    query = apply_filters(query, filters)
    offset = (page - 1) * limit
    if not has_row_filters(filters):
        total = query.order_by(None).count()
        return query.offset(offset).limit(limit).all(), total

    rows = match_all(query.all(), filters)
    return rows[offset:offset + limit], len(rows)


def page_meta(total: int, page: int, limit: int) -> dict:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def build_request_filters(
    status: Optional[str] = "open",
    category_ids: Optional[Iterable[int]] = None,
    postal_code: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: Optional[float] = None,
) -> list[QueryFilter]:
    filters: list[QueryFilter] = []
    if status:
        filters.append(RequestStatusFilter(status))
    if category_ids is not None:
        filters.append(RequestCategoryFilter(frozenset(category_ids)))
    if postal_code:
        filters.append(PostalPrefixFilter(postal_code))
    if lat is not None and lng is not None and radius is not None:
        filters.append(RequestNearFilter(lat, lng, radius))
    return filters


def build_provider_filters(
    category_id: Optional[int] = None,
    min_rating: Optional[float] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: Optional[float] = None,
) -> list[QueryFilter]:
    filters: list[QueryFilter] = [ApprovedProviderFilter(True)]
    if category_id is not None:
        filters.append(ProviderCategoryFilter(category_id))
    if min_rating is not None:
        filters.append(MinRatingFilter(min_rating))
    if lat is not None and lng is not None and radius is not None:
        filters.append(ProviderNearFilter(lat, lng, radius))
    return filters
