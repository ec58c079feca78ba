# app/services/requests.py
import logging
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.db.base import transaction
from app.db.models.category import Category
from app.db.models.service_request import ServiceRequest
from app.db.models.user import User
from app.services.filters import build_request_filters, search

logger = logging.getLogger(__name__)

# fields a customer may change on an open request; status moves only through the workflow
EDITABLE_FIELDS = (
    "title", "description", "address", "city", "postal_code",
    "lat", "lng", "preferred_date", "budget_min", "budget_max",
)


def resolve_category(db: Session, ref) -> Category:
    """Look a category up by id or slug. A string matching a slug wins over an all-digit id."""
    category = None
    if isinstance(ref, str):
        category = db.query(Category).filter(Category.slug == ref).first()
        if category is None and ref.isdigit():
            category = db.get(Category, int(ref))
    elif isinstance(ref, int):
        category = db.get(Category, ref)
    if not category:
        raise NotFoundError("Category not found")
    return category


def _check_budget(budget_min: Optional[float], budget_max: Optional[float]) -> None:
    if budget_min is not None and budget_max is not None and budget_min > budget_max:
        raise ValidationError("budget_min must not exceed budget_max")


def create_request(db: Session, user: User, data: dict) -> ServiceRequest:
    if user.user_type != "customer":
        raise ForbiddenError("Only customers can post service requests")

    category = resolve_category(db, data.pop("category"))
    if not category.is_active:
        raise ValidationError("Category is not active")
    _check_budget(data.get("budget_min"), data.get("budget_max"))

    request = ServiceRequest(customer_id=user.id, category_id=category.id, status="open", **data)
    with transaction(db):
        db.add(request)

    logger.info("customer %s posted request %s in %s", user.id, request.id, category.slug)
    return request


def get_request(db: Session, request_id: int) -> ServiceRequest:
    request = (
        db.query(ServiceRequest)
        .options(selectinload(ServiceRequest.category), selectinload(ServiceRequest.quotes))
        .filter(ServiceRequest.id == request_id)
        .first()
    )
    if not request:
        raise NotFoundError("Service request not found")
    return request


def _owned_request(db: Session, user: User, request_id: int, action: str) -> ServiceRequest:
    request = get_request(db, request_id)
    if request.customer_id != user.id:
        raise ForbiddenError(f"Not authorized to {action} this request")
    return request


def update_request(db: Session, user: User, request_id: int, changes: dict) -> ServiceRequest:
    request = _owned_request(db, user, request_id, "update")
    if request.status != "open":
        raise InvalidStateError(f"Cannot edit a request that is {request.status}")

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    _check_budget(
        changes.get("budget_min", request.budget_min),
        changes.get("budget_max", request.budget_max),
    )
    with transaction(db):
        for field, value in changes.items():
            setattr(request, field, value)
    return request


def cancel_request(db: Session, user: User, request_id: int) -> ServiceRequest:
    request = _owned_request(db, user, request_id, "cancel")
    if request.status != "open":
        raise InvalidStateError("Can only cancel open requests")

    with transaction(db):
        request.status = "cancelled"
        for quote in request.quotes:
            if quote.status == "pending":
                quote.status = "rejected"

    logger.info("request %s cancelled by customer %s", request.id, user.id)
    return request


def browse_requests(
    db: Session,
    category: Optional[str] = None,
    postal_code: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: Optional[float] = None,
    status: str = "open",
    page: int = 1,
    limit: int = 10,
):
    category_ids = [resolve_category(db, category).id] if category else None
    filters = build_request_filters(status, category_ids, postal_code, lat, lng, radius)
    query = (
        db.query(ServiceRequest)
        .options(selectinload(ServiceRequest.category))
        .order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc())
    )
    return search(query, filters, page, limit)


def requests_for_customer(db: Session, user: User, status: Optional[str] = None) -> list[ServiceRequest]:
    q = db.query(ServiceRequest).filter(ServiceRequest.customer_id == user.id)
    if status:
        q = q.filter(ServiceRequest.status == status)
    return q.order_by(ServiceRequest.created_at.desc()).all()
