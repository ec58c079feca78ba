# app/api/routes/admin.py
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional, List

from app.core.config import settings
from app.core.exceptions import InvalidStateError, NotFoundError
from app.db.base import get_db, transaction
from app.db.models.user import User
from app.db.models.provider import Provider
from app.db.models.category import Category
from app.db.models.service import Service
from app.db.models.service_request import ServiceRequest
from app.db.models.booking import Booking
from app.schemas.admin import (
    AdminProviderPage,
    CategoryAdminItem,
    ExpireQuotesResponse,
    UserAdminUpdate,
    UserDetail,
    UserListItem,
    UserPage,
)
from app.schemas.booking import BookingResponse
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from app.schemas.provider import ProviderApprove, ProviderResponse
from app.core.security import require_admin
from app.services import providers as provider_service
from app.services import quotes as quote_service
from app.services import reviews as review_service
from app.services import users as user_service
from app.services.filters import UserSearchFilter, UserTypeFilter, apply_filters, page_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# -------------------------
# 1. Users
# -------------------------
@router.get("/users", response_model=UserPage)
def list_users(
    user_type: Optional[str] = Query(None, description="customer/provider/admin"),
    search: Optional[str] = Query(None, description="matches email or name"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    filters = []
    if user_type:
        filters.append(UserTypeFilter(user_type))
    if search:
        filters.append(UserSearchFilter(search))

    q = apply_filters(db.query(User), filters)
    total = q.count()
    users = q.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()

    items = []
    for u in users:
        request_count = db.query(func.count(ServiceRequest.id)).filter(ServiceRequest.customer_id == u.id).scalar() or 0
        booking_count = db.query(func.count(Booking.id)).filter(Booking.customer_id == u.id).scalar() or 0
        items.append(UserListItem(
            id=u.id,
            email=u.email,
            name=u.name,
            user_type=u.user_type,
            is_verified=u.is_verified,
            created_at=u.created_at,
            request_count=int(request_count),
            booking_count=int(booking_count),
        ))
    return {"data": items, "meta": page_meta(total, page, limit)}


def _get_user(db: Session, user_id: int) -> User:
    u = db.get(User, user_id)
    if not u:
        raise NotFoundError("User not found")
    return u


@router.get("/users/{user_id}", response_model=UserDetail)
def get_user(user_id: int, db: Session = Depends(get_db)):
    u = _get_user(db, user_id)
    recent_requests = (
        db.query(ServiceRequest)
        .filter(ServiceRequest.customer_id == u.id)
        .order_by(ServiceRequest.created_at.desc())
        .limit(10)
        .all()
    )
    recent_bookings = (
        db.query(Booking)
        .filter(Booking.customer_id == u.id)
        .order_by(Booking.created_at.desc())
        .limit(10)
        .all()
    )
    return UserDetail(
        id=u.id,
        email=u.email,
        name=u.name,
        phone=u.phone,
        user_type=u.user_type,
        is_verified=u.is_verified,
        created_at=u.created_at,
        provider=ProviderResponse.model_validate(u.provider) if u.provider else None,
        recent_requests=recent_requests,
        recent_bookings=recent_bookings,
    )


@router.patch("/users/{user_id}", response_model=UserListItem)
def update_user(user_id: int, payload: UserAdminUpdate, db: Session = Depends(get_db)):
    u = _get_user(db, user_id)
    with transaction(db):
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(u, field, value)
    return UserListItem(
        id=u.id, email=u.email, name=u.name, user_type=u.user_type,
        is_verified=u.is_verified, created_at=u.created_at,
    )


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    user_service.delete_user(db, _get_user(db, user_id))
    logger.info("admin deleted user %s", user_id)


# --------------------------------------------------
# 2. Providers: list & approve
# --------------------------------------------------
@router.get("/providers", response_model=AdminProviderPage)
def list_providers(
    approved: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    q = db.query(Provider)
    if approved is not None:
        q = q.filter(Provider.is_approved == approved)
    total = q.count()
    rows = q.order_by(Provider.created_at.desc(), Provider.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return {"data": rows, "meta": page_meta(total, page, limit)}


@router.get("/providers/pending", response_model=AdminProviderPage)
def pending_providers(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return list_providers(approved=False, page=page, limit=limit, db=db)


@router.patch("/providers/{provider_id}/approve", response_model=ProviderResponse)
def approve_provider(provider_id: int, payload: ProviderApprove, db: Session = Depends(get_db)):
    return provider_service.set_approval(db, provider_id, payload.is_approved)


# --------------------------------------------------
# 3. Categories
# --------------------------------------------------
def _category_counts(db: Session, category_id: int) -> tuple[int, int]:
    services = db.query(func.count(Service.id)).filter(Service.category_id == category_id).scalar() or 0
    requests = db.query(func.count(ServiceRequest.id)).filter(ServiceRequest.category_id == category_id).scalar() or 0
    return int(services), int(requests)


@router.get("/categories", response_model=List[CategoryAdminItem])
def list_categories(db: Session = Depends(get_db)):
    items = []
    for cat in db.query(Category).order_by(Category.name_de).all():
        services, requests = _category_counts(db, cat.id)
        items.append(CategoryAdminItem(
            id=cat.id,
            slug=cat.slug,
            name_de=cat.name_de,
            name_en=cat.name_en,
            icon=cat.icon,
            is_active=cat.is_active,
            parent_id=cat.parent_id,
            service_count=services,
            request_count=requests,
        ))
    return items


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    if payload.parent_id is not None and not db.get(Category, payload.parent_id):
        raise NotFoundError("Parent category not found")

    category = Category(**payload.model_dump(), is_active=True)
    with transaction(db, f"Category slug '{payload.slug}' already exists"):
        db.add(category)
    return category


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    with transaction(db):
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(category, field, value)
    return category


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")

    services, requests = _category_counts(db, category.id)
    if services or requests:
        raise InvalidStateError("Cannot delete category with existing services or requests")

    with transaction(db):
        db.delete(category)


# --------------------------------------------------
# 4. Bookings, quotes, reviews
# --------------------------------------------------
@router.get("/bookings", response_model=List[BookingResponse])
def admin_list_bookings(
    status: Optional[str] = Query(None),
    payment_status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    q = db.query(Booking)
    if status:
        q = q.filter(Booking.status == status)
    if payment_status:
        q = q.filter(Booking.payment_status == payment_status)
    offset = (page - 1) * limit
    return q.order_by(Booking.created_at.desc()).offset(offset).limit(limit).all()


@router.post("/quotes/expire", response_model=ExpireQuotesResponse)
def expire_quotes(db: Session = Depends(get_db)):
    return {"expired": quote_service.expire_stale_quotes(db)}


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def admin_delete_review(review_id: int, db: Session = Depends(get_db)):
    review_service.delete_review(db, review_id)
