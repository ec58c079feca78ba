# app/api/routes/requests.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import get_current_user, get_optional_user, require_user_type
from app.db.base import get_db
from app.db.models.user import User
from app.schemas.quote import QuoteResponse
from app.schemas.request import RequestCreate, RequestDetail, RequestPage, RequestResponse, RequestUpdate
from app.services import quotes as quote_service
from app.services import requests as request_service
from app.services.filters import page_meta

router = APIRouter(prefix="/requests", tags=["requests"])

customer_only = require_user_type("customer")


@router.post("", response_model=RequestDetail, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: RequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only),
):
    return request_service.create_request(db, current_user, payload.model_dump())


@router.get("", response_model=RequestPage)
def browse_requests(
    category: Optional[str] = Query(None, description="category id or slug"),
    postal_code: Optional[str] = Query(None),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0),
    status: str = Query("open"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    items, total = request_service.browse_requests(
        db, category, postal_code, lat, lng, radius, status, page, limit
    )
    return {"data": items, "meta": page_meta(total, page, limit)}


@router.get("/my", response_model=list[RequestResponse])
def my_requests(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only),
):
    return request_service.requests_for_customer(db, current_user, status)


@router.get("/{request_id}", response_model=RequestDetail)
def get_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    request = request_service.get_request(db, request_id)
    detail = RequestDetail.model_validate(request)
    if not quote_service.can_view_quotes(current_user, request):
        detail.quotes = []
    return detail


@router.get("/{request_id}/quotes", response_model=list[QuoteResponse])
def request_quotes(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return quote_service.quotes_for_request(db, current_user, request_id)


@router.put("/{request_id}", response_model=RequestResponse)
def update_request(
    request_id: int,
    payload: RequestUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only),
):
    return request_service.update_request(db, current_user, request_id, payload.model_dump(exclude_unset=True))


@router.delete("/{request_id}", response_model=RequestResponse)
def cancel_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only),
):
    return request_service.cancel_request(db, current_user, request_id)
