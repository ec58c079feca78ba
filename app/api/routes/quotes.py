# app/api/routes/quotes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.security import require_user_type
from app.db.base import get_db
from app.db.models.user import User
from app.schemas.booking import BookingResponse
from app.schemas.quote import QuoteAccept, QuoteCreate, QuoteResponse
from app.services import quotes as quote_service

router = APIRouter(prefix="/quotes", tags=["quotes"])

provider_only = require_user_type("provider")
customer_only = require_user_type("customer")


# Provider submits a quote on an open request

@router.post("", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
def create_quote(
    payload: QuoteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only),
):
    return quote_service.create_quote(
        db, current_user, payload.request_id, payload.price, payload.message, payload.valid_until
    )


@router.get("/my", response_model=list[QuoteResponse])
def my_quotes(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only),
):
    return quote_service.quotes_for_provider(db, current_user, status)


# Customer accepts a quote -> booking

@router.post("/{quote_id}/accept", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def accept_quote(
    quote_id: int,
    payload: Optional[QuoteAccept] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only),
):
    scheduled = payload.scheduled_date if payload else None
    return quote_service.accept_quote(db, current_user, quote_id, scheduled)


# Customer declines a quote

@router.post("/{quote_id}/reject", response_model=QuoteResponse)
def reject_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only),
):
    return quote_service.reject_quote(db, current_user, quote_id)
