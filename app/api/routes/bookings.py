# app/api/routes/bookings.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.db.models.user import User
from app.schemas.booking import BookingResponse, PaymentStatusUpdate
from app.core.security import get_current_user, require_user_type
from app.services import bookings as booking_service

router = APIRouter(prefix="/bookings", tags=["bookings"])

customer_only = require_user_type("customer")


# Customer views their bookings

@router.get("/customer/me", response_model=list[BookingResponse])
def customer_my_bookings(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(customer_only),
):
    return booking_service.bookings_for_customer(db, current_user, status)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return booking_service.get_booking_for_user(db, booking_id, current_user)


# Provider confirms booking

@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return booking_service.confirm_booking(db, current_user, booking_id)


# Provider starts work

@router.post("/{booking_id}/start", response_model=BookingResponse)
def start_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return booking_service.start_booking(db, current_user, booking_id)


# Provider completes booking

@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return booking_service.complete_booking(db, current_user, booking_id)


# Customer or provider cancels booking

@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return booking_service.cancel_booking(db, current_user, booking_id)


# Provider or admin records payment state

@router.put("/{booking_id}/payment", response_model=BookingResponse)
def update_payment_status(
    booking_id: int,
    payload: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return booking_service.set_payment_status(db, current_user, booking_id, payload.payment_status)
