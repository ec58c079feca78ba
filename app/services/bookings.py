# app/services/bookings.py
"""
Booking lifecycle.

    pending -> confirmed -> in_progress -> completed
    pending | confirmed -> cancelled

Payment status is a separate axis and may change in any booking state.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.db.base import transaction
from app.db.models.booking import Booking, PAYMENT_STATUSES
from app.db.models.user import User

logger = logging.getLogger(__name__)

TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"in_progress", "cancelled"},
    "in_progress": {"completed"},
    "completed": set(),
    "cancelled": set(),
}

# which side of the booking may drive each target state
ACTORS = {
    "confirmed": {"provider"},
    "in_progress": {"provider"},
    "completed": {"provider"},
    "cancelled": {"provider", "customer"},
}

# request status that follows the booking into these states
REQUEST_FOLLOWS = {
    "completed": "completed",
    "cancelled": "cancelled",
}

ACTIVE_STATUSES = ("pending", "confirmed", "in_progress")


def get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def booking_role(booking: Booking, user: User) -> Optional[str]:
    """'customer' or 'provider' if the user is a party to the booking."""
    if booking.customer_id == user.id:
        return "customer"
    if booking.provider is not None and booking.provider.user_id == user.id:
        return "provider"
    return None


def get_booking_for_user(db: Session, booking_id: int, user: User) -> Booking:
    booking = get_booking(db, booking_id)
    if user.user_type != "admin" and booking_role(booking, user) is None:
        raise ForbiddenError("Not your booking")
    return booking


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


def transition_booking(db: Session, user: User, booking_id: int, target: str) -> Booking:
    booking = get_booking(db, booking_id)

    role = booking_role(booking, user)
    if role is None or role not in ACTORS.get(target, set()):
        logger.warning("user %s may not move booking %s to %s", user.id, booking.id, target)
        raise ForbiddenError(f"Not authorized to mark this booking {target}")

    if not can_transition(booking.status, target):
        raise InvalidStateError(f"Cannot move booking from {booking.status} to {target}")

    previous = booking.status
    with transaction(db):
        booking.status = target
        if target == "completed":
            booking.completed_at = datetime.utcnow()
        follow = REQUEST_FOLLOWS.get(target)
        if follow and booking.request is not None:
            booking.request.status = follow

    logger.info("booking %s %s -> %s by %s %s", booking.id, previous, target, role, user.id)
    return booking


def confirm_booking(db: Session, user: User, booking_id: int) -> Booking:
    return transition_booking(db, user, booking_id, "confirmed")


def start_booking(db: Session, user: User, booking_id: int) -> Booking:
    return transition_booking(db, user, booking_id, "in_progress")


def complete_booking(db: Session, user: User, booking_id: int) -> Booking:
    return transition_booking(db, user, booking_id, "completed")


def cancel_booking(db: Session, user: User, booking_id: int) -> Booking:
    return transition_booking(db, user, booking_id, "cancelled")


def set_payment_status(db: Session, user: User, booking_id: int, payment_status: str) -> Booking:
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError(f"payment_status must be one of {', '.join(PAYMENT_STATUSES)}")

    booking = get_booking(db, booking_id)
    if user.user_type != "admin" and booking_role(booking, user) != "provider":
        raise ForbiddenError("Only the provider or an admin can update payment status")

    with transaction(db):
        booking.payment_status = payment_status

    logger.info("booking %s payment status -> %s", booking.id, payment_status)
    return booking


def bookings_for_customer(db: Session, user: User, status: Optional[str] = None) -> list[Booking]:
    q = db.query(Booking).filter(Booking.customer_id == user.id)
    if status:
        q = q.filter(Booking.status == status)
    return q.order_by(Booking.created_at.desc()).all()


def bookings_for_provider(db: Session, provider_id: int, status: Optional[str] = None) -> list[Booking]:
    q = db.query(Booking).filter(Booking.provider_id == provider_id)
    if status:
        q = q.filter(Booking.status == status)
    return q.order_by(Booking.scheduled_date.asc()).all()
