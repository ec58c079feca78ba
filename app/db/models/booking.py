# app/db/models/booking.py
from sqlalchemy import Column, Integer, String, ForeignKey, Float, DateTime, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import Base

BOOKING_STATUSES = ("pending", "confirmed", "in_progress", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "refunded", "failed")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # at most one non-cancelled booking per request
        Index(
            "uq_booking_active_request",
            "request_id",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, unique=True)
    request_id = Column(Integer, ForeignKey("service_requests.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(Integer, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False, index=True)

    scheduled_date = Column(DateTime, nullable=False)

    status = Column(String, nullable=False, default="pending")
    # copied from the accepted quote; never updated
    total_price = Column(Float, nullable=False)
    payment_status = Column(String, nullable=False, default="pending")
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # relationships
    quote = relationship("Quote", back_populates="booking")
    request = relationship("ServiceRequest", foreign_keys=[request_id])
    customer = relationship("User", foreign_keys=[customer_id])
    provider = relationship("Provider", foreign_keys=[provider_id])
    review = relationship("Review", back_populates="booking", uselist=False)
