# app/db/models/quote.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base

QUOTE_STATUSES = ("pending", "accepted", "rejected", "expired")


class Quote(Base):
    __tablename__ = "quotes"
    __table_args__ = (
        # one bid per provider per request
        UniqueConstraint("request_id", "provider_id", name="uq_quote_request_provider"),
    )

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("service_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(Integer, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False, index=True)

    price = Column(Float, nullable=False)
    message = Column(String, nullable=False, default="")
    valid_until = Column(DateTime, nullable=False)

    status = Column(String, nullable=False, default="pending")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    request = relationship("ServiceRequest", back_populates="quotes")
    provider = relationship("Provider", back_populates="quotes")
    booking = relationship("Booking", back_populates="quote", uselist=False)
