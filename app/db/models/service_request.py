# app/db/models/service_request.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from app.db.base import Base

REQUEST_STATUSES = ("open", "in_progress", "completed", "cancelled")


class ServiceRequest(Base):
    """A job posted by a customer. Location is already geocoded (lat/lng)."""
    __tablename__ = "service_requests"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=False)

    address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    postal_code = Column(String, nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)

    preferred_date = Column(DateTime, nullable=True)
    budget_min = Column(Float, nullable=True)
    budget_max = Column(Float, nullable=True)

    status = Column(String, nullable=False, default="open", index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("User", back_populates="service_requests")
    category = relationship("Category")
    quotes = relationship(
        "Quote",
        back_populates="request",
        order_by="Quote.created_at.desc()",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
