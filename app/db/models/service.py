# app/db/models/service.py

from sqlalchemy import Column, DateTime, Integer, String, ForeignKey, Boolean, Float, CheckConstraint, func
from sqlalchemy.orm import relationship
from app.db.base import Base

PRICE_TYPES = ("fixed", "hourly", "quote")


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint(
            "price_min IS NULL OR price_max IS NULL OR price_min <= price_max",
            name="ck_service_price_range",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Foreign keys
    provider_id = Column(Integer, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)

    # Basic details
    title = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")

    # Pricing: fixed | hourly | quote
    price_type = Column(String, nullable=False, default="quote")
    price_min = Column(Float, nullable=True)
    price_max = Column(Float, nullable=True)

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    provider = relationship("Provider", back_populates="services")
    category = relationship("Category", back_populates="services")
