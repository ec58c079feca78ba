# app/db/models/provider.py
from sqlalchemy import Column, Integer, String, Boolean, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from app.db.base import Base


class Provider(Base):
    """
    Provider profile, one-to-one with a provider-type User.
    The service area is a circle: center (lat/lng) and radius in km.
    rating_avg / total_reviews are recomputed from reviews, never edited directly.
    """
    __tablename__ = "providers"
    __table_args__ = (
        CheckConstraint("service_area_radius > 0", name="ck_provider_radius_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    company_name = Column(String, nullable=True)
    tax_id = Column(String, nullable=True)
    description = Column(String, nullable=False, default="")
    experience_years = Column(Integer, nullable=False, default=0)

    service_area_lat = Column(Float, nullable=False)
    service_area_lng = Column(Float, nullable=False)
    service_area_radius = Column(Float, nullable=False)  # km

    rating_avg = Column(Float, nullable=False, default=0.0)
    total_reviews = Column(Integer, nullable=False, default=0)
    is_approved = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="provider")
    services = relationship(
        "Service",
        back_populates="provider",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    quotes = relationship("Quote", back_populates="provider", passive_deletes=True)
