# app/db/models/user.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from app.db.base import Base

USER_TYPES = ("customer", "provider", "admin")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)

    # customer | provider | admin
    user_type = Column(String, nullable=False, default="customer", server_default="customer")

    is_verified = Column(Boolean, nullable=False, default=False)
    gdpr_consent = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # a provider-type user has at most one profile
    provider = relationship(
        "Provider",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    service_requests = relationship(
        "ServiceRequest",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
