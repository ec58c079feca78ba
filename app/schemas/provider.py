# app/schemas/provider.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import PageMeta, not_null
from app.schemas.user import UserPublic


class ProviderCreate(BaseModel):
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    description: str
    experience_years: int = Field(default=0, ge=0)
    service_area_radius: float = Field(..., ge=1, le=100, description="km")
    service_area_lat: float = Field(..., ge=-90, le=90)
    service_area_lng: float = Field(..., ge=-180, le=180)


class ProviderUpdate(BaseModel):
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    description: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0)
    service_area_radius: Optional[float] = Field(default=None, ge=1, le=100)
    service_area_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    service_area_lng: Optional[float] = Field(default=None, ge=-180, le=180)

    @field_validator(
        "description", "experience_years", "service_area_radius", "service_area_lat", "service_area_lng"
    )
    @classmethod
    def required_not_null(cls, value):
        return not_null(value)


class ProviderApprove(BaseModel):
    is_approved: bool


class ProviderResponse(BaseModel):
    id: int
    user_id: int
    company_name: Optional[str]
    description: str
    experience_years: int
    service_area_lat: float
    service_area_lng: float
    service_area_radius: float
    rating_avg: float
    total_reviews: int
    is_approved: bool
    created_at: Optional[datetime] = None
    user: Optional[UserPublic] = None

    class Config:
        from_attributes = True


class ProviderPage(BaseModel):
    data: List[ProviderResponse]
    meta: PageMeta
