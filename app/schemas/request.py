# app/schemas/request.py
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from app.schemas.category import CategoryMiniResponse
from app.schemas.common import PageMeta, naive_utc, not_null
from app.schemas.quote import QuoteResponse


class RequestCreate(BaseModel):
    # category id or slug
    category: Union[int, str]
    title: str = Field(..., min_length=1)
    description: str
    address: str
    city: str
    postal_code: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    preferred_date: Optional[datetime] = None
    budget_min: Optional[float] = Field(default=None, ge=0)
    budget_max: Optional[float] = Field(default=None, ge=0)

    @field_validator("preferred_date")
    @classmethod
    def normalize_preferred_date(cls, value):
        return naive_utc(value)


class RequestUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    preferred_date: Optional[datetime] = None
    budget_min: Optional[float] = Field(default=None, ge=0)
    budget_max: Optional[float] = Field(default=None, ge=0)

    @field_validator("title", "description", "address", "city", "postal_code", "lat", "lng")
    @classmethod
    def required_not_null(cls, value):
        return not_null(value)

    @field_validator("preferred_date")
    @classmethod
    def normalize_preferred_date(cls, value):
        return naive_utc(value)


class RequestResponse(BaseModel):
    id: int
    customer_id: int
    category_id: int
    title: str
    description: str
    address: str
    city: str
    postal_code: str
    lat: float
    lng: float
    preferred_date: Optional[datetime]
    budget_min: Optional[float]
    budget_max: Optional[float]
    status: str
    created_at: datetime
    category: Optional[CategoryMiniResponse] = None

    class Config:
        from_attributes = True


class RequestDetail(RequestResponse):
    quotes: List[QuoteResponse] = []


class RequestPage(BaseModel):
    data: List[RequestResponse]
    meta: PageMeta
