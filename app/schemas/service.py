# app/schemas/service.py

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Literal, Optional
from datetime import datetime

from app.schemas.category import CategoryMiniResponse
from app.schemas.common import not_null

PriceType = Literal["fixed", "hourly", "quote"]


# Shared fields
class ServiceBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    price_type: PriceType = "quote"
    price_min: Optional[float] = Field(default=None, ge=0)
    price_max: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = True


# Provider creates service
class ServiceCreate(ServiceBase):
    category_id: int

    @model_validator(mode="after")
    def check_price_range(self):
        if self.price_min is not None and self.price_max is not None and self.price_min > self.price_max:
            raise ValueError("price_min must not exceed price_max")
        return self


# Provider updates service
class ServiceUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price_type: Optional[PriceType] = None
    price_min: Optional[float] = Field(default=None, ge=0)
    price_max: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    category_id: Optional[int] = None

    @field_validator("title", "description", "price_type", "is_active", "category_id")
    @classmethod
    def required_not_null(cls, value):
        return not_null(value)


# What API returns
class ServiceResponse(BaseModel):
    id: int
    provider_id: int

    title: str
    description: str
    price_type: str
    price_min: Optional[float]
    price_max: Optional[float]
    is_active: bool

    category: CategoryMiniResponse

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
