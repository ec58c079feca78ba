# app/schemas/quote.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import naive_utc


class QuoteCreate(BaseModel):
    request_id: int
    price: float = Field(..., ge=0)
    message: str = ""
    valid_until: datetime

    @field_validator("valid_until")
    @classmethod
    def normalize_valid_until(cls, value):
        return naive_utc(value)


class QuoteAccept(BaseModel):
    # falls back to the request's preferred date
    scheduled_date: Optional[datetime] = None

    @field_validator("scheduled_date")
    @classmethod
    def normalize_scheduled_date(cls, value):
        return naive_utc(value)


class QuoteResponse(BaseModel):
    id: int
    request_id: int
    provider_id: int
    price: float
    message: str
    valid_until: datetime
    status: str
    created_at: datetime

    class Config:
        from_attributes = True
