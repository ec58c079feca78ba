# app/schemas/admin.py
from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime

from app.schemas.common import PageMeta, not_null
from app.schemas.provider import ProviderResponse
from app.schemas.request import RequestResponse
from app.schemas.booking import BookingResponse

class UserListItem(BaseModel):
    id: int
    email: str
    name: str
    user_type: str
    is_verified: bool
    created_at: Optional[datetime] = None
    request_count: int = 0
    booking_count: int = 0

class UserPage(BaseModel):
    data: List[UserListItem]
    meta: PageMeta

class UserDetail(BaseModel):
    id: int
    email: str
    name: str
    phone: Optional[str]
    user_type: str
    is_verified: bool
    created_at: Optional[datetime] = None
    provider: Optional[ProviderResponse] = None
    recent_requests: List[RequestResponse] = []
    recent_bookings: List[BookingResponse] = []

class UserAdminUpdate(BaseModel):
    is_verified: Optional[bool] = None

    @field_validator("is_verified")
    @classmethod
    def is_verified_not_null(cls, value):
        return not_null(value)

class AdminProviderPage(BaseModel):
    data: List[ProviderResponse]
    meta: PageMeta

class CategoryAdminItem(BaseModel):
    id: int
    slug: str
    name_de: str
    name_en: str
    icon: str
    is_active: bool
    parent_id: Optional[int] = None
    service_count: int
    request_count: int

class ExpireQuotesResponse(BaseModel):
    expired: int
