from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.common import not_null

class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)
    phone: Optional[str] = None
    user_type: Literal["customer", "provider"] = "customer"
    gdpr_consent: bool

class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        return not_null(value)

class UserResponse(BaseModel):
    id: int
    email: EmailStr
    name: str
    phone: Optional[str] = None
    user_type: str
    is_verified: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserPublic(BaseModel):
    id: int
    name: str
    user_type: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
