# app/schemas/category.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from app.schemas.common import not_null


class CategoryCreate(BaseModel):
    slug: str = Field(..., min_length=1, pattern=r"^[a-z0-9-]+$")
    name_de: str
    name_en: str
    icon: str = ""
    parent_id: Optional[int] = None


class CategoryUpdate(BaseModel):
    name_de: Optional[str] = None
    name_en: Optional[str] = None
    icon: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name_de", "name_en", "icon", "is_active")
    @classmethod
    def required_not_null(cls, value):
        return not_null(value)


class CategoryMiniResponse(BaseModel):
    id: int
    slug: str
    name_de: str
    name_en: str

    class Config:
        from_attributes = True


class CategoryResponse(CategoryMiniResponse):
    icon: str
    is_active: bool
    parent_id: Optional[int] = None
