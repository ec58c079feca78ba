# app/schemas/common.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def not_null(value):
    """Partial updates may omit a required field but never null it."""
    if value is None:
        raise ValueError("must not be null")
    return value


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class MessageResponse(BaseModel):
    message: str
