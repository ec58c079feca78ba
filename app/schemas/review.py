# app/schemas/review.py
from pydantic import BaseModel, Field, conint
from typing import Dict, List, Optional
from datetime import datetime

from app.schemas.common import PageMeta

class ReviewCreate(BaseModel):
    booking_id: int
    rating: conint(ge=1, le=5) = Field(..., description="Rating 1-5")
    comment: Optional[str] = None

class ReviewReply(BaseModel):
    reply: str = Field(..., min_length=1)

class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    reviewer_id: int
    reviewee_id: int
    rating: int
    comment: Optional[str]
    provider_reply: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ReviewStats(BaseModel):
    average: float
    total: int
    breakdown: Dict[int, int]

class ProviderReviewsResponse(BaseModel):
    data: List[ReviewResponse]
    stats: ReviewStats
    meta: PageMeta
