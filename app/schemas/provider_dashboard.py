# app/schemas/provider_dashboard.py
from pydantic import BaseModel
from typing import List

from app.schemas.booking import BookingResponse
from app.schemas.request import RequestResponse, RequestPage

class StatsResponse(BaseModel):
    total_quotes: int
    accepted_quotes: int
    conversion_rate: float  # percent
    active_bookings: int
    completed_bookings: int
    total_earnings: float
    rating: float
    total_reviews: int

class DashboardStats(BaseModel):
    new_requests: int
    active_orders: int
    completed: int
    rating: float

class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_requests: List[RequestResponse]
    active_bookings: List[BookingResponse]

    class Config:
        from_attributes = True

class NewRequestsResponse(RequestPage):
    pass
