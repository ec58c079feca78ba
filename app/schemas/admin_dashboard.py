# app/schemas/admin_dashboard.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import date

class UserStats(BaseModel):
    total: int
    new_this_week: int

class ProviderStats(BaseModel):
    total: int
    pending_approval: int

class RequestStats(BaseModel):
    total: int
    active: int
    new_this_week: int

class BookingStats(BaseModel):
    total: int
    completed: int
    completion_rate: float  # percent, one decimal

class RevenueStats(BaseModel):
    total: float

class AdminDashboardResponse(BaseModel):
    users: UserStats
    providers: ProviderStats
    requests: RequestStats
    bookings: BookingStats
    revenue: RevenueStats

class DailyRevenue(BaseModel):
    date: date
    revenue: float

class RevenueReport(BaseModel):
    total_revenue: float
    bookings_count: int
    daily_revenue: List[DailyRevenue]

class CategoryReportItem(BaseModel):
    id: int
    name: str
    icon: str
    total_services: int
    total_requests: int
    completed_requests: int

class TopProviderItem(BaseModel):
    id: int
    user_id: int
    name: Optional[str]
    company_name: Optional[str]
    rating_avg: float
    total_reviews: int
    booking_count: int
