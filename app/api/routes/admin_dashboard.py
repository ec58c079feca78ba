# app/api/routes/admin_dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime, timedelta, date
from typing import List, Optional

from app.core.exceptions import ValidationError
from app.db.base import get_db
from app.db.models.user import User
from app.db.models.provider import Provider
from app.db.models.booking import Booking
from app.db.models.service import Service
from app.db.models.category import Category
from app.db.models.service_request import ServiceRequest
from app.schemas.admin_dashboard import (
    AdminDashboardResponse,
    CategoryReportItem,
    DailyRevenue,
    RevenueReport,
    TopProviderItem,
)
from app.core.security import require_admin

router = APIRouter(prefix="/admin", tags=["admin-dashboard"], dependencies=[Depends(require_admin)])


@router.get("/dashboard", response_model=AdminDashboardResponse)
def admin_dashboard(db: Session = Depends(get_db)):
    last_7 = datetime.utcnow() - timedelta(days=7)

    total_users = db.query(func.count(User.id)).scalar() or 0
    new_users = db.query(func.count(User.id)).filter(User.created_at >= last_7).scalar() or 0

    total_providers = db.query(func.count(Provider.id)).scalar() or 0
    pending_providers = db.query(func.count(Provider.id)).filter(Provider.is_approved == False).scalar() or 0  # noqa: E712

    total_requests = db.query(func.count(ServiceRequest.id)).scalar() or 0
    active_requests = db.query(func.count(ServiceRequest.id)).filter(ServiceRequest.status == "open").scalar() or 0
    new_requests = db.query(func.count(ServiceRequest.id)).filter(ServiceRequest.created_at >= last_7).scalar() or 0

    total_bookings = db.query(func.count(Booking.id)).scalar() or 0
    completed_bookings = db.query(func.count(Booking.id)).filter(Booking.status == "completed").scalar() or 0

    total_revenue = db.query(func.coalesce(func.sum(Booking.total_price), 0)).filter(
        Booking.payment_status == "paid"
    ).scalar() or 0.0

    return AdminDashboardResponse(
        users={"total": int(total_users), "new_this_week": int(new_users)},
        providers={"total": int(total_providers), "pending_approval": int(pending_providers)},
        requests={"total": int(total_requests), "active": int(active_requests), "new_this_week": int(new_requests)},
        bookings={
            "total": int(total_bookings),
            "completed": int(completed_bookings),
            "completion_rate": round(completed_bookings / total_bookings * 100, 1) if total_bookings else 0.0,
        },
        revenue={"total": float(total_revenue)},
    )


@router.get("/reports/revenue", response_model=RevenueReport)
def revenue_report(
    start_date: date = Query(..., description="YYYY-MM-DD, inclusive"),
    end_date: date = Query(..., description="YYYY-MM-DD, inclusive"),
    db: Session = Depends(get_db),
):
    if start_date > end_date:
        raise ValidationError("start_date must not be after end_date")

    start = datetime.combine(start_date, datetime.min.time())
    end = datetime.combine(end_date, datetime.max.time())
    bookings = (
        db.query(Booking)
        .filter(
            Booking.completed_at >= start,
            Booking.completed_at <= end,
            Booking.payment_status == "paid",
        )
        .order_by(Booking.completed_at.asc())
        .all()
    )

    # group by completion day
    daily: dict[date, float] = {}
    for b in bookings:
        day = b.completed_at.date()
        daily[day] = daily.get(day, 0.0) + float(b.total_price)

    return RevenueReport(
        total_revenue=float(sum(b.total_price for b in bookings)),
        bookings_count=len(bookings),
        daily_revenue=[DailyRevenue(date=d, revenue=v) for d, v in daily.items()],
    )


@router.get("/reports/categories", response_model=List[CategoryReportItem])
def category_report(db: Session = Depends(get_db)):
    items = []
    for cat in db.query(Category).order_by(Category.name_de).all():
        total_services = db.query(func.count(Service.id)).filter(Service.category_id == cat.id).scalar() or 0
        total_requests = db.query(func.count(ServiceRequest.id)).filter(ServiceRequest.category_id == cat.id).scalar() or 0
        completed_requests = db.query(func.count(ServiceRequest.id)).filter(
            ServiceRequest.category_id == cat.id, ServiceRequest.status == "completed"
        ).scalar() or 0
        items.append(CategoryReportItem(
            id=cat.id,
            name=cat.name_de,
            icon=cat.icon,
            total_services=int(total_services),
            total_requests=int(total_requests),
            completed_requests=int(completed_requests),
        ))
    return items


@router.get("/reports/top-providers", response_model=List[TopProviderItem])
def top_providers(
    limit: Optional[int] = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(Provider)
        .filter(Provider.is_approved == True)  # noqa: E712
        .order_by(Provider.rating_avg.desc(), Provider.total_reviews.desc())
        .limit(limit)
        .all()
    )
    items = []
    for prov in rows:
        booking_count = db.query(func.count(Booking.id)).filter(Booking.provider_id == prov.id).scalar() or 0
        items.append(TopProviderItem(
            id=prov.id,
            user_id=prov.user_id,
            name=prov.user.name if prov.user else None,
            company_name=prov.company_name,
            rating_avg=float(prov.rating_avg or 0.0),
            total_reviews=int(prov.total_reviews or 0),
            booking_count=int(booking_count),
        ))
    return items
