"""
Pytest configuration and shared fixtures for the marketplace tests.

Every test runs against a fresh in-memory SQLite schema.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.rate_limit import limiter  # noqa: E402
from app.core.security import create_access_token, hash_password  # noqa: E402
from app.db.base import Base, SessionLocal, engine  # noqa: E402
from app.db.init_db import init_db  # noqa: E402
from app.db.models.booking import Booking  # noqa: E402
from app.db.models.category import Category  # noqa: E402
from app.db.models.provider import Provider  # noqa: E402
from app.db.models.quote import Quote  # noqa: E402
from app.db.models.service import Service  # noqa: E402
from app.db.models.service_request import ServiceRequest  # noqa: E402
from app.db.models.user import User  # noqa: E402
from app.main import app  # noqa: E402

BERLIN = (52.52, 13.405)
BERLIN_MITTE = (52.53, 13.40)
MUNICH = (48.137, 11.575)


@pytest.fixture(autouse=True)
def schema():
    init_db()
    limiter.reset()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(user_type="customer", email=None, name=None, password="password123"):
        counter["n"] += 1
        user = User(
            email=email or f"{user_type}{counter['n']}@example.com",
            name=name or f"Test {user_type.title()} {counter['n']}",
            password_hash=hash_password(password),
            user_type=user_type,
            gdpr_consent=True,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture
def make_category(db_session):
    def _make(slug="reinigung", name_de="Reinigung", name_en="Cleaning", is_active=True):
        category = Category(slug=slug, name_de=name_de, name_en=name_en, icon=slug, is_active=is_active)
        db_session.add(category)
        db_session.commit()
        return category
    return _make


@pytest.fixture
def make_provider(db_session, make_user):
    def _make(categories=(), center=BERLIN, radius=25.0, approved=True, user=None):
        user = user or make_user("provider")
        provider = Provider(
            user_id=user.id,
            description="Reliable and tidy",
            experience_years=5,
            service_area_lat=center[0],
            service_area_lng=center[1],
            service_area_radius=radius,
            is_approved=approved,
        )
        db_session.add(provider)
        db_session.flush()
        for category in categories:
            db_session.add(Service(
                provider_id=provider.id,
                category_id=category.id,
                title=f"{category.name_en} service",
                price_type="hourly",
                price_min=20,
                price_max=40,
                is_active=True,
            ))
        db_session.commit()
        db_session.refresh(provider)
        return provider
    return _make


@pytest.fixture
def make_request(db_session, make_user):
    def _make(category, customer=None, location=BERLIN_MITTE, status="open", preferred_date=None, title="Flat cleaning"):
        customer = customer or make_user("customer")
        request = ServiceRequest(
            customer_id=customer.id,
            category_id=category.id,
            title=title,
            description="Two rooms, kitchen and bath",
            address="Invalidenstr. 1",
            city="Berlin",
            postal_code="10115",
            lat=location[0],
            lng=location[1],
            preferred_date=preferred_date,
            status=status,
        )
        db_session.add(request)
        db_session.commit()
        return request
    return _make


@pytest.fixture
def make_quote(db_session):
    def _make(request, provider, price=120.0, status="pending", valid_for=timedelta(days=7)):
        quote = Quote(
            request_id=request.id,
            provider_id=provider.id,
            price=price,
            message="Can do it next week",
            valid_until=datetime.utcnow() + valid_for,
            status=status,
        )
        db_session.add(quote)
        db_session.commit()
        return quote
    return _make


@pytest.fixture
def make_booking(db_session):
    def _make(quote, status="pending", payment_status="pending"):
        request = db_session.get(ServiceRequest, quote.request_id)
        booking = Booking(
            quote_id=quote.id,
            request_id=request.id,
            customer_id=request.customer_id,
            provider_id=quote.provider_id,
            scheduled_date=datetime.utcnow() + timedelta(days=3),
            status=status,
            total_price=quote.price,
            payment_status=payment_status,
            completed_at=datetime.utcnow() if status == "completed" else None,
        )
        quote.status = "accepted"
        request.status = {"completed": "completed", "cancelled": "cancelled"}.get(status, "in_progress")
        db_session.add(booking)
        db_session.commit()
        return booking
    return _make


@pytest.fixture
def cleaning(make_category):
    return make_category()


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def admin(make_user):
    return make_user("admin", email="admin@example.com")


@pytest.fixture
def provider(make_provider, cleaning):
    """Approved provider in Berlin (25 km) offering cleaning."""
    return make_provider(categories=[cleaning])


@pytest.fixture
def open_request(make_request, cleaning, customer):
    return make_request(cleaning, customer=customer)
