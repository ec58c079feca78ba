import pytest

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.services.providers import create_provider, update_service

from conftest import BERLIN

PROFILE = {
    "description": "Tidy and punctual",
    "experience_years": 3,
    "service_area_lat": BERLIN[0],
    "service_area_lng": BERLIN[1],
    "service_area_radius": 15.0,
}


def test_provider_user_creates_unapproved_profile(db_session, make_user):
    profile = create_provider(db_session, make_user("provider"), dict(PROFILE))

    assert profile.is_approved is False
    assert profile.total_reviews == 0


def test_customer_cannot_create_provider_profile(db_session, customer):
    with pytest.raises(ForbiddenError):
        create_provider(db_session, customer, dict(PROFILE))


def test_second_profile_conflicts(db_session, provider):
    with pytest.raises(ConflictError):
        create_provider(db_session, provider.user, dict(PROFILE))


def test_duplicate_profile_over_http(client, auth_headers, provider):
    res = client.post("/providers", headers=auth_headers(provider.user), json=PROFILE)

    assert res.status_code == 409
    assert res.json()["error"] == "conflict"


def test_service_area_cannot_be_nulled(client, auth_headers, provider, db_session):
    res = client.put(f"/providers/{provider.id}", headers=auth_headers(provider.user), json={"service_area_lat": None})

    assert res.status_code == 422
    db_session.expire_all()
    assert provider.service_area_lat == BERLIN[0]


def test_company_name_can_be_cleared(client, auth_headers, provider):
    res = client.put(f"/providers/{provider.id}", headers=auth_headers(provider.user), json={"company_name": None})

    assert res.status_code == 200
    assert res.json()["company_name"] is None


class TestUpdateService:

    def test_move_to_active_category(self, db_session, provider, make_category):
        garden = make_category(slug="garten", name_de="Garten", name_en="Garden")
        service = provider.services[0]

        assert update_service(db_session, provider.user, service.id, {"category_id": garden.id}).category_id == garden.id

    def test_inactive_category_is_refused(self, db_session, provider, cleaning, make_category):
        retired = make_category(slug="alt", name_de="Alt", name_en="Retired", is_active=False)
        service = provider.services[0]

        with pytest.raises(NotFoundError):
            update_service(db_session, provider.user, service.id, {"category_id": retired.id})

        db_session.expire_all()
        assert service.category_id == cleaning.id

    def test_null_title_over_http(self, client, auth_headers, provider):
        service = provider.services[0]

        res = client.put(f"/services/provider/services/{service.id}", headers=auth_headers(provider.user), json={"title": None})

        assert res.status_code == 422
