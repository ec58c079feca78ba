import pytest

from app.db.models.review import Review
from app.services.reviews import create_review


@pytest.fixture
def reviewed_provider(db_session, make_user, provider, cleaning, make_request, make_quote, make_booking):
    """Provider with two reviews: 1 star from `harsh`, 5 stars from `happy`."""
    authors = {}
    for name, rating in (("harsh", 1), ("happy", 5)):
        author = make_user("customer")
        booking = make_booking(make_quote(make_request(cleaning, customer=author), provider), status="completed")
        create_review(db_session, author, booking.id, rating)
        authors[name] = author
    db_session.expire_all()
    assert provider.total_reviews == 2
    return provider, authors


def test_deleting_own_account_recomputes_reviewed_provider(client, auth_headers, db_session, reviewed_provider):
    provider, authors = reviewed_provider

    res = client.delete("/users/profile", headers=auth_headers(authors["harsh"]))
    assert res.status_code == 204

    profile = client.get(f"/providers/{provider.id}").json()
    assert profile["total_reviews"] == 1
    assert profile["rating_avg"] == 5.0
    assert db_session.query(Review).filter(Review.reviewee_id == provider.user_id).count() == 1


def test_admin_deleting_reviewer_recomputes_provider(client, auth_headers, admin, db_session, reviewed_provider):
    provider, authors = reviewed_provider

    res = client.delete(f"/admin/users/{authors['happy'].id}", headers=auth_headers(admin))
    assert res.status_code == 204

    db_session.expire_all()
    assert provider.total_reviews == 1
    assert provider.rating_avg == 1.0


def test_profile_update(client, auth_headers, customer):
    res = client.put("/users/profile", headers=auth_headers(customer), json={"name": "Jana", "phone": None})

    assert res.status_code == 200
    assert res.json()["name"] == "Jana"
    assert res.json()["phone"] is None


def test_profile_name_cannot_be_nulled(client, auth_headers, customer):
    res = client.put("/users/profile", headers=auth_headers(customer), json={"name": None})

    assert res.status_code == 422
