"""End-to-end marketplace flow through the HTTP API."""
from datetime import datetime, timedelta

from conftest import BERLIN, BERLIN_MITTE, MUNICH


def _bearer(res):
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


def _register(client, email, user_type):
    res = client.post("/api/auth/register", json={
        "email": email,
        "name": email.split("@")[0].title(),
        "password": "password123",
        "user_type": user_type,
        "gdpr_consent": True,
    })
    assert res.status_code == 201
    return _bearer(res)


def _iso(delta):
    return (datetime.utcnow() + delta).replace(microsecond=0).isoformat()


def test_request_to_review(client, auth_headers, admin, cleaning):
    customer = _register(client, "kunde@example.com", "customer")
    pro = _register(client, "profi@example.com", "provider")
    admin_headers = auth_headers(admin)

    # provider profile, approval, offering
    res = client.post("/providers", headers=pro, json={
        "company_name": "Blitzblank GmbH",
        "description": "Household cleaning",
        "experience_years": 8,
        "service_area_lat": BERLIN[0],
        "service_area_lng": BERLIN[1],
        "service_area_radius": 25,
    })
    assert res.status_code == 201
    provider_id = res.json()["id"]
    assert res.json()["is_approved"] is False

    res = client.patch(f"/admin/providers/{provider_id}/approve", headers=admin_headers, json={"is_approved": True})
    assert res.status_code == 200
    assert res.json()["is_approved"] is True

    res = client.post("/services/provider/services", headers=pro, json={
        "category_id": cleaning.id,
        "title": "Apartment cleaning",
        "price_type": "hourly",
        "price_min": 25,
        "price_max": 35,
    })
    assert res.status_code == 201

    # customer posts a request by category slug
    res = client.post("/requests", headers=customer, json={
        "category": "reinigung",
        "title": "Move-out cleaning",
        "description": "Three rooms",
        "address": "Torstr. 10",
        "city": "Berlin",
        "postal_code": "10119",
        "lat": BERLIN_MITTE[0],
        "lng": BERLIN_MITTE[1],
        "preferred_date": _iso(timedelta(days=5)),
    })
    assert res.status_code == 201
    request_id = res.json()["id"]
    assert res.json()["status"] == "open"

    visible = client.get("/providers/me/requests", headers=pro).json()
    assert [r["id"] for r in visible["data"]] == [request_id]
    assert visible["meta"]["total"] == 1

    res = client.post("/quotes", headers=pro, json={
        "request_id": request_id,
        "price": 120,
        "message": "Friday morning",
        "valid_until": _iso(timedelta(days=3)),
    })
    assert res.status_code == 201
    quote_id = res.json()["id"]

    # quoted requests drop out of the provider's feed
    assert client.get("/providers/me/requests", headers=pro).json()["meta"]["total"] == 0

    again = client.post("/quotes", headers=pro, json={
        "request_id": request_id,
        "price": 110,
        "valid_until": _iso(timedelta(days=3)),
    })
    assert again.status_code == 409

    quotes = client.get(f"/requests/{request_id}/quotes", headers=customer).json()
    assert [q["id"] for q in quotes] == [quote_id]

    # accept -> booking
    res = client.post(f"/quotes/{quote_id}/accept", headers=customer)
    assert res.status_code == 201
    booking = res.json()
    assert booking["total_price"] == 120
    assert booking["status"] == "pending"
    assert booking["payment_status"] == "pending"

    twice = client.post(f"/quotes/{quote_id}/accept", headers=customer)
    assert twice.status_code == 400
    assert twice.json()["error"] == "invalid_state"

    assert client.get(f"/requests/{request_id}", headers=customer).json()["status"] == "in_progress"

    for step, expected in (("confirm", "confirmed"), ("start", "in_progress"), ("complete", "completed")):
        res = client.post(f"/bookings/{booking['id']}/{step}", headers=pro)
        assert res.status_code == 200
        assert res.json()["status"] == expected
    assert res.json()["completed_at"] is not None
    assert client.get(f"/requests/{request_id}", headers=customer).json()["status"] == "completed"

    res = client.put(f"/bookings/{booking['id']}/payment", headers=pro, json={"payment_status": "paid"})
    assert res.json()["payment_status"] == "paid"

    # review and reply
    res = client.post("/reviews", headers=customer, json={"booking_id": booking["id"], "rating": 5, "comment": "Great"})
    assert res.status_code == 201
    review_id = res.json()["id"]

    res = client.post(f"/providers/me/reviews/{review_id}/reply", headers=pro, json={"reply": "Thank you!"})
    assert res.status_code == 200
    assert res.json()["provider_reply"] == "Thank you!"

    second = client.post(f"/reviews/{review_id}/reply", headers=pro, json={"reply": "Once more"})
    assert second.status_code == 400

    profile = client.get(f"/providers/{provider_id}").json()
    assert profile["rating_avg"] == 5.0
    assert profile["total_reviews"] == 1


def test_customer_cancels_open_request(client, auth_headers, customer, provider, open_request, make_quote):
    quote = make_quote(open_request, provider)
    headers = auth_headers(customer)

    res = client.delete(f"/requests/{open_request.id}", headers=headers)
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"

    quotes = client.get(f"/requests/{open_request.id}/quotes", headers=headers).json()
    assert quotes[0]["id"] == quote.id
    assert quotes[0]["status"] == "rejected"

    again = client.delete(f"/requests/{open_request.id}", headers=headers)
    assert again.status_code == 400


def test_provider_cannot_quote_outside_categories(client, auth_headers, make_provider, make_category, open_request):
    painter = make_provider(categories=[make_category(slug="maler", name_de="Maler", name_en="Painter")])

    res = client.post("/quotes", headers=auth_headers(painter.user), json={
        "request_id": open_request.id,
        "price": 80,
        "valid_until": _iso(timedelta(days=2)),
    })

    assert res.status_code == 403
    assert res.json()["error"] == "forbidden"


def test_provider_search_filters_by_distance(client, make_provider, cleaning):
    near = make_provider(categories=[cleaning])
    make_provider(categories=[cleaning], center=MUNICH)

    res = client.get("/providers", params={"lat": BERLIN_MITTE[0], "lng": BERLIN_MITTE[1], "radius": 50})

    assert res.status_code == 200
    body = res.json()
    assert [p["id"] for p in body["data"]] == [near.id]
    assert body["meta"]["total"] == 1
