from app.core.config import settings


def _limit_count(limit: str) -> int:
    return int(limit.split("/")[0])


def test_login_is_throttled(client):
    allowed = _limit_count(settings.RATE_LIMIT_STRICT)
    credentials = {"email": "nobody@example.com", "password": "whatever123"}

    for _ in range(allowed):
        assert client.post("/api/auth/login", json=credentials).status_code == 401

    res = client.post("/api/auth/login", json=credentials)
    assert res.status_code == 429
    assert res.json()["error"] == "rate_limited"


def test_strict_limit_is_per_route(client):
    credentials = {"email": "nobody@example.com", "password": "whatever123"}
    for _ in range(_limit_count(settings.RATE_LIMIT_STRICT) + 1):
        client.post("/api/auth/login", json=credentials)

    assert client.get("/health").status_code == 200
    assert client.get("/categories").status_code == 200
