"""Rate limiting tests."""

import pytest

from link4coders.rate_limit import limiter


@pytest.fixture
def rate_limited():
    """Turn the limiter on for one test, starting from empty counters."""
    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()


def test_login_rate_limited(client, auth_headers, rate_limited):
    """Test that repeated logins from one client are throttled."""
    payload = {"email": auth_headers.email, "password": "wrongpass123"}
    for _ in range(5):
        response = client.post("/api/v1/auth/login", json=payload)
        assert response.status_code == 401

    response = client.post("/api/v1/auth/login", json=payload)
    assert response.status_code == 429


def test_health_check_exempt(client, rate_limited):
    for _ in range(70):
        response = client.get("/health")
        assert response.status_code == 200


def test_route_limits_are_independent(client, auth_headers, rate_limited):
    """Test that each route class has its own budget."""
    for _ in range(10):
        response = client.put("/api/v1/profile", headers=auth_headers, json={"bio": "hi"})
        assert response.status_code == 200

    response = client.put("/api/v1/profile", headers=auth_headers, json={"bio": "hi"})
    assert response.status_code == 429

    response = client.get("/api/v1/public/profiles/testuser")
    assert response.status_code == 200
