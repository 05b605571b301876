from __future__ import annotations


def test_preserves_incoming_request_id_header(make_client):
    client = make_client()
    incoming_id = "test-request-id-123"

    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(make_client):
    client = make_client()

    resp = client.post("/api/subscribe", json={"email": "a@b.co"})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_rate_limited_responses_carry_request_id(make_client):
    from signup_api.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

    client = make_client(rate_limiter=InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60))
    client.post("/api/subscribe", json={"email": "a@b.co"})

    resp = client.post("/api/subscribe", json={"email": "a@b.co"}, headers={"X-Request-ID": "rl-1"})

    assert resp.status_code == 429
    assert resp.headers.get("X-Request-ID") == "rl-1"


def test_request_id_header_follows_app_settings(make_client):
    from conftest import build_settings

    settings = build_settings()
    settings.log.request_id_header = "X-Correlation-ID"
    client = make_client(settings=settings)

    resp = client.get("/health", headers={"X-Correlation-ID": "corr-7"})

    assert resp.headers.get("X-Correlation-ID") == "corr-7"
    assert "X-Request-ID" not in resp.headers
