from common import InMemoryRateLimiter

from .test_webhook import post_webhook


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_limiter_blocks_until_window_passes():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(clock=clock)

    assert limiter.allow("auth:1.2.3.4", 2, 60) == (True, 0)
    assert limiter.allow("auth:1.2.3.4", 2, 60) == (True, 0)
    allowed, retry_after = limiter.allow("auth:1.2.3.4", 2, 60)
    assert allowed is False
    assert 1 <= retry_after <= 60

    # other keys are counted separately
    assert limiter.allow("payments:1.2.3.4", 2, 60)[0] is True

    clock.now += 61
    assert limiter.allow("auth:1.2.3.4", 2, 60)[0] is True


def test_limiter_reset():
    limiter = InMemoryRateLimiter()
    limiter.allow("k", 1, 60)
    assert limiter.allow("k", 1, 60)[0] is False
    limiter.reset()
    assert limiter.allow("k", 1, 60)[0] is True


def test_auth_routes_are_rate_limited(client, settings):
    settings.auth_rate_limit = 2
    payload = {"email": "nobody@example.com", "password": "whatever"}

    assert client.post("/api/auth/login", json=payload).status_code == 401
    assert client.post("/api/auth/login", json=payload).status_code == 401
    blocked = client.post("/api/auth/login", json=payload)
    assert blocked.status_code == 429
    assert blocked.json()["detail"] == "Too many requests. Please try again later."
    assert int(blocked.headers["Retry-After"]) >= 1


def test_zero_limit_disables_rate_limiting(client, settings):
    settings.auth_rate_limit = 0
    payload = {"email": "nobody@example.com", "password": "whatever"}
    for _ in range(25):
        assert client.post("/api/auth/login", json=payload).status_code == 401


def test_webhook_not_rate_limited(client, settings, user):
    settings.payments_rate_limit = 1
    for _ in range(3):
        assert post_webhook(client, {"event": "order.paid", "payload": {}}, secret=None).status_code == 200

    assert client.get("/api/payments/my-payments", headers=user["headers"]).status_code == 200
    assert client.get("/api/payments/my-payments", headers=user["headers"]).status_code == 429
