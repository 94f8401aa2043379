from fastapi import FastAPI
from fastapi.testclient import TestClient

from backoffice.core.rate_limiter import InMemoryRateLimiterService
from backoffice.middleware.auth_rate_limit import AuthRateLimitMiddleware


class _FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_sliding_window_blocks_after_limit_and_recovers():
    clock = _FakeClock()
    limiter = InMemoryRateLimiterService(limit=2, window_seconds=60, clock=clock)

    first = limiter.check(client_key="10.0.0.1", endpoint="/auth/login")
    second = limiter.check(client_key="10.0.0.1", endpoint="/auth/login")
    blocked = limiter.check(client_key="10.0.0.1", endpoint="/auth/login")

    assert first.allowed and first.remaining == 1
    assert second.allowed and second.remaining == 0
    assert not blocked.allowed
    assert blocked.retry_after_seconds == 60

    clock.now += 61
    assert limiter.check(client_key="10.0.0.1", endpoint="/auth/login").allowed


def test_buckets_are_per_client_and_endpoint():
    limiter = InMemoryRateLimiterService(limit=1, window_seconds=60, clock=_FakeClock())

    assert limiter.check(client_key="a", endpoint="/auth/login").allowed
    assert limiter.check(client_key="b", endpoint="/auth/login").allowed
    assert limiter.check(client_key="a", endpoint="/auth/register-admin").allowed
    assert not limiter.check(client_key="a", endpoint="/auth/login").allowed

    limiter.reset()
    assert limiter.check(client_key="a", endpoint="/auth/login").allowed


def _build_client(limit: int = 2, trust_forwarded_for: bool = False, limiter=None) -> TestClient:
    app = FastAPI()
    app.add_middleware(
        AuthRateLimitMiddleware,
        rate_limiter=limiter or InMemoryRateLimiterService(window_seconds=900, clock=_FakeClock()),
        limits={"/auth/login": limit},
        enabled=True,
        trust_forwarded_for=trust_forwarded_for,
    )

    @app.post("/auth/login")
    def login():
        return {"success": True}

    @app.get("/auth/login")
    def login_page():
        return {"success": True}

    return TestClient(app)


def test_middleware_returns_429_with_retry_after():
    client = _build_client(limit=2, trust_forwarded_for=True)
    headers = {"X-Forwarded-For": "203.0.113.9"}

    responses = [client.post("/auth/login", headers=headers) for _ in range(3)]

    assert [response.status_code for response in responses] == [200, 200, 429]
    blocked = responses[-1]
    assert blocked.json()["error_code"] == "RATE_LIMITED"
    assert blocked.headers["Retry-After"] == "900"
    assert responses[0].headers["X-RateLimit-Remaining"] == "1"

    # outro cliente não é afetado
    assert client.post("/auth/login", headers={"X-Forwarded-For": "198.51.100.1"}).status_code == 200


def test_middleware_ignores_non_post_requests():
    client = _build_client(limit=1)

    statuses = [client.get("/auth/login").status_code for _ in range(3)]

    assert statuses == [200, 200, 200]


def test_forwarded_header_is_ignored_without_trusted_proxy():
    limiter = InMemoryRateLimiterService(window_seconds=900, clock=_FakeClock())
    client = _build_client(limit=2, limiter=limiter)

    statuses = [
        client.post("/auth/login", headers={"X-Forwarded-For": f"1.2.3.{i}"}).status_code
        for i in range(50)
    ]

    assert statuses[:2] == [200, 200]
    assert set(statuses[2:]) == {429}
    assert limiter.bucket_count == 1


def test_expired_buckets_are_evicted():
    clock = _FakeClock()
    limiter = InMemoryRateLimiterService(limit=5, window_seconds=60, max_buckets=3, clock=clock)

    for i in range(3):
        limiter.check(client_key=f"10.0.0.{i}", endpoint="/auth/login")
    assert limiter.bucket_count == 3

    clock.now += 61
    limiter.check(client_key="10.0.0.99", endpoint="/auth/login")
    assert limiter.bucket_count == 1

    clock.now += 61
    assert limiter.check(client_key="10.0.0.99", endpoint="/auth/login").remaining == 4
    assert limiter.bucket_count == 1
