import asyncio

import pytest
import redis
from fastapi import HTTPException
from starlette.requests import Request

from eventstaff import rate_limiter


class FakeRedis:
    def __init__(self, fail=False):
        self.store = {}
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise redis.ConnectionError("down")
        return self.store.get(key)

    def ttl(self, key):
        return 60 if key in self.store else -2

    def set(self, key, value, ex=None):
        if self.fail:
            raise redis.ConnectionError("down")
        self.store[key] = value

    def ping(self):
        return True


@pytest.fixture(autouse=True)
def clear_memory_cache(monkeypatch):
    monkeypatch.setattr(rate_limiter, "last_cleanup_time", 0)
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


def make_request(ip="10.0.0.1"):
    return Request({"type": "http", "method": "POST", "path": "/", "headers": [], "client": (ip, 1234)})


def test_limit_is_enforced_within_window():
    client = FakeRedis()

    results = [rate_limiter.check_rate_limit("inquiries:1.2.3.4", 3, 3600, client) for _ in range(4)]

    assert [allowed for allowed, _, _ in results] == [True, True, True, False]
    assert results[-1][1] == 3


def test_count_is_loaded_from_redis():
    client = FakeRedis()
    client.store["ai:1.2.3.4"] = "5"

    allowed, count, ttl = rate_limiter.check_rate_limit("ai:1.2.3.4", 5, 3600, client)

    assert allowed is False
    assert count == 5
    assert 0 < ttl <= 60


def test_redis_errors_fall_back_to_memory():
    allowed, count, _ = rate_limiter.check_rate_limit("alerts:x", 2, 3600, FakeRedis(fail=True))

    assert allowed is True
    assert count == 1


def test_disabled_limiter_is_a_no_op(monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", False)
    limiter = rate_limiter.create_rate_limiter(limit=0, window_seconds=60, key_prefix="t")

    assert asyncio.run(limiter(make_request())) is None


def test_limiter_raises_429_with_retry_after(monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: FakeRedis())
    limiter = rate_limiter.create_rate_limiter(limit=1, window_seconds=60, key_prefix="t")

    asyncio.run(limiter(make_request()))
    with pytest.raises(HTTPException) as exc:
        asyncio.run(limiter(make_request()))

    assert exc.value.status_code == 429
    assert "Retry-After" in exc.value.headers


def test_limiter_fails_closed_without_redis(monkeypatch):
    def unavailable():
        raise redis.ConnectionError("refused")

    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "get_redis_client", unavailable)
    limiter = rate_limiter.create_rate_limiter(limit=5, window_seconds=60, key_prefix="t")

    with pytest.raises(HTTPException) as exc:
        asyncio.run(limiter(make_request()))
    assert exc.value.status_code == 503


def test_expired_keys_are_evicted_from_memory(monkeypatch):
    client = FakeRedis(fail=True)
    now = 1_800_000_000
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now)
    for i in range(50):
        rate_limiter.check_rate_limit(f"inquiries:10.0.0.{i}", 5, 60, client)
    assert len(rate_limiter.memory_cache) == 50

    now += 61
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now)
    rate_limiter.check_rate_limit("inquiries:10.0.1.1", 5, 60, client)

    assert list(rate_limiter.memory_cache) == ["inquiries:10.0.1.1"]


def test_live_keys_survive_cleanup(monkeypatch):
    client = FakeRedis(fail=True)
    monkeypatch.setattr(rate_limiter.time, "time", lambda: 1_800_000_000)
    rate_limiter.check_rate_limit("ai:1.1.1.1", 5, 3600, client)
    rate_limiter.check_rate_limit("ai:1.1.1.1", 5, 3600, client)

    monkeypatch.setattr(rate_limiter.time, "time", lambda: 1_800_000_120)
    allowed, count, _ = rate_limiter.check_rate_limit("ai:1.1.1.1", 5, 3600, client)

    assert allowed is True
    assert count == 3
