"""
Tests for the rate limiter and credential checks.
"""

from fastapi.security import HTTPBasicCredentials

from kisah_ai.api.security import SlidingWindowRateLimiter, is_authorized
from kisah_ai.config import Settings


class TickClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_limiter_allows_up_to_max_per_window():
    clock = TickClock()
    limiter = SlidingWindowRateLimiter(max_requests=3, window_seconds=10, clock=clock)

    assert [limiter.hit("a") for _ in range(4)] == [True, True, True, False]
    assert limiter.hit("b") is True


def test_limiter_window_slides():
    clock = TickClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=10, clock=clock)
    limiter.hit("a")
    clock.now = 4
    limiter.hit("a")

    clock.now = 9
    assert limiter.hit("a") is False
    assert limiter.retry_after("a") == 1

    clock.now = 10
    assert limiter.hit("a") is True


def test_limiter_reset():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, clock=TickClock())
    limiter.hit("a")
    limiter.reset()
    assert limiter.hit("a") is True


def open_settings(**overrides) -> Settings:
    values = dict(api_key=None, basic_auth_user=None, basic_auth_pass=None)
    values.update(overrides)
    return Settings(**values)


def test_open_mode_allows_everything():
    assert is_authorized(open_settings(), None, None) is True


def test_api_key():
    settings = open_settings(api_key="secret")
    assert is_authorized(settings, "secret", None) is True
    assert is_authorized(settings, "nope", None) is False
    assert is_authorized(settings, None, None) is False


def test_basic_credentials():
    settings = open_settings(basic_auth_user="admin", basic_auth_pass="pw")
    assert is_authorized(settings, None, HTTPBasicCredentials(username="admin", password="pw")) is True
    assert is_authorized(settings, None, HTTPBasicCredentials(username="admin", password="x")) is False


def test_either_credential_is_enough():
    settings = open_settings(api_key="secret", basic_auth_user="admin", basic_auth_pass="pw")
    assert is_authorized(settings, "secret", None) is True
    assert is_authorized(settings, None, HTTPBasicCredentials(username="admin", password="pw")) is True


def test_limiter_forgets_idle_clients():
    clock = TickClock()
    limiter = SlidingWindowRateLimiter(max_requests=5, window_seconds=10, clock=clock)
    limiter.hit("a")
    limiter.hit("b")
    assert limiter.tracked_clients() == 2

    clock.now = 10
    limiter.hit("c")

    assert limiter.tracked_clients() == 1
    assert limiter.hit("a") is True


def test_retry_after_drops_expired_client():
    clock = TickClock()
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=10, clock=clock)
    limiter.hit("a")

    clock.now = 10
    assert limiter.retry_after("a") == 0.0
    assert limiter.tracked_clients() == 0
