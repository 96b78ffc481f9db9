"""Access control for the proxy API: shared-secret / basic auth and rate limiting."""

import logging
import secrets
import threading
import time
from collections import deque
from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from kisah_ai.config import Settings

logger = logging.getLogger(__name__)

_basic = HTTPBasic(auto_error=False)


class SlidingWindowRateLimiter:
    """Allows at most `max_requests` per client in any rolling window.

    Clients with no request left in the window are forgotten, so memory
    stays proportional to the clients seen in the last window.
    """

    def __init__(
        self,
        max_requests: int = 60,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def _prune(self, hits: deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        """Drop every client whose requests have all left the window."""
        for client in list(self._hits):
            hits = self._hits[client]
            self._prune(hits, now)
            if not hits:
                del self._hits[client]
        self._last_sweep = now

    def hit(self, client_id: str) -> bool:
        """Record a request; return False if it exceeds the limit."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            hits = self._hits.setdefault(client_id, deque())
            self._prune(hits, now)
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def retry_after(self, client_id: str) -> float:
        """Seconds until the oldest request of the client leaves the window."""
        now = self._clock()
        with self._lock:
            hits = self._hits.get(client_id)
            if hits is None:
                return 0.0
            self._prune(hits, now)
            if not hits:
                del self._hits[client_id]
                return 0.0
            if len(hits) < self.max_requests:
                return 0.0
            return max(0.0, self.window_seconds - (now - hits[0]))

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


def is_authorized(
    app_settings: Settings,
    api_key_header: str | None,
    credentials: HTTPBasicCredentials | None,
) -> bool:
    """Check a request's credentials against the configured ones.

    Allowed when the x-api-key matches, when basic-auth credentials match,
    or when no credential is configured at all (open mode).
    """
    if app_settings.api_key and api_key_header:
        if secrets.compare_digest(api_key_header.encode(), app_settings.api_key.encode()):
            return True

    if app_settings.basic_auth_user and app_settings.basic_auth_pass and credentials:
        user_ok = secrets.compare_digest(
            credentials.username.encode(), app_settings.basic_auth_user.encode()
        )
        pass_ok = secrets.compare_digest(
            credentials.password.encode(), app_settings.basic_auth_pass.encode()
        )
        if user_ok and pass_ok:
            return True

    return not app_settings.auth_configured


def require_auth(
    request: Request,
    credentials: HTTPBasicCredentials | None = Depends(_basic),
) -> None:
    """FastAPI dependency rejecting unauthorized requests with 401."""
    app_settings: Settings = request.app.state.settings
    if is_authorized(app_settings, request.headers.get("x-api-key"), credentials):
        return

    headers = {"WWW-Authenticate": "Basic"} if app_settings.basic_auth_user else None
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers=headers,
    )


def client_id(request: Request) -> str:
    return request.client.host if request.client else "anonymous"


def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency rejecting requests over the limit with 429."""
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    client = client_id(request)
    if limiter.hit(client):
        return

    retry_after = limiter.retry_after(client)
    logger.warning("Rate limit exceeded for %s", client)
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many requests, please try again later.",
        headers={"Retry-After": str(int(retry_after) + 1)},
    )
