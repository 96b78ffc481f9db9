"""Client for our own AI proxy server.

This is the remote capability seen from the client side: a POST to
`/api/ai` for a full answer and a POST to `/api/ai/stream` for
server-sent events.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from kisah_ai.config import settings
from kisah_ai.errors import RemoteMalformedError, RemoteRejectedError, RemoteUnavailableError
from kisah_ai.utils import iter_sse_data

logger = logging.getLogger(__name__)


class ProxyClient:
    """HTTP implementation of the RemoteCapability protocol.

    Example:
        ```python
        proxy = ProxyClient.create(base_url="http://localhost:3000", api_key="secret")
        payload = await proxy.complete("halo", 400, 0.6, "default")
        print(payload["text"])
        ```
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the proxy client.

        Args:
            base_url: Proxy root URL. Defaults to settings.proxy_base_url.
            api_key: Shared secret sent as x-api-key, if the proxy requires one.
            timeout: Request timeout in seconds. Defaults to settings.
            http_client: Preconfigured client (mainly for tests).
        """
        self._base_url = (base_url or settings.proxy_base_url).rstrip("/")
        self._api_key = api_key
        self._timeout = timeout or settings.remote_timeout_seconds
        self._client = http_client

    @classmethod
    def create(cls, base_url: str | None = None, api_key: str | None = None) -> "ProxyClient":
        """Factory method to create ProxyClient with defaults."""
        return cls(base_url=base_url, api_key=api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def supports_streaming(self) -> bool:
        return True

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["x-api-key"] = self._api_key
        return headers

    @staticmethod
    def _body(prompt: str, max_tokens: int, temperature: float, session_id: str) -> dict[str, Any]:
        return {
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "sessionId": session_id,
        }

    async def complete(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        session_id: str,
    ) -> dict[str, Any]:
        """POST /api/ai and return the decoded payload.

        Raises:
            RemoteUnavailableError: If the proxy is unreachable
            RemoteRejectedError: On a non-success status
            RemoteMalformedError: If the body is not JSON
        """
        try:
            response = await self.client.post(
                f"{self._base_url}/api/ai",
                json=self._body(prompt, max_tokens, temperature, session_id),
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(f"AI proxy unreachable: {e}") from e

        if response.is_error:
            raise RemoteRejectedError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteMalformedError(f"AI proxy returned a non-JSON body: {e}") from e

        if not isinstance(payload, dict):
            return {"value": payload}
        return payload

    async def stream(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        session_id: str,
    ) -> AsyncIterator[str]:
        """POST /api/ai/stream and yield each event's text fragment."""
        try:
            async with self.client.stream(
                "POST",
                f"{self._base_url}/api/ai/stream",
                json=self._body(prompt, max_tokens, temperature, session_id),
                headers=self._headers(),
            ) as response:
                if response.is_error:
                    detail = (await response.aread()).decode(errors="replace")
                    raise RemoteRejectedError(response.status_code, detail)

                async for fragment in iter_sse_data(response.aiter_lines()):
                    yield fragment
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(f"AI proxy stream failed: {e}") from e

    async def is_available(self) -> bool:
        """Check the proxy's /health endpoint."""
        try:
            response = await self.client.get(f"{self._base_url}/health")
            return response.is_success
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
