"""OpenAI chat completions client.

The remote capability used by the proxy server when OPENAI_API_KEY is
configured. Sends the prompt as a single user message and returns the
decoded payload unchanged; text extraction happens in the resolver.

Streaming uses the same endpoint with `stream: true` and yields the
`delta.content` of every chunk until the `[DONE]` sentinel.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from kisah_ai.config import settings
from kisah_ai.errors import RemoteMalformedError, RemoteRejectedError, RemoteUnavailableError
from kisah_ai.utils import iter_sse_data

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """Chat completions implementation of the RemoteCapability protocol.

    Example:
        ```python
        client = OpenAIChatClient.create(api_key="sk-...")
        payload = await client.complete("halo", max_tokens=400, temperature=0.6, session_id="default")
        ```
    """

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the chat client.

        Args:
            api_key: Bearer token for the API.
            model: Chat model name. Defaults to settings.openai_model.
            base_url: API root. Defaults to settings.openai_base_url.
            timeout: Request timeout in seconds. Defaults to settings.
            http_client: Preconfigured client (mainly for tests).
        """
        self._api_key = api_key
        self._model = model or settings.openai_model
        self._base_url = (base_url or settings.openai_base_url).rstrip("/")
        self._timeout = timeout or settings.remote_timeout_seconds
        self._client = http_client

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        model: str | None = None,
    ) -> "OpenAIChatClient":
        """Factory method to create OpenAIChatClient from settings.

        Raises:
            ValueError: If no API key is given or configured
        """
        key = api_key or settings.openai_api_key
        if not key:
            raise ValueError("OPENAI_API_KEY is not configured")
        return cls(api_key=key, model=model)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def supports_streaming(self) -> bool:
        return True

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _body(self, prompt: str, max_tokens: int, temperature: float, stream: bool) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if stream:
            body["stream"] = True
        return body

    async def complete(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        session_id: str,
    ) -> dict[str, Any]:
        """Request a full chat completion.

        Raises:
            RemoteUnavailableError: On network failure or timeout
            RemoteRejectedError: On a non-success status
            RemoteMalformedError: If the body is not JSON
        """
        url = f"{self._base_url}/chat/completions"
        try:
            response = await self.client.post(
                url,
                json=self._body(prompt, max_tokens, temperature, stream=False),
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(f"OpenAI request failed: {e}") from e

        if response.is_error:
            logger.error("OpenAI error %s: %s", response.status_code, response.text[:500])
            raise RemoteRejectedError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteMalformedError(f"OpenAI returned a non-JSON body: {e}") from e

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
        """Stream a chat completion, yielding each content delta."""
        url = f"{self._base_url}/chat/completions"
        try:
            async with self.client.stream(
                "POST",
                url,
                json=self._body(prompt, max_tokens, temperature, stream=True),
                headers=self._headers(),
            ) as response:
                if response.is_error:
                    detail = (await response.aread()).decode(errors="replace")
                    logger.error("OpenAI stream error %s: %s", response.status_code, detail[:500])
                    raise RemoteRejectedError(response.status_code, detail)

                async for data in iter_sse_data(response.aiter_lines()):
                    delta = self._delta_content(data)
                    if delta:
                        yield delta
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(f"OpenAI stream failed: {e}") from e

    @staticmethod
    def _delta_content(data: str) -> str | None:
        """Pull `choices[0].delta.content` out of one stream chunk."""
        try:
            chunk = json.loads(data)
            return chunk["choices"][0]["delta"].get("content")
        except (json.JSONDecodeError, KeyError, IndexError, TypeError, AttributeError):
            logger.debug("Skipping unrecognised stream chunk: %s", data[:200])
            return None

    async def is_available(self) -> bool:
        """Check if the models endpoint answers with our key."""
        try:
            response = await self.client.get(f"{self._base_url}/models", headers=self._headers())
            return response.is_success
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
