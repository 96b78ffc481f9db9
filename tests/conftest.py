"""Shared fixtures and fakes for the test suite."""

from typing import Any

import pytest

from kisah_ai.services import RequestResolver, ResponseCache, RuleEngine, SessionMemory


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeRemote:
    """Programmable RemoteCapability."""

    def __init__(
        self,
        payload: Any = None,
        error: Exception | None = None,
        fragments: list[str] | None = None,
        stream_error: Exception | None = None,
        fail_after: int | None = None,
        supports_streaming: bool = True,
    ) -> None:
        self.payload = payload if payload is not None else {"text": "Jawaban dari model"}
        self.error = error
        self.fragments = fragments or []
        self.stream_error = stream_error
        self.fail_after = fail_after
        self._supports_streaming = supports_streaming
        self.calls: list[dict[str, Any]] = []
        self.stream_calls: list[str] = []

    @property
    def supports_streaming(self) -> bool:
        return self._supports_streaming

    async def complete(self, prompt, max_tokens, temperature, session_id):
        self.calls.append(
            {
                "prompt": prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "session_id": session_id,
            }
        )
        if self.error is not None:
            raise self.error
        return self.payload

    async def stream(self, prompt, max_tokens, temperature, session_id):
        self.stream_calls.append(prompt)
        if self.stream_error is not None and self.fail_after is None:
            raise self.stream_error
        for index, fragment in enumerate(self.fragments):
            if self.fail_after is not None and index == self.fail_after:
                raise self.stream_error
            yield fragment

    async def is_available(self) -> bool:
        return self.error is None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_resolver(clock):
    """Build a resolver with fresh state; remote and mode are configurable."""

    def _make(remote=None, fallback_on_error=True, rule_engine=None):
        return RequestResolver(
            cache=ResponseCache.create(clock=clock),
            sessions=SessionMemory(history_limit=20, clock=clock),
            rule_engine=rule_engine or RuleEngine(),
            remote=remote,
            fallback_on_error=fallback_on_error,
            fallback_ttl_ms=60_000,
            default_ttl_ms=300_000,
        )

    return _make
