"""
Tests for the AI proxy API.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeRemote
from kisah_ai.api.app import create_app
from kisah_ai.config import Settings
from kisah_ai.errors import RemoteRejectedError, RemoteUnavailableError
from kisah_ai.services import OFFLINE_MESSAGE
from kisah_ai.services.rule_engine import GREETING_MESSAGE

OPEN_SETTINGS = dict(
    openai_api_key=None,
    api_key=None,
    basic_auth_user=None,
    basic_auth_pass=None,
    cache_backend="memory",
    rate_limit_requests=100,
    sse_chunk_delay_ms=0,
)


def make_settings(**overrides) -> Settings:
    return Settings(**{**OPEN_SETTINGS, **overrides})


def parse_sse(body: str) -> list[str]:
    """Data payloads of every event in an SSE body."""
    events = []
    for frame in body.split("\n\n"):
        lines = [line[len("data: "):] for line in frame.split("\n") if line.startswith("data: ")]
        if lines:
            events.append("\n".join(lines))
    return events


@pytest.fixture
def client():
    """Test client for an offline proxy (no hosted model key)."""
    with TestClient(create_app(make_settings())) as test_client:
        yield test_client


def client_for(remote=None, **overrides) -> TestClient:
    return TestClient(create_app(make_settings(**overrides), remote=remote))


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Kisah Sukses AI Proxy"


def test_health_offline(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "openai": False, "cache_healthy": True}


def test_health_with_remote():
    with client_for(FakeRemote()) as c:
        assert c.get("/health").json()["openai"] is True


@pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": None}])
def test_missing_prompt_is_400(client, body):
    response = client.post("/api/ai", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "prompt required"


def test_invalid_temperature_is_rejected(client):
    response = client.post("/api/ai", json={"prompt": "halo", "temperature": 2})
    assert response.status_code == 422


def test_offline_rule_answer(client):
    response = client.post("/api/ai", json={"prompt": "halo"})
    assert response.status_code == 200
    assert response.json() == {"text": GREETING_MESSAGE, "local": True}


def test_offline_default_answer(client):
    response = client.post("/api/ai", json={"prompt": "siapa presiden pertama?"})
    assert response.json() == {"text": OFFLINE_MESSAGE, "local": True}


def test_second_request_is_cached(client):
    client.post("/api/ai", json={"prompt": "halo"})
    response = client.post("/api/ai", json={"prompt": "halo"})
    assert response.json() == {"text": GREETING_MESSAGE, "cached": True}


def test_remote_answer_includes_raw():
    payload = {"choices": [{"message": {"content": "Hai dari model"}}]}
    with client_for(FakeRemote(payload=payload)) as c:
        response = c.post("/api/ai", json={"prompt": "apa kabar", "max_tokens": 50})

    assert response.status_code == 200
    assert response.json() == {"text": "Hai dari model", "raw": payload}


def test_remote_rejection_is_502():
    remote = FakeRemote(error=RemoteRejectedError(401, "invalid api key"))
    with client_for(remote) as c:
        response = c.post("/api/ai", json={"prompt": "apa kabar"})

    assert response.status_code == 502
    assert response.json()["detail"] == {"error": "OpenAI error", "detail": "invalid api key"}


def test_remote_outage_is_500():
    with client_for(FakeRemote(error=RemoteUnavailableError("timeout"))) as c:
        response = c.post("/api/ai", json={"prompt": "apa kabar"})

    assert response.status_code == 500
    assert response.json()["detail"]["error"] == "Proxy failed"


def test_session_history_records_answer(client):
    client.post("/api/ai", json={"prompt": "halo", "sessionId": "s1"})

    response = client.get("/api/ai/sessions/s1")

    assert response.status_code == 200
    data = response.json()
    assert data["session_id"] == "s1"
    assert [(m["role"], m["text"]) for m in data["history"]] == [("assistant", GREETING_MESSAGE)]


def test_delete_session(client):
    client.post("/api/ai", json={"prompt": "halo", "sessionId": "s1"})

    assert client.delete("/api/ai/sessions/s1").status_code == 200
    assert client.delete("/api/ai/sessions/s1").status_code == 404


def test_cache_stats_and_clear(client):
    client.post("/api/ai", json={"prompt": "halo"})

    stats = client.get("/api/ai/cache/stats").json()
    assert stats["total_entries"] == 1
    assert stats["persisted"] is False

    cleared = client.delete("/api/ai/cache").json()
    assert cleared["deleted_count"] == 1


def test_stream_offline_simulates_and_ends_with_done(client):
    response = client.post("/api/ai/stream", json={"prompt": "halo"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    events = parse_sse(response.text)
    assert events[-1] == "[DONE]"
    assert "".join(events[:-1]) == GREETING_MESSAGE
    assert all(len(e) <= 60 for e in events[:-1])


def test_stream_missing_prompt_is_400(client):
    assert client.post("/api/ai/stream", json={}).status_code == 400


def test_stream_relays_remote_fragments():
    with client_for(FakeRemote(fragments=["Ha", "lo\nbaris"])) as c:
        response = c.post("/api/ai/stream", json={"prompt": "cerita", "sessionId": "s2"})
        history = c.get("/api/ai/sessions/s2").json()["history"]

    assert parse_sse(response.text) == ["Ha", "lo\nbaris", "[DONE]"]
    assert history[-1]["text"] == "Halo\nbaris"


def test_stream_falls_back_to_rules_without_calling_remote():
    remote = FakeRemote(stream_error=RemoteUnavailableError("no stream"))
    with client_for(remote) as c:
        response = c.post("/api/ai/stream", json={"prompt": "halo"})

    assert "".join(parse_sse(response.text)[:-1]) == GREETING_MESSAGE
    assert remote.calls == []


def test_stream_failure_after_fragments_still_ends_with_done():
    remote = FakeRemote(fragments=["a", "b"], stream_error=RemoteRejectedError(500), fail_after=1)
    with client_for(remote) as c:
        response = c.post("/api/ai/stream", json={"prompt": "cerita"})

    assert parse_sse(response.text) == ["a", "[DONE]"]


def test_api_key_required_when_configured():
    with client_for(api_key="secret") as c:
        assert c.post("/api/ai", json={"prompt": "halo"}).status_code == 401
        assert c.post("/api/ai", json={"prompt": "halo"}, headers={"x-api-key": "wrong"}).status_code == 401
        ok = c.post("/api/ai", json={"prompt": "halo"}, headers={"x-api-key": "secret"})
        assert ok.status_code == 200
        # health stays open
        assert c.get("/health").status_code == 200


def test_basic_auth():
    with client_for(basic_auth_user="admin", basic_auth_pass="pw") as c:
        denied = c.post("/api/ai", json={"prompt": "halo"})
        assert denied.status_code == 401
        assert denied.headers["www-authenticate"] == "Basic"
        assert c.post("/api/ai", json={"prompt": "halo"}, auth=("admin", "pw")).status_code == 200
        assert c.post("/api/ai", json={"prompt": "halo"}, auth=("admin", "no")).status_code == 401


def test_rate_limit():
    with client_for(rate_limit_requests=2) as c:
        assert c.post("/api/ai", json={"prompt": "halo"}).status_code == 200
        assert c.post("/api/ai", json={"prompt": "halo"}).status_code == 200
        limited = c.post("/api/ai", json={"prompt": "halo"})

    assert limited.status_code == 429
    assert int(limited.headers["retry-after"]) >= 1


def test_non_object_remote_payload_is_serialized():
    with client_for(FakeRemote(payload=["x"])) as c:
        response = c.post("/api/ai", json={"prompt": "cerita"})

    assert response.status_code == 200
    assert response.json() == {"text": '["x"]'}
