"""
API Tests
---------
HTTP behaviour of the relay: routes, status codes, error bodies and
middleware. Services are real, upstream clients are fakes swapped in with
app.dependency_overrides.

USAGE:
pytest backend/test_api.py
"""

from fastapi.testclient import TestClient

from chat_relay.config import Settings
from chat_relay.llm.base_client import LLMResponse
from chat_relay.main import create_app
from chat_relay.services.assist_service import AssistService, get_assist_service
from chat_relay.services.relay_service import RelayService, get_relay_service
from chat_relay.utils.middleware import RATE_LIMIT_MESSAGE, SECURITY_HEADERS


class UpstreamFailure(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class FakeUpstream:
    """Answers every call the same way and counts calls"""

    def __init__(self, message=None, usage=None, models=None, error=None):
        self.message = message or {"role": "assistant", "content": "hello"}
        self.usage = usage
        self.models = models or []
        self.error = error
        self.calls = 0

    async def chat(self, messages, model=None, max_tokens=1000, temperature=0.7, **kwargs):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return LLMResponse(message=self.message, model=model or "m", provider="fake", usage=self.usage)

    async def list_models(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.models

    async def is_available(self):
        return True


def make_client(upstream=None, assist_upstream=None, **overrides):
    """TestClient over a fresh app wired to fake upstreams"""
    values = dict(ENVIRONMENT="development", RATE_LIMIT="1000 per minute")
    values.update(overrides)
    settings = Settings(**values)

    app = create_app(settings)
    app.dependency_overrides[get_relay_service] = lambda: RelayService(settings, upstream or FakeUpstream())
    app.dependency_overrides[get_assist_service] = (
        lambda: AssistService(settings, assist_upstream or FakeUpstream())
    )
    return TestClient(app)


# =============================================================================
# CHAT COMPLETION
# =============================================================================

def test_chat_completion_success():
    upstream = FakeUpstream(message={"role": "assistant", "content": "hello"}, usage={"tokens": 5})
    client = make_client(upstream)

    response = client.post(
        "/api/chat/completion",
        json={"messages": [{"role": "user", "content": "hi"}], "model": "m1"}
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"message": {"role": "assistant", "content": "hello"}, "usage": {"tokens": 5}},
    }


def test_chat_completion_empty_messages_400():
    upstream = FakeUpstream()
    client = make_client(upstream)

    response = client.post("/api/chat/completion", json={"messages": []})

    assert response.status_code == 400
    assert response.json() == {"error": "messages array is required and cannot be empty"}
    assert upstream.calls == 0


def test_chat_completion_missing_body_400():
    response = make_client().post("/api/chat/completion")

    assert response.status_code == 400
    assert response.json()["error"] == "messages array is required and cannot be empty"


def test_chat_completion_bad_role_400():
    response = make_client().post(
        "/api/chat/completion",
        json={"messages": [{"role": "wizard", "content": "hi"}]}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid message format"
    assert "user, assistant, system" in body["message"]


def test_chat_completion_malformed_json_400():
    response = make_client().post(
        "/api/chat/completion",
        content=b'{"messages": [',
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "invalid request body"}


def test_chat_completion_upstream_401():
    client = make_client(FakeUpstream(error=UpstreamFailure("key sk-secret invalid", status_code=401)))

    response = client.post("/api/chat/completion", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 401
    assert response.json() == {"error": "invalid API key provided to upstream provider"}


def test_chat_completion_upstream_429():
    client = make_client(FakeUpstream(error=UpstreamFailure("slow down", status_code=429)))

    response = client.post("/api/chat/completion", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 429
    assert response.json() == {"error": "rate limit exceeded for upstream provider"}


def test_chat_completion_upstream_error_development_shows_message():
    client = make_client(FakeUpstream(error=UpstreamFailure("socket hang up")))

    response = client.post("/api/chat/completion", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 500
    assert response.json() == {"error": "internal server error", "message": "socket hang up"}


def test_chat_completion_upstream_error_production_hides_message():
    client = make_client(FakeUpstream(error=UpstreamFailure("socket hang up")), ENVIRONMENT="production")

    response = client.post("/api/chat/completion", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 500
    assert response.json() == {"error": "internal server error"}


def test_chat_completion_passes_non_dict_usage_through():
    client = make_client(FakeUpstream(usage=[1, 2]))

    response = client.post("/api/chat/completion", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 200
    assert response.json()["data"]["usage"] == [1, 2]


def test_app_without_api_key_still_validates_requests():
    # No service overrides: the app builds its own clients from these settings
    settings = Settings(OPENROUTER_API_KEY="", ENVIRONMENT="development", RATE_LIMIT="1000 per minute")
    client = TestClient(create_app(settings))

    response = client.post("/api/chat/completion", json={"messages": []})
    assert response.status_code == 400
    assert response.json() == {"error": "messages array is required and cannot be empty"}

    response = client.post("/api/chat/completion", json={"messages": [{"role": "wizard", "content": "hi"}]})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid message format"


def test_app_settings_drive_error_rendering():
    settings = Settings(ENVIRONMENT="production", RATE_LIMIT="1000 per minute")
    app = create_app(settings)
    app.dependency_overrides[get_relay_service] = (
        lambda: RelayService(settings, FakeUpstream(error=UpstreamFailure("socket hang up")))
    )

    response = TestClient(app).post(
        "/api/chat/completion",
        json={"messages": [{"role": "user", "content": "hi"}]}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "internal server error"}


# =============================================================================
# MODELS
# =============================================================================

def test_models_success():
    client = make_client(FakeUpstream(models=[{"id": "a"}, {"id": "b", "name": "B"}]))

    response = client.get("/api/models")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [{"id": "a"}, {"id": "b", "name": "B"}]}


def test_models_failure_500():
    client = make_client(FakeUpstream(error=UpstreamFailure("bad gateway", status_code=502)))

    response = client.get("/api/models")

    assert response.status_code == 500
    assert response.json() == {"error": "failed to fetch models from external API"}


def test_models_passes_entries_through_verbatim():
    client = make_client(FakeUpstream(models=["a", {"id": "b"}, 3]))

    response = client.get("/api/models")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": ["a", {"id": "b"}, 3]}


# =============================================================================
# ASSIST
# =============================================================================

def test_summarize_success():
    assist = FakeUpstream(message={"role": "assistant", "content": "A chat about lists."})
    client = make_client(assist_upstream=assist)

    response = client.post(
        "/api/assist/summarize",
        json={"messages": [{"role": "user", "content": "hi"}]}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"text": "A chat about lists."}}


def test_follow_up_questions_empty_messages_400():
    assist = FakeUpstream()
    client = make_client(assist_upstream=assist)

    response = client.post("/api/assist/follow-up-questions", json={"messages": []})

    assert response.status_code == 400
    assert assist.calls == 0


# =============================================================================
# HEALTH, ROOT & MIDDLEWARE
# =============================================================================

def test_health():
    response = make_client().get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert "timestamp" in body


def test_root():
    response = make_client().get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/api/health"


def test_security_headers_present():
    response = make_client().get("/api/health")

    for header, value in SECURITY_HEADERS.items():
        assert response.headers[header] == value


def test_cors_preflight_allows_frontend():
    response = make_client(CORS_ORIGINS="http://localhost:5173").options(
        "/api/chat/completion",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        }
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_oversized_body_413():
    client = make_client(MAX_BODY_SIZE_MB=1)
    payload = b'{"messages": [{"role": "user", "content": "' + b"x" * (1024 * 1024 + 1) + b'"}]}'

    response = client.post(
        "/api/chat/completion",
        content=payload,
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 413
    assert response.json() == {"error": "request body too large"}


def test_chunked_body_over_limit_413():
    upstream = FakeUpstream()
    client = make_client(upstream, MAX_BODY_SIZE_MB=1)

    def chunks():
        yield b'{"messages": [{"role": "user", "content": "'
        for _ in range(3):
            yield b"x" * (512 * 1024)
        yield b'"}]}'

    response = client.post(
        "/api/chat/completion",
        content=chunks(),
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 413
    assert response.json() == {"error": "request body too large"}
    assert upstream.calls == 0


def test_chunked_body_under_limit_is_replayed():
    upstream = FakeUpstream()
    client = make_client(upstream, MAX_BODY_SIZE_MB=1)

    def chunks():
        yield b'{"messages": [{"role": "user", '
        yield b'"content": "hi"}]}'

    response = client.post(
        "/api/chat/completion",
        content=chunks(),
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 200
    assert upstream.calls == 1


def test_rate_limit_per_ip():
    client = make_client(RATE_LIMIT="2 per minute")

    assert client.get("/api/health").status_code == 200
    assert client.get("/api/health").status_code == 200

    response = client.get("/api/health")
    assert response.status_code == 429
    assert response.json() == {"error": RATE_LIMIT_MESSAGE}

    # The welcome page is not counted
    assert client.get("/").status_code == 200
