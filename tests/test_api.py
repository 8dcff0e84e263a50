"""Tests for the HTTP API (FastAPI TestClient, fake Claude client)."""
import asyncio
import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest
from fastapi.testclient import TestClient

from parentguidance.exceptions import GuidanceGenerationError
from parentguidance.main import app
from parentguidance.routers.guidance import get_generator, get_preference_store
from parentguidance.services.guidance.generator import GuidanceGenerator
from parentguidance.services.guidance.preferences import PreferenceStore

FIXED_REPLY = (
    "[TITLE]\nBedtime\n[SITUATION]\nChild refuses bed.\n"
    "[ANALYSIS]\nTired and overstimulated.\n[ACTION STEPS]\nDim lights early.\n"
)

DYNAMIC_REPLY = "[TITLE]\nBedtime\n[One]\nfirst\n[Two]\nsecond\n[Three]\nthird\n"


class FakeStream:
    def __init__(self, text: str, error: Exception | None, mid_error: Exception | None):
        self.text = text
        self.error = error
        self.mid_error = mid_error

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        return self

    async def __aexit__(self, *exc_info):
        return False

    @property
    async def text_stream(self):
        half = len(self.text) // 2
        yield self.text[:half]
        if self.mid_error is not None:
            raise self.mid_error
        yield self.text[half:]


class FakeMessages:
    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.mid_error: Exception | None = None

    def stream(self, **kwargs):
        return FakeStream(self.text, self.error, self.mid_error)

    async def create(self, **kwargs):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text=self.text)],
            stop_reason="end_turn",
            usage=None,
        )


@pytest.fixture
def store():
    return PreferenceStore()


@pytest.fixture
def fake_messages():
    return FakeMessages(text=FIXED_REPLY)


@pytest.fixture
def client(store, fake_messages):
    generator = GuidanceGenerator(client=SimpleNamespace(messages=fake_messages))
    app.dependency_overrides[get_preference_store] = lambda: store
    app.dependency_overrides[get_generator] = lambda: generator
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestParseEndpoint:
    def test_uses_stored_mode_by_default(self, client):
        body = client.post("/v1/guidance/parse", json={"raw": FIXED_REPLY}).json()
        assert body["kind"] == "fixed"
        assert body["is_fallback"] is False
        assert body["section_count"] == 6
        assert body["sections"][0] == {"title": "Situation", "content": "Child refuses bed.", "order": 1}

    def test_explicit_mode(self, client):
        body = client.post(
            "/v1/guidance/parse", json={"raw": DYNAMIC_REPLY, "mode": "dynamic"}
        ).json()
        assert body["kind"] == "dynamic"
        assert [s["title"] for s in body["sections"]] == ["One", "Two", "Three"]

    def test_empty_raw_returns_fallback_not_error(self, client):
        response = client.post("/v1/guidance/parse", json={"raw": ""})
        assert response.status_code == 200
        assert response.json()["is_fallback"] is True
        assert response.json()["section_count"] == 1

    def test_unknown_mode_is_rejected(self, client):
        response = client.post("/v1/guidance/parse", json={"raw": "x", "mode": "freeform"})
        assert response.status_code == 422


class TestGenerateEndpoint:
    def test_generates_and_structures(self, client):
        response = client.post(
            "/v1/guidance/generate",
            json={
                "situation": "She won't go to bed.",
                "framework": {"name": "Gentle Sleep", "tools": ["Wind-down song"]},
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["raw"] == FIXED_REPLY
        assert body["mode"] == "fixed"
        assert body["prompt_version"] == "3"
        assert body["guidance"]["title"] == "Bedtime"

    def test_model_failure_maps_to_502(self, client, fake_messages):
        fake_messages.error = GuidanceGenerationError("upstream down")
        # non-anthropic errors pass through the generator unchanged
        response = client.post("/v1/guidance/generate", json={"situation": "x"})
        assert response.status_code == 502
        assert response.json()["detail"] == "upstream down"

    def test_blank_completion_maps_to_502(self, client, fake_messages):
        fake_messages.text = "  "
        response = client.post("/v1/guidance/generate", json={"situation": "x"})
        assert response.status_code == 502

    def test_blank_situation_is_rejected(self, client):
        response = client.post("/v1/guidance/generate", json={"situation": ""})
        assert response.status_code == 422

    def test_real_sdk_client_round_trip(self, store):
        def handler(request: httpx.Request) -> httpx.Response:
            assert "temperature" not in json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "id": "msg_01",
                    "type": "message",
                    "role": "assistant",
                    "model": "claude-sonnet-4-5-20250929",
                    "content": [{"type": "text", "text": FIXED_REPLY}],
                    "stop_reason": "end_turn",
                    "stop_sequence": None,
                    "usage": {"input_tokens": 10, "output_tokens": 20},
                },
            )

        sdk = anthropic.AsyncAnthropic(
            api_key="test-key",
            max_retries=0,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        app.dependency_overrides[get_preference_store] = lambda: store
        app.dependency_overrides[get_generator] = lambda: GuidanceGenerator(client=sdk)
        try:
            response = TestClient(app).post("/v1/guidance/generate", json={"situation": "x"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["guidance"]["title"] == "Bedtime"


class TestPreferencesEndpoint:
    def test_get_and_patch(self, client, store):
        assert client.get("/v1/preferences").json()["structure_mode"] == "fixed"

        response = client.patch("/v1/preferences", json={"structure_mode": "dynamic"})
        assert response.status_code == 200
        assert response.json()["structure_mode"] == "dynamic"
        assert store.snapshot().is_using_dynamic_structure

        body = client.post("/v1/guidance/parse", json={"raw": DYNAMIC_REPLY}).json()
        assert body["kind"] == "dynamic"

    def test_empty_patch_is_a_no_op(self, client):
        response = client.patch("/v1/preferences", json={})
        assert response.status_code == 200
        assert response.json()["style"] == "warm_practical"


def _ndjson(response) -> list[dict]:
    return [json.loads(line) for line in response.text.splitlines() if line]


class TestStreamEndpoint:
    def test_streams_deltas_then_guidance(self, client):
        response = client.post("/v1/guidance/generate/stream", json={"situation": "x"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")

        events = _ndjson(response)
        assert [e["type"] for e in events] == ["delta", "delta", "guidance"]
        assert "".join(e["text"] for e in events[:-1]) == FIXED_REPLY
        assert events[-1]["raw"] == FIXED_REPLY
        assert events[-1]["guidance"]["title"] == "Bedtime"
        assert events[-1]["prompt_version"] == "12"

    def test_failure_before_first_chunk_maps_to_502(self, client, fake_messages):
        fake_messages.error = GuidanceGenerationError("upstream down")
        response = client.post("/v1/guidance/generate/stream", json={"situation": "x"})
        assert response.status_code == 502
        assert response.json()["detail"] == "upstream down"

    def test_empty_stream_maps_to_502(self, client, fake_messages):
        fake_messages.text = ""
        response = client.post("/v1/guidance/generate/stream", json={"situation": "x"})
        assert response.status_code == 502

    def test_failure_mid_stream_ends_with_error_line(self, client, fake_messages):
        fake_messages.mid_error = GuidanceGenerationError("connection dropped")
        response = client.post("/v1/guidance/generate/stream", json={"situation": "x"})
        assert response.status_code == 200
        events = _ndjson(response)
        assert events[0]["type"] == "delta"
        assert events[-1] == {"type": "error", "detail": "connection dropped"}


class LoopCheckingStore(PreferenceStore):
    """Records whether update() ran with an event loop on the current thread."""

    ran_on_event_loop: bool | None = None

    def update(self, **changes):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.ran_on_event_loop = False
        else:
            self.ran_on_event_loop = True
        return super().update(**changes)


def test_preference_update_runs_off_the_event_loop(tmp_path):
    store = LoopCheckingStore(tmp_path / "prefs.json")
    app.dependency_overrides[get_preference_store] = lambda: store
    try:
        response = TestClient(app).patch("/v1/preferences", json={"style": "analytical_scientific"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert store.ran_on_event_loop is False
    assert (tmp_path / "prefs.json").exists()
