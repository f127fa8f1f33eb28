"""Integration tests for the HTTP API (chatflow.main)."""

import base64
import json

import pytest
from fastapi.testclient import TestClient

from chatflow.core.config import Settings, get_settings
from chatflow.core.dependencies import ConversationStore, get_conversation_store, get_provider_registry
from chatflow.main import create_app
from chatflow.services.registry import ProviderRegistry

from conftest import FakeSearch, analysis_json

API = "/api/v1"


@pytest.fixture
def store():
    return ConversationStore()


@pytest.fixture
def app(settings, registry, store):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_provider_registry] = lambda: registry
    app.dependency_overrides[get_conversation_store] = lambda: store
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


# ── Health endpoints ─────────────────────────────────────────────────────────


class TestHealthEndpoints:
    def test_health(self, client, settings):
        resp = client.get(f"{API}/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["version"] == settings.app_version

    def test_ready(self, client):
        data = client.get(f"{API}/ready").json()
        assert data["ready"] is True
        assert data["checks"]["llm_configured"] is True
        assert data["checks"]["search_configured"] is True

    def test_not_ready_without_llm_key(self, app):
        app.dependency_overrides[get_settings] = lambda: Settings(_env_file=None, llm_api_key=None)
        data = TestClient(app).get(f"{API}/ready").json()
        assert data["ready"] is False

    def test_live(self, client):
        assert client.get(f"{API}/live").json() == {"status": "alive"}

    def test_root(self, client):
        data = client.get("/").json()
        assert data["health"] == f"{API}/health"


# ── /agent/query ─────────────────────────────────────────────────────────────


class TestQueryEndpoint:
    def test_chat_query(self, client):
        resp = client.post(f"{API}/agent/query", json={"message": "Hello there"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["conversation_id"]
        assert data["result"]["response"] == "Hello, world"
        assert [step["agent"] for step in data["result"]["steps"]] == ["query-agent", "response-agent"]

    def test_search_query(self, client, fake_llm, fake_search):
        fake_llm.completion = analysis_json(needs_search=True)

        resp = client.post(f"{API}/agent/query", json={
            "message": "What's the weather effect on crop yields?",
            "flags": {"needs_search": True, "workflow_type": "chat"},
        })

        assert resp.status_code == 200
        result = resp.json()["result"]
        assert result["search"][0]["title"] == "Climate and crops"
        assert len(result["steps"]) == 3
        assert len(fake_search.calls) == 1

    def test_conversation_history_is_kept(self, client, fake_llm, store):
        first = client.post(f"{API}/agent/query", json={"message": "My name is Sam"}).json()
        conversation_id = first["conversation_id"]

        second = client.post(f"{API}/agent/query", json={
            "message": "What is my name?",
            "conversation_id": conversation_id,
        }).json()

        assert second["conversation_id"] == conversation_id
        assert len(store.get_history(conversation_id)) == 4
        messages = fake_llm.stream_calls[-1]["messages"]
        assert {"role": "user", "content": "My name is Sam"} in messages

    def test_blank_message_rejected(self, client):
        resp = client.post(f"{API}/agent/query", json={"message": "   "})
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_invalid_flags_rejected(self, client):
        resp = client.post(f"{API}/agent/query", json={
            "message": "hi",
            "flags": {"summary_mode": "podcast"},
        })
        assert resp.status_code == 422

    def test_missing_credentials(self, app):
        app.dependency_overrides[get_provider_registry] = lambda: ProviderRegistry(
            settings=Settings(_env_file=None, llm_api_key=None)
        )

        resp = TestClient(app).post(f"{API}/agent/query", json={"message": "hi"})

        assert resp.status_code == 500
        assert resp.json()["error_code"] == "CONFIGURATION_ERROR"

    def test_provider_error(self, app, registry):
        registry._search = FakeSearch(error=ConnectionError("search down"))
        registry._llm.completion = analysis_json(needs_search=True)
        client = TestClient(app, raise_server_exceptions=False)

        resp = client.post(f"{API}/agent/query", json={
            "message": "news",
            "flags": {"needs_search": True},
        })

        assert resp.status_code == 500
        data = resp.json()
        assert data["success"] is False
        assert data["error_code"] == "INTERNAL_ERROR"


# ── /agent/voice ─────────────────────────────────────────────────────────────


class TestVoiceEndpoint:
    def test_requires_input(self, client):
        resp = client.post(f"{API}/agent/voice", data={})
        assert resp.status_code == 400
        assert "voice_text" in resp.json()["error"]

    def test_voice_text(self, client, fake_speech):
        resp = client.post(f"{API}/agent/voice", data={"voice_text": "Weather today?"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["transcription"] == "Weather today?"
        assert data["response"] == "Hello, world"
        assert base64.b64decode(data["audio"]) == b"RIFFfake"
        assert fake_speech.transcribe_calls == []

    def test_audio_upload(self, client, fake_speech):
        resp = client.post(
            f"{API}/agent/voice",
            files={"audio": ("clip.wav", b"RIFF\x00\x01", "audio/wav")},
            data={"voice_options": json.dumps({"language": "fr-FR", "voice": "aura-luna-en"})},
        )

        assert resp.status_code == 200
        assert resp.json()["transcription"] == "transcribed text"
        assert fake_speech.transcribe_calls[0]["audio"] == b"RIFF\x00\x01"
        assert fake_speech.transcribe_calls[0]["options"]["language"] == "fr-FR"
        assert fake_speech.synthesize_calls[0]["options"]["voice"] == "aura-luna-en"

    def test_audio_too_large(self, app, settings):
        app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"max_upload_bytes": 4})

        resp = TestClient(app).post(
            f"{API}/agent/voice",
            files={"audio": ("clip.wav", b"0123456789", "audio/wav")},
        )

        assert resp.status_code == 413

    def test_invalid_voice_options(self, client):
        resp = client.post(f"{API}/agent/voice", data={"voice_text": "hi", "voice_options": "{not json"})
        assert resp.status_code == 400


# ── /agent/summary ───────────────────────────────────────────────────────────


class TestSummaryEndpoint:
    def test_voice_transcript(self, client, fake_llm):
        resp = client.post(f"{API}/agent/summary", json={
            "content": "We agreed to ship on Friday.",
            "mode": "voice",
        })

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "summary": "Hello, world"}
        assert "We agreed to ship on Friday." in fake_llm.stream_calls[0]["messages"][1]["content"]

    def test_search_results(self, client, fake_llm):
        resp = client.post(f"{API}/agent/summary", json={
            "content": [{"title": "T", "url": "https://t", "content": "C"}, "plain snippet"],
            "mode": "search",
        })

        assert resp.status_code == 200
        user_message = fake_llm.stream_calls[0]["messages"][1]["content"]
        assert "plain snippet" in user_message
        assert "https://t" in user_message

    def test_chat_history(self, client):
        resp = client.post(f"{API}/agent/summary", json={
            "content": [{"role": "user", "content": "plan the launch"}],
            "mode": "chat",
        })
        assert resp.json()["summary"] == "Hello, world"

    def test_empty_content_rejected(self, client):
        resp = client.post(f"{API}/agent/summary", json={"content": "", "mode": "voice"})
        assert resp.status_code == 422

    def test_mismatched_content_rejected(self, client):
        resp = client.post(f"{API}/agent/summary", json={
            "content": [{"speaker": "bob"}],
            "mode": "chat",
        })
        assert resp.status_code == 422

    def test_invalid_mode(self, client):
        resp = client.post(f"{API}/agent/summary", json={"content": "x", "mode": "podcast"})
        assert resp.status_code == 422
