"""Shared test fixtures for the Chatflow test suite."""

import json
from typing import List, Optional

import pytest

from chatflow.agents.base import AgentConfig, AgentResult, BaseAgent
from chatflow.core.config import Settings
from chatflow.models.schemas import ExecutionContext, SearchHit, VoiceResult
from chatflow.services.base import LLMProvider, SearchProvider, SpeechProvider
from chatflow.services.registry import ProviderRegistry


# ── Fake providers ───────────────────────────────────────────────────────────


class FakeLLM(LLMProvider):
    """Returns a fixed completion and streams fixed tokens."""

    def __init__(self, completion: str = "{}", tokens=("Hello", ", ", "world"), error=None):
        self.completion = completion
        self.tokens = list(tokens)
        self.error = error
        self.complete_calls: List[dict] = []
        self.stream_calls: List[dict] = []

    async def complete(self, messages, temperature=0.7, max_tokens=None, json_mode=False, model=None):
        self.complete_calls.append({
            "messages": messages,
            "temperature": temperature,
            "json_mode": json_mode,
            "model": model,
        })
        if self.error:
            raise self.error
        return self.completion

    async def stream(self, messages, temperature=0.7, max_tokens=None, model=None):
        self.stream_calls.append({"messages": messages, "temperature": temperature, "model": model})
        if self.error:
            raise self.error
        for token in self.tokens:
            yield token


class FakeSearch(SearchProvider):
    """Returns fixed hits or raises."""

    def __init__(self, hits: Optional[List[SearchHit]] = None, error=None):
        self.hits = hits if hits is not None else [
            SearchHit(
                title="Climate and crops",
                url="https://example.com/crops",
                content="Heat waves reduce wheat yields.",
                score=0.92,
            ),
        ]
        self.error = error
        self.calls: List[dict] = []

    async def search(self, query, search_depth="basic", max_results=5):
        self.calls.append({"query": query, "search_depth": search_depth, "max_results": max_results})
        if self.error:
            raise self.error
        return list(self.hits)


class FakeSpeech(SpeechProvider):
    """Transcribes to fixed text and synthesizes fixed bytes."""

    def __init__(self, transcript: str = "transcribed text", audio: bytes = b"RIFFfake", error=None):
        self.transcript = transcript
        self.audio = audio
        self.error = error
        self.transcribe_calls: List[dict] = []
        self.synthesize_calls: List[dict] = []

    async def transcribe(self, audio, options=None):
        self.transcribe_calls.append({"audio": audio, "options": options})
        if self.error:
            raise self.error
        return VoiceResult(text=self.transcript, confidence=0.9)

    async def synthesize(self, text, options=None):
        self.synthesize_calls.append({"text": text, "options": options})
        if self.error:
            raise self.error
        return self.audio


class StubAgent(BaseAgent):
    """Agent that records one step and returns a fixed output."""

    def __init__(self, name: str, output="ok", error=None, tokens=()):
        super().__init__(AgentConfig(name=name))
        self.output = output
        self.error = error
        self.tokens = list(tokens)
        self.calls = 0

    async def execute(self, context: ExecutionContext) -> AgentResult:
        self.calls += 1
        for token in self.tokens:
            await self._emit_token(token)
        if self.error:
            raise self.error
        self._add_step(context, context.message, self.output)
        return AgentResult(output=self.output, context=context)


def analysis_json(needs_search=False, needs_voice=False, **extra) -> str:
    return json.dumps({
        "needs_search": needs_search,
        "needs_voice": needs_voice,
        "search_query": extra.get("search_query"),
        "voice_text": extra.get("voice_text"),
        "analysis": extra.get("analysis", "test analysis"),
    })


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        llm_api_key="test-llm-key",
        tavily_api_key="test-tavily-key",
        deepgram_api_key="test-deepgram-key",
    )


@pytest.fixture
def fake_llm():
    return FakeLLM(completion=analysis_json())


@pytest.fixture
def fake_search():
    return FakeSearch()


@pytest.fixture
def fake_speech():
    return FakeSpeech()


@pytest.fixture
def registry(settings, fake_llm, fake_search, fake_speech):
    """Provider registry wired to the fakes."""
    return ProviderRegistry(
        settings=settings,
        llm=fake_llm,
        search=fake_search,
        speech=fake_speech,
    )


@pytest.fixture
def make_context():
    """Build an ExecutionContext from keyword arguments."""

    def _make(message="What's the weather effect on crop yields?", **kwargs):
        return ExecutionContext.from_request(message, **kwargs)

    return _make


@pytest.fixture
def stub_agent():
    """Factory for StubAgent instances."""
    return StubAgent
