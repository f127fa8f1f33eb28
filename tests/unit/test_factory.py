"""Tests for chatflow.workflow.factory — the chat, voice and search recipes."""

import pytest

from chatflow.models.schemas import WorkflowFlags
from chatflow.services.registry import ProviderRegistry
from chatflow.workflow import EdgePolicy, WorkflowFactory, determine_workflow_type

from conftest import FakeLLM, FakeSearch, FakeSpeech, analysis_json


def _factory(settings, llm=None, search=None, speech=None, edge_policy=EdgePolicy.FIRST):
    registry = ProviderRegistry(
        settings=settings,
        llm=llm or FakeLLM(completion=analysis_json()),
        search=search or FakeSearch(),
        speech=speech or FakeSpeech(),
    )
    return WorkflowFactory(registry, edge_policy=edge_policy)


def _node_ids(manager):
    return list(manager.graph.node_ids())


def _edges(manager):
    return [(edge.source, edge.target) for edge in manager.graph.edges]


def _steps(result):
    return [step.agent for step in result.context.intermediate_steps]


class TestDetermineWorkflowType:
    @pytest.mark.parametrize("flags, expected", [
        ({}, "chat"),
        ({"needs_search": True}, "search"),
        ({"needs_voice": True}, "voice"),
        ({"needs_voice": True, "needs_search": True}, "voice"),
        ({"needs_search": True, "workflow_type": "chat"}, "chat"),
        ({"workflow_type": "voice"}, "voice"),
    ])
    def test_selection(self, flags, expected):
        assert determine_workflow_type(WorkflowFlags(**flags)) == expected


class TestRecipes:
    def test_chat_recipe_shape(self, settings, make_context):
        manager = _factory(settings).create_chat_workflow(make_context())

        assert _node_ids(manager) == ["query", "response", "search", "voice", "summary"]
        assert _edges(manager)[:4] == [
            ("query", "search"),
            ("query", "voice"),
            ("query", "summary"),
            ("query", "response"),
        ]
        assert manager.graph.entry == "query"

    def test_voice_recipe_with_input(self, settings, make_context):
        context = make_context(flags={"voice_text": "hello"})
        manager = _factory(settings).create_voice_workflow(context)

        assert _node_ids(manager) == ["voice", "query", "search", "speech", "response"]
        assert _edges(manager)[0] == ("voice", "query")
        assert manager.graph.entry == "voice"

    def test_voice_recipe_without_input(self, settings, make_context):
        manager = _factory(settings).create_voice_workflow(make_context(flags={"needs_voice": True}))

        assert "voice" not in _node_ids(manager)
        assert manager.graph.entry == "query"

    def test_search_recipe_shape(self, settings, make_context):
        manager = _factory(settings).create_search_workflow(make_context())

        assert _node_ids(manager) == ["query", "search", "summary", "response"]
        assert _edges(manager) == [
            ("query", "search"),
            ("search", "summary"),
            ("search", "response"),
            ("summary", "response"),
            ("query", "response"),
        ]

    def test_create_dispatches_on_flags(self, settings, make_context):
        factory = _factory(settings)

        search = factory.create(make_context(flags={"needs_search": True}))
        voice = factory.create(make_context(flags={"needs_voice": True}))
        chat = factory.create(make_context(), workflow_type="chat")

        assert "summary" in _node_ids(search) and "speech" not in _node_ids(search)
        assert "speech" in _node_ids(voice)
        assert "voice" in _node_ids(chat)

    def test_factory_edge_policy_applied(self, settings, make_context):
        factory = _factory(settings, edge_policy=EdgePolicy.BRANCHING)
        assert factory.create(make_context()).edge_policy == EdgePolicy.BRANCHING

    def test_default_registry_uses_run_credentials(self, make_context):
        context = make_context(config={"api_key": "sk-run"})
        builder = WorkflowFactory()._builder(context)
        assert builder.registry.credentials is context.config


class TestChatWorkflow:
    @pytest.mark.asyncio
    async def test_search_scenario(self, settings, make_context):
        search = FakeSearch()
        llm = FakeLLM(completion=analysis_json(needs_search=True), tokens=["Heat ", "hurts ", "yields."])
        context = make_context(
            "What's the weather effect on crop yields?",
            flags={"needs_search": True, "workflow_type": "chat"},
        )

        result = await _factory(settings, llm=llm, search=search).create(context).execute()

        tool_results = result.context.tool_results
        assert tool_results.query_analysis.needs_search is True
        assert len(tool_results.search) >= 1
        assert tool_results.response == "Heat hurts yields."
        assert result.output == "Heat hurts yields."
        assert _steps(result) == ["query-agent", "search-agent", "response-agent"]

        response_messages = llm.stream_calls[-1]["messages"]
        assert "Climate and crops" in response_messages[1]["content"]

    @pytest.mark.asyncio
    async def test_results_accumulate_and_history_untouched(self, settings, make_context):
        llm = FakeLLM(completion=analysis_json(needs_search=True))
        context = make_context(history=[{"role": "user", "content": "earlier"}])

        result = await _factory(settings, llm=llm).create_chat_workflow(context).execute()

        tool_results = result.context.tool_results
        assert tool_results.query_analysis is not None
        assert tool_results.search is not None
        assert tool_results.response is not None
        assert len(result.context.history) == 1

    @pytest.mark.asyncio
    async def test_search_skipped_when_not_needed(self, settings, make_context):
        search = FakeSearch()

        result = await _factory(settings, search=search).create_chat_workflow(make_context()).execute()

        assert search.calls == []
        assert result.context.tool_results.search is None
        assert _steps(result) == ["query-agent", "response-agent"]

    @pytest.mark.asyncio
    async def test_search_failure_propagates(self, settings, make_context):
        error = ConnectionError("search unavailable")
        llm = FakeLLM(completion=analysis_json(needs_search=True))
        manager = _factory(settings, llm=llm, search=FakeSearch(error=error)).create_chat_workflow(
            make_context()
        )

        with pytest.raises(ConnectionError) as exc_info:
            await manager.execute()

        assert exc_info.value is error
        assert manager.context.tool_results.response is None
        assert llm.stream_calls == []

    @pytest.mark.asyncio
    async def test_branching_runs_same_agents(self, settings, make_context):
        llm = FakeLLM(completion=analysis_json(needs_search=True))
        factory = _factory(settings, llm=llm, edge_policy=EdgePolicy.BRANCHING)

        result = await factory.create_chat_workflow(make_context()).execute()

        assert _steps(result) == ["query-agent", "search-agent", "response-agent"]

    @pytest.mark.asyncio
    async def test_branching_skips_voice_without_voice_input(self, settings, make_context):
        llm = FakeLLM(completion=analysis_json(needs_voice=True))
        factory = _factory(settings, llm=llm, edge_policy=EdgePolicy.BRANCHING)

        result = await factory.create_chat_workflow(make_context("Read this aloud please")).execute()

        assert _steps(result) == ["query-agent", "response-agent"]
        assert result.context.tool_results.voice is None

    @pytest.mark.asyncio
    async def test_branching_runs_voice_with_voice_text(self, settings, make_context):
        llm = FakeLLM(completion=analysis_json(needs_voice=True))
        factory = _factory(settings, llm=llm, edge_policy=EdgePolicy.BRANCHING)
        context = make_context("Read this aloud please", flags={"voice_text": "Read this aloud please"})

        result = await factory.create_chat_workflow(context).execute()

        assert _steps(result) == ["query-agent", "voice-agent", "response-agent"]
        assert result.context.tool_results.voice.text == "Read this aloud please"


class TestSearchWorkflow:
    @pytest.mark.asyncio
    async def test_with_summary(self, settings, make_context):
        context = make_context(flags={"needs_search": True, "needs_summary": True, "summary_mode": "search"})

        result = await _factory(settings).create(context).execute()

        assert _steps(result) == ["query-agent", "search-agent", "summary-agent", "response-agent"]
        assert result.context.tool_results.summary == "Hello, world"

    @pytest.mark.asyncio
    async def test_without_summary(self, settings, make_context):
        result = await _factory(settings).create(make_context(flags={"needs_search": True})).execute()

        assert _steps(result) == ["query-agent", "search-agent", "response-agent"]
        assert result.context.tool_results.summary is None


class TestVoiceWorkflow:
    @pytest.mark.asyncio
    async def test_voice_text_to_speech(self, settings, make_context):
        speech = FakeSpeech(audio=b"RIFFanswer")
        llm = FakeLLM(completion=analysis_json(), tokens=["Sunny."])
        context = make_context(
            "Process this audio input",
            flags={"workflow_type": "voice", "needs_voice": True, "voice_text": "Weather today?"},
        )

        result = await _factory(settings, llm=llm, speech=speech).create(context).execute()

        assert result.context.message == "Weather today?"
        assert llm.complete_calls[0]["messages"][1]["content"] == "Weather today?"
        assert _steps(result) == ["voice-agent", "query-agent", "response-agent", "speech-agent"]
        assert speech.transcribe_calls == []
        assert speech.synthesize_calls[0]["text"] == "Sunny."
        assert result.context.tool_results.speech.format == "wav"

    @pytest.mark.asyncio
    async def test_audio_input_transcribed(self, settings, make_context):
        speech = FakeSpeech(transcript="is it raining")
        context = make_context(audio_input=b"\x00\x01", flags={"needs_voice": True})

        result = await _factory(settings, speech=speech).create(context).execute()

        assert len(speech.transcribe_calls) == 1
        assert result.context.message == "is it raining"
        assert result.context.tool_results.speech is not None
