"""
Workflow Factory - The three fixed workflow recipes.

    chat:   query → {search, voice, summary} → response
    voice:  [voice →] query → [search →] response → speech
    search: query → search → [summary →] response

Recipes differ in node order (voice transcription must run before the
query agent, speech synthesis after the response agent) and in which
agents are registered at all, so unused providers are never created.
"""

import logging
from typing import Optional

from chatflow.models.schemas import ExecutionContext, WorkflowFlags, WorkflowType
from chatflow.services.registry import ProviderRegistry
from chatflow.workflow.builder import WorkflowGraphBuilder
from chatflow.workflow.manager import WorkflowManager
from chatflow.workflow.types import EdgePolicy, WorkflowEvents

logger = logging.getLogger(__name__)


def determine_workflow_type(flags: WorkflowFlags) -> WorkflowType:
    """Explicit workflow_type, else voice if needs_voice, else search if needs_search, else chat."""
    if flags.workflow_type:
        return flags.workflow_type
    if flags.needs_voice:
        return "voice"
    if flags.needs_search:
        return "search"
    return "chat"


def _analysis_needs_search(ctx: ExecutionContext) -> bool:
    analysis = ctx.tool_results.query_analysis
    return bool(analysis and analysis.needs_search)


def _analysis_needs_voice(ctx: ExecutionContext) -> bool:
    analysis = ctx.tool_results.query_analysis
    return bool(analysis and analysis.needs_voice)


def _has_voice_input(ctx: ExecutionContext) -> bool:
    return bool(ctx.audio_input or ctx.flags.voice_text)


def _voice_requested(ctx: ExecutionContext) -> bool:
    # the voice agent cannot run without text or audio to work on
    return _analysis_needs_voice(ctx) and _has_voice_input(ctx)


def _needs_summary(ctx: ExecutionContext) -> bool:
    return ctx.flags.needs_summary


def _needs_search_summary(ctx: ExecutionContext) -> bool:
    return ctx.flags.needs_summary and ctx.flags.summary_mode == "search"


def _search_requested(ctx: ExecutionContext) -> bool:
    return _analysis_needs_search(ctx) or ctx.flags.needs_search


class WorkflowFactory:
    """
    Builds a ready-to-run WorkflowManager for one recipe.

    Every call creates fresh agents, so concurrent runs never share state.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        edge_policy: EdgePolicy = EdgePolicy.FIRST
    ):
        self.registry = registry
        self.edge_policy = edge_policy

    def create(
        self,
        context: ExecutionContext,
        events: Optional[WorkflowEvents] = None,
        workflow_type: Optional[WorkflowType] = None
    ) -> WorkflowManager:
        """Create the recipe selected by workflow_type or inferred from the flags."""
        workflow_type = workflow_type or determine_workflow_type(context.flags)
        logger.info(f"Selected {workflow_type} workflow")

        if workflow_type == "voice":
            return self.create_voice_workflow(context, events)
        if workflow_type == "search":
            return self.create_search_workflow(context, events)
        return self.create_chat_workflow(context, events)

    def create_chat_workflow(
        self,
        context: ExecutionContext,
        events: Optional[WorkflowEvents] = None
    ) -> WorkflowManager:
        """Standard chat: search, voice and summary are condition-gated candidates."""
        logger.info("Creating chat workflow")

        builder = self._builder(context)
        builder.with_query_agent()
        builder.with_response_agent()
        builder.with_search_agent(_analysis_needs_search)
        builder.with_voice_agent(_voice_requested)
        builder.with_summary_agent(_needs_summary)

        builder.connect("query", "search")
        builder.connect("query", "voice")
        builder.connect("query", "summary")
        builder.connect("query", "response")

        builder.connect("search", "summary", _needs_search_summary)

        builder.connect("search", "response")
        builder.connect("voice", "response")
        builder.connect("summary", "response")

        return builder.build(context, events, edge_policy=self.edge_policy)

    def create_voice_workflow(
        self,
        context: ExecutionContext,
        events: Optional[WorkflowEvents] = None
    ) -> WorkflowManager:
        """Voice in, voice out: STT first (when there is input), TTS last."""
        logger.info("Creating voice workflow with STT and TTS")

        has_voice_input = _has_voice_input(context)

        builder = self._builder(context)
        if has_voice_input:
            logger.debug("Adding voice agent for STT processing")
            builder.with_voice_agent()

        builder.with_query_agent()
        builder.with_search_agent(_search_requested)
        builder.with_speech_agent()
        builder.with_response_agent()

        if has_voice_input:
            builder.connect("voice", "query")

        builder.connect("query", "search", _search_requested)
        builder.connect("search", "response")
        builder.connect("query", "response")
        builder.connect("response", "speech")

        return builder.build(context, events, edge_policy=self.edge_policy)

    def create_search_workflow(
        self,
        context: ExecutionContext,
        events: Optional[WorkflowEvents] = None
    ) -> WorkflowManager:
        """Search first, optional summary, then the answer."""
        logger.info("Creating search workflow")

        return (
            self._builder(context)
            .with_query_agent()
            .with_search_agent()
            .with_summary_agent(_needs_summary)
            .with_response_agent()
            .connect("query", "search")
            .connect("search", "summary", _needs_summary)
            .connect("search", "response")
            .connect("summary", "response")
            .connect("query", "response")
            .build(context, events, edge_policy=self.edge_policy)
        )

    def _builder(self, context: ExecutionContext) -> WorkflowGraphBuilder:
        registry = self.registry or ProviderRegistry(credentials=context.config)
        return WorkflowGraphBuilder(registry)
