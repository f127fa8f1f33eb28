"""
Workflow Graph Builder - Fluent construction of workflow graphs.

Usage:
    manager = (
        WorkflowGraphBuilder(registry)
        .with_query_agent()
        .with_search_agent(lambda ctx: ctx.flags.needs_search)
        .with_response_agent()
        .connect("query", "search")
        .connect("search", "response")
        .build(context, events)
    )
    result = await manager.execute()

All nodes must be registered before they are connected.
"""

import logging
from typing import Dict, List, Optional

from chatflow.agents.base import AgentConfig, BaseAgent
from chatflow.agents.query import QueryAgent
from chatflow.agents.response import ResponseAgent
from chatflow.agents.search import SearchAgent
from chatflow.agents.speech import SpeechAgent
from chatflow.agents.summary import SummaryAgent
from chatflow.agents.voice import VoiceAgent
from chatflow.core.exceptions import GraphConstructionError
from chatflow.models.schemas import ExecutionContext
from chatflow.services.registry import ProviderRegistry
from chatflow.workflow.manager import WorkflowManager
from chatflow.workflow.types import (
    Condition,
    Edge,
    EdgePolicy,
    Node,
    WorkflowEvents,
    WorkflowGraph,
)

logger = logging.getLogger(__name__)


class WorkflowGraphBuilder:
    """
    Registers agents as nodes under fixed ids and connects them.

    Node ids: query, search, voice, summary, response, speech.
    Providers are taken from the registry only when the matching
    agent is added.
    """

    def __init__(self, registry: ProviderRegistry, model: Optional[str] = None):
        self.registry = registry
        self.settings = registry.settings
        self.model = model or registry.default_model
        self._nodes: Dict[str, Node] = {}
        self._edges: List[Edge] = []
        self._entry: Optional[str] = None
        logger.debug("Initialized workflow graph builder")

    # ── Agents ───────────────────────────────────────────────────────────

    def with_query_agent(self, condition: Optional[Condition] = None) -> "WorkflowGraphBuilder":
        """Add the query agent, normally the entry point of the workflow."""
        agent = QueryAgent(
            self._agent_config(
                "query-agent",
                "Analyzes the user query to determine the best approach and tools needed",
                temperature=self.settings.query_temperature
            ),
            llm=self.registry.llm()
        )
        return self.with_agent("query", agent, condition)

    def with_search_agent(self, condition: Optional[Condition] = None) -> "WorkflowGraphBuilder":
        """Add the web search agent."""
        agent = SearchAgent(
            self._agent_config(
                "search-agent",
                "Performs web searches for the current query using the Tavily search API"
            ),
            search_provider=self.registry.search()
        )
        return self.with_agent("search", agent, condition)

    def with_voice_agent(self, condition: Optional[Condition] = None) -> "WorkflowGraphBuilder":
        """Add the speech-to-text agent."""
        agent = VoiceAgent(
            self._agent_config(
                "voice-agent",
                "Converts voice input to text for the rest of the workflow",
                model=self.settings.stt_model
            ),
            speech_provider=self.registry.speech(required=False)
        )
        return self.with_agent("voice", agent, condition)

    def with_summary_agent(self, condition: Optional[Condition] = None) -> "WorkflowGraphBuilder":
        """Add the summary agent (search, chat or voice mode)."""
        agent = SummaryAgent(
            self._agent_config(
                "summary-agent",
                "Summarizes content based on mode (search, chat, voice)",
                temperature=self.settings.summary_temperature
            ),
            llm=self.registry.llm()
        )
        return self.with_agent("summary", agent, condition)

    def with_response_agent(self, condition: Optional[Condition] = None) -> "WorkflowGraphBuilder":
        """Add the response agent, normally the final text-producing node."""
        agent = ResponseAgent(
            self._agent_config(
                "response-agent",
                "Formats and delivers the final response to the user",
                temperature=self.settings.response_temperature
            ),
            llm=self.registry.llm()
        )
        return self.with_agent("response", agent, condition)

    def with_speech_agent(self, condition: Optional[Condition] = None) -> "WorkflowGraphBuilder":
        """Add the text-to-speech agent."""
        agent = SpeechAgent(
            self._agent_config(
                "speech-agent",
                "Converts text responses to speech audio",
                model=self.settings.tts_model
            ),
            speech_provider=self.registry.speech()
        )
        return self.with_agent("speech", agent, condition)

    def with_agent(
        self,
        node_id: str,
        agent: BaseAgent,
        condition: Optional[Condition] = None
    ) -> "WorkflowGraphBuilder":
        """Register any agent under a custom node id."""
        if node_id in self._nodes:
            logger.warning(f"Replacing existing workflow node '{node_id}'")
        self._nodes[node_id] = Node(id=node_id, agent=agent, condition=condition)
        return self

    # ── Edges ────────────────────────────────────────────────────────────

    def connect(
        self,
        source: str,
        target: str,
        condition: Optional[Condition] = None
    ) -> "WorkflowGraphBuilder":
        """
        Connect two registered nodes.

        Raises:
            GraphConstructionError: If either node id is not registered yet
        """
        if source not in self._nodes or target not in self._nodes:
            raise GraphConstructionError(
                f"Cannot create edge {source} -> {target}: source or target node does not exist",
                source=source,
                target=target
            )
        self._edges.append(Edge(source=source, target=target, condition=condition))
        return self

    def connect_standard(self) -> "WorkflowGraphBuilder":
        """
        Add the standard connections between registered nodes:
        query -> every other node, search -> summary, every node -> response.
        """
        node_ids = list(self._nodes)

        if "query" in self._nodes:
            for node_id in node_ids:
                if node_id != "query":
                    self.connect("query", node_id)

        if "search" in self._nodes and "summary" in self._nodes:
            self.connect("search", "summary")

        if "response" in self._nodes:
            for node_id in node_ids:
                if node_id not in ("query", "response"):
                    self.connect(node_id, "response")

        return self

    def entry(self, node_id: str) -> "WorkflowGraphBuilder":
        """Override the node the workflow starts from."""
        if node_id not in self._nodes:
            raise GraphConstructionError(
                f"Cannot use {node_id} as entry: node does not exist",
                source=node_id
            )
        self._entry = node_id
        return self

    # ── Build ────────────────────────────────────────────────────────────

    def build_graph(self) -> WorkflowGraph:
        """Freeze the registered nodes and edges into a WorkflowGraph."""
        if "query" not in self._nodes:
            logger.warning("Building workflow without query agent - this is not recommended")
        if "response" not in self._nodes:
            logger.warning("Building workflow without response agent - this is not recommended")

        graph = WorkflowGraph(
            nodes=tuple(self._nodes.values()),
            edges=tuple(self._edges),
            entry=self._entry or self._default_entry()
        )
        logger.info(
            f"Building workflow graph: {len(graph.nodes)} nodes, "
            f"{len(graph.edges)} edges, entry={graph.entry}"
        )
        return graph

    def build(
        self,
        initial_context: ExecutionContext,
        events: Optional[WorkflowEvents] = None,
        edge_policy: EdgePolicy = EdgePolicy.FIRST,
        max_steps: Optional[int] = None
    ) -> WorkflowManager:
        """Build the graph and hand it to a new WorkflowManager."""
        if max_steps is None:
            max_steps = self.settings.workflow_max_steps

        return WorkflowManager(
            self.build_graph(),
            initial_context,
            events=events,
            edge_policy=edge_policy,
            max_steps=max_steps
        )

    def _default_entry(self) -> Optional[str]:
        """First registered node without incoming edges."""
        targets = {edge.target for edge in self._edges}
        for node_id in self._nodes:
            if node_id not in targets:
                return node_id
        return next(iter(self._nodes), None)

    def _agent_config(
        self,
        name: str,
        description: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None
    ) -> AgentConfig:
        return AgentConfig(
            name=name,
            description=description,
            model=model or self.model,
            temperature=temperature,
            max_tokens=self.settings.llm_max_tokens
        )
