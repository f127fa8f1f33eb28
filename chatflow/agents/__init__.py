"""
Agent Architecture for Chatflow
===============================

FLOW OVERVIEW:
--------------
1. The caller submits a message (or audio) plus routing flags
2. Voice Agent transcribes spoken input into the message (voice workflow)
3. Query Agent decides whether search or voice handling is needed
4. Search Agent fetches web results when requested
5. Summary Agent condenses search results, history or a transcript
6. Response Agent streams the final answer
7. Speech Agent converts the answer to audio (voice workflow)

Which agents run, and in which order, is decided by the workflow graph
(see chatflow.workflow), not by the agents themselves.

ARCHITECTURE:
-------------
                    ┌─────────────────┐
                    │  User Message   │
                    └────────┬────────┘
                             │
                    ┌────────▼────────┐
                    │   Query Agent   │  ← Routing decision
                    └────────┬────────┘
                             │
              ┌──────────────┼──────────────┐
              │              │              │
       ┌──────▼─────┐ ┌──────▼─────┐ ┌──────▼─────┐
       │   Search   │ │   Voice    │ │  Summary   │  ← Condition-gated
       │   Agent    │ │   Agent    │ │   Agent    │
       └──────┬─────┘ └──────┬─────┘ └──────┬─────┘
              │              │              │
              └──────────────┼──────────────┘
                             │
                    ┌────────▼────────┐
                    │ Response Agent  │  ← Streams the answer
                    └────────┬────────┘
                             │
                    ┌────────▼────────┐
                    │  Speech Agent   │  ← Voice workflow only
                    └─────────────────┘

USAGE:
------
    from chatflow.agents import AgentConfig, QueryAgent

    agent = QueryAgent(AgentConfig(name="query-agent"), llm=my_llm)
    result = await agent.execute(context)

    print(result.context.tool_results.query_analysis)
"""

from chatflow.agents.base import AgentConfig, AgentResult, AgentRole, BaseAgent
from chatflow.agents.query import QueryAgent
from chatflow.agents.search import SearchAgent
from chatflow.agents.voice import VoiceAgent
from chatflow.agents.summary import SummaryAgent
from chatflow.agents.response import ResponseAgent
from chatflow.agents.speech import SpeechAgent

__all__ = [
    # Base classes
    "BaseAgent",
    "AgentConfig",
    "AgentResult",
    "AgentRole",
    # Agents
    "QueryAgent",
    "SearchAgent",
    "VoiceAgent",
    "SummaryAgent",
    "ResponseAgent",
    "SpeechAgent",
]
