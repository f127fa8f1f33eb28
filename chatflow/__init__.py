"""
Chatflow
========

An agent workflow engine that routes a user message through optional
sub-tasks (web search, speech transcription and synthesis,
summarization) before producing the final answer with an LLM.

Components:
- agents: Single-purpose agents (Query, Search, Voice, Summary, Response, Speech)
- workflow: Graph, builder, recipes and the executing WorkflowManager
- services: Provider clients (LiteLLM, Tavily, Deepgram) and their registry
- api: FastAPI endpoints
- models: Pydantic data models, including the ExecutionContext
- core: Configuration, exceptions and dependencies
"""

__version__ = "1.0.0"
