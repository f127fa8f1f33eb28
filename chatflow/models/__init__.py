"""
Data Models for Chatflow
========================

Organized into three categories:
- schemas: The execution context and everything stored in it
- requests: API request validation models
- responses: API response models
"""

from chatflow.models.schemas import (
    AgentStep,
    ChatMessage,
    ExecutionContext,
    ProviderCredentials,
    QueryAnalysis,
    SearchHit,
    SpeechResult,
    ToolResults,
    VoiceOptions,
    VoiceResult,
    WorkflowFlags,
)

from chatflow.models.requests import (
    AgentQueryRequest,
    SummaryRequest,
)

from chatflow.models.responses import (
    HealthResponse,
    ReadinessResponse,
    AgentQueryResult,
    AgentQueryResponse,
    VoiceResponse,
    SummaryResponse,
    ErrorResponse,
)

__all__ = [
    # Schemas
    "AgentStep",
    "ChatMessage",
    "ExecutionContext",
    "ProviderCredentials",
    "QueryAnalysis",
    "SearchHit",
    "SpeechResult",
    "ToolResults",
    "VoiceOptions",
    "VoiceResult",
    "WorkflowFlags",
    # Requests
    "AgentQueryRequest",
    "SummaryRequest",
    # Responses
    "HealthResponse",
    "ReadinessResponse",
    "AgentQueryResult",
    "AgentQueryResponse",
    "VoiceResponse",
    "SummaryResponse",
    "ErrorResponse",
]
