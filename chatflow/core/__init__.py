"""
Core Module - Configuration and the application error taxonomy.
"""

from chatflow.core.config import Settings, get_settings
from chatflow.core.exceptions import (
    AppException,
    ConfigurationError,
    AgentInvocationError,
    GraphConstructionError,
    WorkflowError,
    NodeNotFoundError,
    ConversationNotFoundError,
)

__all__ = [
    "Settings",
    "get_settings",
    "AppException",
    "ConfigurationError",
    "AgentInvocationError",
    "GraphConstructionError",
    "WorkflowError",
    "NodeNotFoundError",
    "ConversationNotFoundError",
]
