"""
Application Exceptions - Error taxonomy shared by the workflow core and the API.

Every exception carries an error code and an HTTP status so the API
layer can translate it without knowing where it was raised.

Provider errors (httpx, litellm, Deepgram) are NOT wrapped here; they
propagate unchanged to the caller of the workflow.
"""

from typing import Optional


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[dict] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(AppException):
    """Raised when a required credential or setting is missing."""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            status_code=500,
            details={"setting": setting} if setting else {}
        )


class AgentInvocationError(AppException):
    """Raised when an agent's run-time precondition is not met."""

    def __init__(self, message: str, agent: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="AGENT_INVOCATION_ERROR",
            status_code=422,
            details={"agent": agent} if agent else {}
        )
        self.agent = agent


class GraphConstructionError(AppException):
    """Raised when a workflow graph is assembled incorrectly."""

    def __init__(self, message: str, source: str = None, target: str = None):
        super().__init__(
            message=message,
            error_code="GRAPH_CONSTRUCTION_ERROR",
            status_code=500,
            details={"from": source, "to": target}
        )


class WorkflowError(AppException):
    """Raised when a workflow walk cannot continue."""

    def __init__(self, message: str, error_code: str = "WORKFLOW_ERROR", details: dict = None):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
            details=details
        )


class NodeNotFoundError(WorkflowError):
    """Raised when the walk reaches a node id that was never registered."""

    def __init__(self, node_id: str):
        super().__init__(
            message=f"Node {node_id} not found",
            error_code="NODE_NOT_FOUND",
            details={"node_id": node_id}
        )
        self.node_id = node_id


class ConversationNotFoundError(AppException):
    """Raised when a conversation id is unknown or expired."""

    def __init__(self, conversation_id: str):
        super().__init__(
            message=f"Conversation not found: {conversation_id}",
            error_code="CONVERSATION_NOT_FOUND",
            status_code=404,
            details={"conversation_id": conversation_id}
        )
