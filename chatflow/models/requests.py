"""
API Request Models - Pydantic models for request validation.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from chatflow.models.schemas import ChatMessage, SummaryMode, WorkflowFlags


class AgentQueryRequest(BaseModel):
    """
    Request to run a workflow for one user message.

    Example:
        {
            "message": "What's the weather effect on crop yields?",
            "flags": {"needs_search": true, "workflow_type": "chat"}
        }
    """
    message: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="The user's message",
        examples=["What's the weather effect on crop yields?"]
    )
    history: List[ChatMessage] = Field(
        default_factory=list,
        description="Prior conversation turns (overrides stored history)"
    )
    flags: WorkflowFlags = Field(
        default_factory=WorkflowFlags,
        description="Routing directives for the workflow"
    )
    conversation_id: Optional[str] = Field(
        default=None,
        description="Conversation to continue"
    )

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Reject whitespace-only messages."""
        if not v.strip():
            raise ValueError("Message is required and must not be blank")
        return v


class SummaryRequest(BaseModel):
    """
    Request to summarize content directly.

    `content` is a list of search results for mode "search", a list of
    chat messages for mode "chat" and transcript text for mode "voice".

    Example:
        {
            "content": "Speaker one asked about the launch date...",
            "mode": "voice"
        }
    """
    content: Union[str, List[Any], Dict[str, Any]] = Field(
        ...,
        description="Content to summarize"
    )
    mode: SummaryMode = Field(
        ...,
        description="Summary mode: search, chat or voice"
    )

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: Any) -> Any:
        """Reject empty content."""
        if not v:
            raise ValueError("Content is required for summarization")
        return v
