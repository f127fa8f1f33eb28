"""
API Response Models - Pydantic models for API responses.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from chatflow.models.schemas import AgentStep, SearchHit, SpeechResult


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    environment: str
    timestamp: datetime = Field(default_factory=_utcnow)


class ReadinessResponse(BaseModel):
    """Readiness check response; `checks` maps each provider to whether it is configured."""
    ready: bool
    checks: Dict[str, bool]
    timestamp: datetime = Field(default_factory=_utcnow)


class AgentQueryResult(BaseModel):
    """Tool results extracted from a finished workflow."""
    response: str = ""
    summary: Optional[str] = None
    search: Optional[List[SearchHit]] = None
    speech: Optional[SpeechResult] = None
    steps: List[AgentStep] = Field(default_factory=list)


class AgentQueryResponse(BaseModel):
    """
    Response from a workflow run.

    Example:
        {
            "success": true,
            "conversation_id": "5f0c...",
            "result": {"response": "...", "steps": [...]}
        }
    """
    success: bool
    conversation_id: str
    result: AgentQueryResult


class VoiceResponse(BaseModel):
    """
    Response from the end-to-end voice workflow.

    `audio` is base64 encoded WAV.
    """
    success: bool
    conversation_id: str
    audio: str
    transcription: Optional[str] = None
    response: Optional[str] = None
    processing_time: float = Field(..., description="Seconds spent in the workflow")


class SummaryResponse(BaseModel):
    """Response from direct summarization."""
    success: bool
    summary: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    Standard error response.

    Example:
        {
            "success": false,
            "error": "LLM API key is required",
            "error_code": "CONFIGURATION_ERROR"
        }
    """
    success: bool = False
    error: str
    error_code: Optional[str] = None
    path: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)
