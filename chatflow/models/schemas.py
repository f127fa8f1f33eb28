"""
Core Domain Schemas - The execution context threaded through one workflow run.

Exactly one ExecutionContext exists per run. Every agent receives it,
mutates it and hands it back in its AgentResult:

    message ──► QueryAgent ──► SearchAgent ──► ResponseAgent ──► answer
                    │               │                │
                    ▼               ▼                ▼
            tool_results.query_analysis / .search / .response
                    │               │                │
                    └───────── intermediate_steps ───┘

Routing flags are frozen for the duration of a run; tool results have
one slot per result kind and each agent writes only its own slot.
"""

import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator


SummaryMode = Literal["search", "chat", "voice"]
WorkflowType = Literal["chat", "voice", "search"]


class ChatMessage(BaseModel):
    """One prior conversation turn."""
    role: Literal["system", "user", "assistant"]
    content: str


class VoiceOptions(BaseModel):
    """Voice settings supplied by the caller for STT and TTS."""
    model_config = ConfigDict(frozen=True)

    voice: Optional[str] = None
    model: Optional[str] = None
    stt_model: Optional[str] = None
    speed: Optional[float] = None
    pitch: Optional[float] = None
    language: Optional[str] = None


class WorkflowFlags(BaseModel):
    """
    Caller-supplied routing directives.

    Frozen: agents and conditions may read flags but never change them.
    """
    model_config = ConfigDict(frozen=True)

    needs_search: bool = False
    needs_summary: bool = False
    summary_mode: Optional[SummaryMode] = None
    needs_voice: bool = False
    voice_text: Optional[str] = None
    voice_options: VoiceOptions = Field(default_factory=VoiceOptions)
    workflow_type: Optional[WorkflowType] = None


class ProviderCredentials(BaseModel):
    """Provider API keys for this run (read-only)."""
    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = None
    search_api_key: Optional[str] = None
    voice_api_key: Optional[str] = None


class QueryAnalysis(BaseModel):
    """Routing decision produced by the QueryAgent."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    needs_search: bool = Field(
        default=False,
        validation_alias=AliasChoices("needs_search", "needsSearch")
    )
    needs_voice: bool = Field(
        default=False,
        validation_alias=AliasChoices("needs_voice", "needsVoice")
    )
    search_query: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("search_query", "searchQuery")
    )
    voice_text: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("voice_text", "voiceText")
    )
    analysis: Optional[str] = None


class SearchHit(BaseModel):
    """A single ranked web search result."""
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    url: str = ""
    content: str = ""
    score: float = 0.0
    published_date: Optional[str] = None

    @field_validator("title", "url", "content", "score", mode="before")
    @classmethod
    def null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Providers send null for missing fields; fall back to the field default."""
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


class VoiceResult(BaseModel):
    """Transcription of the user's spoken input."""
    text: str
    confidence: Optional[float] = None
    words: Optional[List[Dict[str, Any]]] = None
    simulated: bool = False


class SpeechResult(BaseModel):
    """Synthesized audio for the generated answer."""
    audio: str  # base64
    format: str
    text: str


class ToolResults(BaseModel):
    """Accumulated results, one optional slot per result kind."""
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    query_analysis: Optional[QueryAnalysis] = None
    search: Optional[List[SearchHit]] = None
    summary: Optional[str] = None
    voice: Optional[VoiceResult] = None
    speech: Optional[SpeechResult] = None
    response: Optional[str] = None


class AgentStep(BaseModel):
    """Audit trail entry appended by an agent after it executes."""
    agent: str
    input: Any = None
    output: Any = None
    timestamp: int


class ExecutionContext(BaseModel):
    """
    Mutable state shared by every agent in one workflow run.

    Validated on construction; `flags` and `config` are frozen.
    """
    model_config = ConfigDict(validate_assignment=True)

    message: str
    history: List[ChatMessage] = Field(default_factory=list)
    flags: WorkflowFlags = Field(default_factory=WorkflowFlags)
    tool_results: ToolResults = Field(default_factory=ToolResults)
    intermediate_steps: List[AgentStep] = Field(default_factory=list)
    audio_input: Optional[bytes] = None
    config: ProviderCredentials = Field(default_factory=ProviderCredentials)

    @classmethod
    def from_request(
        cls,
        message: str,
        history: Optional[List[Dict[str, Any]]] = None,
        flags: Optional[Dict[str, Any]] = None,
        audio_input: Optional[bytes] = None,
        config: Optional[Dict[str, Any]] = None
    ) -> "ExecutionContext":
        """
        Build a context from untyped request data.

        Raises:
            pydantic.ValidationError: If any field is malformed
        """
        return cls.model_validate({
            "message": message,
            "history": history or [],
            "flags": flags or {},
            "audio_input": audio_input,
            "config": config or {},
        })

    def record_step(self, agent: str, input: Any, output: Any) -> AgentStep:
        """Append an entry to the audit trail."""
        step = AgentStep(
            agent=agent,
            input=input,
            output=output,
            timestamp=int(time.time() * 1000)
        )
        self.intermediate_steps.append(step)
        return step
