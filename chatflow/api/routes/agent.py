"""
Agent Endpoints - HTTP adapter over the workflow engine.

- POST /agent/query    run a chat, search or voice workflow for one message
- POST /agent/voice    audio (or voice text) in, synthesized audio out
- POST /agent/summary  summarize search results, chat history or a transcript

Routes only translate between HTTP and ExecutionContext; all routing
decisions happen inside the workflow.
"""

import json
import logging
import time
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from chatflow.agents.base import AgentConfig, AgentResult
from chatflow.agents.summary import SummaryAgent
from chatflow.core.config import Settings, get_settings
from chatflow.core.dependencies import (
    ConversationStore,
    get_conversation_store,
    get_provider_registry,
    get_workflow_factory,
)
from chatflow.models.requests import AgentQueryRequest, SummaryRequest
from chatflow.models.responses import (
    AgentQueryResponse,
    AgentQueryResult,
    ErrorResponse,
    SummaryResponse,
    VoiceResponse,
)
from chatflow.models.schemas import (
    ExecutionContext,
    QueryAnalysis,
    VoiceOptions,
    WorkflowFlags,
)
from chatflow.services.registry import ProviderRegistry
from chatflow.workflow.factory import WorkflowFactory
from chatflow.workflow.types import WorkflowEvents

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/agent", tags=["Agent"])


def _logging_events(label: str) -> WorkflowEvents:
    """Event hooks that only log workflow progress."""

    def on_complete(result: AgentResult) -> None:
        tool_results = result.context.tool_results
        logger.info(
            f"[{label}] Workflow completed: response={tool_results.response is not None}, "
            f"summary={tool_results.summary is not None}, "
            f"search={bool(tool_results.search)}, speech={tool_results.speech is not None}"
        )

    return WorkflowEvents(
        on_tool_start=lambda tool: logger.info(f"[{label}] Tool execution started: {tool}"),
        on_tool_end=lambda tool, result: logger.info(f"[{label}] Tool execution completed: {tool}"),
        on_complete=on_complete,
    )


def _remember_turn(
    store: ConversationStore,
    conversation_id: str,
    user_message: Optional[str],
    response: Optional[str]
) -> None:
    if not response:
        return
    if user_message:
        store.append(conversation_id, "user", user_message)
    store.append(conversation_id, "assistant", response)


@router.post(
    "/query",
    response_model=AgentQueryResponse,
    summary="Run Agent Workflow",
    description="Route a message through query analysis, optional search/summary and response generation",
    responses={
        200: {"description": "Workflow completed successfully"},
        422: {"model": ErrorResponse, "description": "Invalid request or agent precondition"},
        500: {"model": ErrorResponse, "description": "Workflow failed"}
    }
)
async def agent_query(
    request: AgentQueryRequest,
    factory: WorkflowFactory = Depends(get_workflow_factory),
    store: ConversationStore = Depends(get_conversation_store)
) -> AgentQueryResponse:
    """
    Run the workflow selected by the request flags.

    The workflow type is flags.workflow_type if given, otherwise voice
    if needs_voice, search if needs_search, else chat.
    """
    flags = request.flags
    logger.info(
        f"Received agent query: needs_search={flags.needs_search}, "
        f"needs_summary={flags.needs_summary}, needs_voice={flags.needs_voice}"
    )

    conversation_id = store.get_or_create(request.conversation_id)
    history = request.history or store.get_history(conversation_id)

    context = ExecutionContext(message=request.message, history=history, flags=flags)

    if flags.needs_voice:
        voice_text = flags.voice_text or request.message
        context.tool_results.query_analysis = QueryAnalysis(
            needs_search=flags.needs_search,
            needs_voice=True,
            voice_text=voice_text
        )
        logger.debug(f"Added voice text to context ({len(voice_text)} chars)")

    workflow = factory.create(context, _logging_events("QUERY"))
    result = await workflow.execute()

    tool_results = result.context.tool_results
    _remember_turn(store, conversation_id, request.message, tool_results.response)

    return AgentQueryResponse(
        success=True,
        conversation_id=conversation_id,
        result=AgentQueryResult(
            response=tool_results.response or "",
            summary=tool_results.summary,
            search=tool_results.search,
            speech=tool_results.speech,
            steps=result.context.intermediate_steps
        )
    )


@router.post(
    "/voice",
    response_model=VoiceResponse,
    summary="End-to-end Voice Processing",
    description="Transcribe audio (or take voice text), answer it and return synthesized audio",
    responses={
        200: {"description": "Voice processed successfully"},
        400: {"model": ErrorResponse, "description": "Neither audio nor voice text provided"},
        413: {"model": ErrorResponse, "description": "Audio file too large"},
        500: {"model": ErrorResponse, "description": "Failed to generate audio response"}
    }
)
async def agent_voice(
    audio: Optional[UploadFile] = File(default=None),
    voice_text: Optional[str] = Form(default=None),
    voice_options: Optional[str] = Form(default=None),
    conversation_id: Optional[str] = Form(default=None),
    factory: WorkflowFactory = Depends(get_workflow_factory),
    store: ConversationStore = Depends(get_conversation_store),
    settings: Settings = Depends(get_settings)
):
    """
    Voice → text → answer → voice.

    Accepts multipart form data with an `audio` file and/or `voice_text`,
    optional `voice_options` (JSON) and an optional `conversation_id`.
    """
    start_time = time.perf_counter()
    voice_text = voice_text or None

    audio_input = await audio.read() if audio is not None else None
    if not audio_input and not voice_text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either audio file or voice_text must be provided"
        )
    if audio_input and len(audio_input) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Audio file exceeds {settings.max_upload_bytes} bytes"
        )

    options = _parse_voice_options(voice_options)

    if audio_input:
        logger.info(f"[VOICE] Audio file received: {audio.filename}, {len(audio_input)} bytes")
    else:
        logger.info(f"[VOICE] Voice text received ({len(voice_text)} chars)")

    conversation_id = store.get_or_create(conversation_id)
    history = store.get_history(conversation_id)

    context = ExecutionContext(
        message=voice_text or "Process this audio input",
        history=history,
        flags=WorkflowFlags(
            workflow_type="voice",
            needs_voice=True,
            voice_text=voice_text,
            voice_options=options
        ),
        audio_input=audio_input or None
    )

    workflow = factory.create_voice_workflow(context, _logging_events("VOICE"))
    result = await workflow.execute()

    processing_time = time.perf_counter() - start_time
    logger.info(f"[VOICE] Processing completed in {processing_time:.2f}s")

    tool_results = result.context.tool_results
    transcription = tool_results.voice.text if tool_results.voice else voice_text
    response_text = tool_results.response

    _remember_turn(store, conversation_id, transcription, response_text)

    if tool_results.speech is None:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "conversation_id": conversation_id,
                "error": "Failed to generate audio response",
                "error_code": "SPEECH_ERROR",
                "transcription": transcription,
                "response": response_text,
            }
        )

    return VoiceResponse(
        success=True,
        conversation_id=conversation_id,
        audio=tool_results.speech.audio,
        transcription=transcription,
        response=response_text,
        processing_time=processing_time
    )


@router.post(
    "/summary",
    response_model=SummaryResponse,
    summary="Summarize Content",
    description="Summarize search results, a chat history or a voice transcript",
    responses={
        200: {"description": "Summary generated (null if the content was empty)"},
        422: {"model": ErrorResponse, "description": "Invalid content or mode"}
    }
)
async def agent_summary(
    request: SummaryRequest,
    registry: ProviderRegistry = Depends(get_provider_registry)
) -> SummaryResponse:
    """Run the Summary Agent directly, outside of any workflow."""
    logger.info(f"Received summary request (mode: {request.mode})")

    context = _summary_context(request.content, request.mode)

    agent = SummaryAgent(
        AgentConfig(
            name="summary-agent",
            description="Generates summaries on request",
            model=registry.default_model,
            temperature=registry.settings.summary_temperature,
            max_tokens=500
        ),
        llm=registry.llm()
    )
    result = await agent.execute(context)

    return SummaryResponse(success=True, summary=result.context.tool_results.summary)


def _parse_voice_options(raw: Optional[str]) -> VoiceOptions:
    if not raw:
        return VoiceOptions()
    try:
        return VoiceOptions.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid voice_options: {e}"
        ) from e


def _summary_context(content: Any, mode: str) -> ExecutionContext:
    """Place the content where the Summary Agent looks for it in this mode."""
    items: List[Any] = content if isinstance(content, list) else [content]

    try:
        if mode == "search":
            hits = [{"content": item} if isinstance(item, str) else item for item in items]
            return ExecutionContext.model_validate({
                "message": "Summarize search results",
                "flags": {"needs_summary": True, "summary_mode": mode},
                "tool_results": {"search": hits},
            })

        if mode == "chat":
            history = [{"role": "user", "content": item} if isinstance(item, str) else item for item in items]
            return ExecutionContext.model_validate({
                "message": "Summarize chat history",
                "history": history,
                "flags": {"needs_summary": True, "summary_mode": mode},
            })

        text = content if isinstance(content, str) else json.dumps(content)
        return ExecutionContext.model_validate({
            "message": "Summarize voice transcript",
            "flags": {"needs_summary": True, "summary_mode": mode},
            "tool_results": {"voice": {"text": text}},
        })
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Content does not match summary mode '{mode}': {e.error_count()} errors"
        ) from e
