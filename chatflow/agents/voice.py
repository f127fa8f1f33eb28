"""
Voice Agent - Converts spoken input into the message the rest of the workflow reads.

Two input paths:
- flags.voice_text: already transcribed by the caller, no network call
- audio_input: transcribed by the speech provider

Either way context.message is overwritten with the transcript, which is
why this agent must run before the Query Agent.
"""

import logging
from typing import Any, Dict, Optional

from chatflow.agents.base import AgentConfig, AgentResult, AgentRole, BaseAgent, TokenCallback
from chatflow.core.exceptions import AgentInvocationError, ConfigurationError
from chatflow.models.schemas import ExecutionContext, VoiceResult
from chatflow.services.base import SpeechProvider

logger = logging.getLogger(__name__)

SIMULATED_CONFIDENCE = 0.98
DEFAULT_STT_LANGUAGE = "en-US"
DEFAULT_STT_MODEL = "nova-2"


class VoiceAgent(BaseAgent):
    """Speech-to-text for the user's turn."""

    role = AgentRole.VOICE

    def __init__(
        self,
        config: AgentConfig,
        speech_provider: Optional[SpeechProvider] = None,
        on_token: Optional[TokenCallback] = None
    ):
        super().__init__(config, on_token=on_token)
        self.speech_provider = speech_provider

    async def execute(self, context: ExecutionContext) -> AgentResult:
        if context.flags.voice_text:
            return self._use_voice_text(context, context.flags.voice_text)

        if context.audio_input:
            return await self._transcribe_audio(context)

        logger.warning(f"No voice input provided to {self.name}")
        raise AgentInvocationError(
            "Voice agent requires either voice_text or audio_input",
            agent=self.name
        )

    def _use_voice_text(self, context: ExecutionContext, text: str) -> AgentResult:
        logger.info(f"Using provided voice text as transcription ({len(text)} chars)")

        transcription = VoiceResult(text=text, confidence=SIMULATED_CONFIDENCE, simulated=True)

        context.tool_results.voice = transcription
        context.message = transcription.text
        self._add_step(context, "simulated audio input", {
            "status": "success",
            "type": "stt-simulated",
            "text": transcription.text,
        })

        return AgentResult(output=transcription, context=context)

    async def _transcribe_audio(self, context: ExecutionContext) -> AgentResult:
        voice_options = context.flags.voice_options
        options = {
            "language": voice_options.language or DEFAULT_STT_LANGUAGE,
            "model": voice_options.stt_model or DEFAULT_STT_MODEL,
        }

        logger.info(f"Transcribing audio input: {len(context.audio_input)} bytes")
        transcription = await self._execute_tool(
            "stt",
            {"audio": context.audio_input, "options": options},
            context
        )

        context.tool_results.voice = transcription
        context.message = transcription.text
        self._add_step(context, "audio input", {
            "status": "success",
            "type": "stt",
            "text": transcription.text,
        })

        return AgentResult(output=transcription, context=context)

    async def _execute_tool(
        self,
        tool_name: str,
        args: Dict[str, Any],
        context: ExecutionContext
    ) -> VoiceResult:
        if tool_name != "stt":
            raise AgentInvocationError(f"Unknown tool: {tool_name}", agent=self.name)

        if self.speech_provider is None:
            raise ConfigurationError(
                f"{self.name} cannot transcribe audio without a speech provider",
                setting="deepgram_api_key"
            )

        try:
            return await self.speech_provider.transcribe(args["audio"], args["options"])
        except Exception as e:
            logger.error(f"Speech-to-text failed ({self.name}): {e}")
            raise
