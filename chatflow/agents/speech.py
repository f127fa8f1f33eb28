"""
Speech Agent - Text-to-speech for the generated answer.

Runs last in the voice workflow: it reads tool_results.response (falling
back to the message) and stores base64 audio at tool_results.speech.
"""

import base64
import logging
from typing import Any, Dict, Optional

from chatflow.agents.base import AgentConfig, AgentResult, AgentRole, BaseAgent, TokenCallback
from chatflow.core.exceptions import AgentInvocationError, ConfigurationError
from chatflow.models.schemas import ExecutionContext, SpeechResult
from chatflow.services.base import SpeechProvider

logger = logging.getLogger(__name__)

AUDIO_FORMAT = "wav"


class SpeechAgent(BaseAgent):
    """Synthesizes audio with the caller's voice options."""

    role = AgentRole.SPEECH

    def __init__(
        self,
        config: AgentConfig,
        speech_provider: SpeechProvider,
        on_token: Optional[TokenCallback] = None
    ):
        super().__init__(config, on_token=on_token)
        if speech_provider is None:
            raise ConfigurationError(
                f"{self.name} requires a speech provider",
                setting="deepgram_api_key"
            )
        self.speech_provider = speech_provider

    async def execute(self, context: ExecutionContext) -> AgentResult:
        text = context.tool_results.response or context.message
        if not text:
            raise AgentInvocationError("No text available to synthesize", agent=self.name)

        logger.info(f"Synthesizing speech for response ({len(text)} chars)")
        speech = await self._execute_tool("tts", {"text": text}, context)

        context.tool_results.speech = speech
        self._add_step(context, text, {
            "status": "success",
            "type": "tts",
            "audio_size": len(speech.audio),
        })

        return AgentResult(output=speech, context=context)

    async def _execute_tool(
        self,
        tool_name: str,
        args: Dict[str, Any],
        context: ExecutionContext
    ) -> SpeechResult:
        if tool_name != "tts":
            raise AgentInvocationError(f"Unknown tool: {tool_name}", agent=self.name)

        voice_options = context.flags.voice_options
        options = {
            "voice": voice_options.voice,
            "model": voice_options.model or self.config.model,
            "speed": voice_options.speed or 1.0,
            "pitch": voice_options.pitch or 1.0,
        }

        try:
            audio = await self.speech_provider.synthesize(args["text"], options)
        except Exception as e:
            logger.error(f"Text-to-speech failed ({self.name}): {e}")
            raise

        logger.debug(f"Text-to-speech completed: {len(audio)} bytes")
        return SpeechResult(
            audio=base64.b64encode(audio).decode("ascii"),
            format=AUDIO_FORMAT,
            text=args["text"]
        )
