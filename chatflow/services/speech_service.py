"""
Speech Service - Speech-to-text and text-to-speech using Deepgram.

RESPONSIBILITY:
- transcribe(): prerecorded audio buffer -> transcript, confidence, words
- synthesize(): text -> audio bytes (collected from the streamed response)

Uses the async Deepgram client (deepgram-sdk v5):
    listen.v1.media.transcribe_file   prerecorded STT
    speak.v1.audio.generate           TTS, yields audio chunks
"""

import logging
from dataclasses import dataclass
from typing import Optional

from deepgram import AsyncDeepgramClient

from chatflow.models.schemas import VoiceResult
from chatflow.services.base import SpeechProvider

logger = logging.getLogger(__name__)


@dataclass
class SpeechConfig:
    """Configuration for the Deepgram speech service."""
    api_key: str
    stt_model: str = "nova-2"
    tts_model: str = "aura-asteria-en"
    language: str = "en-US"
    encoding: str = "linear16"
    container: str = "wav"


class DeepgramSpeechService(SpeechProvider):
    """
    Deepgram STT/TTS client.

    Options dicts accept:
        transcribe: model, language
        synthesize: model (or voice), speed, pitch
    """

    def __init__(self, config: SpeechConfig, client: Optional[AsyncDeepgramClient] = None):
        self.config = config
        self.client = client or AsyncDeepgramClient(api_key=config.api_key)
        logger.info(
            f"Speech service initialized (stt: {config.stt_model}, tts: {config.tts_model})"
        )

    async def transcribe(self, audio: bytes, options: Optional[dict] = None) -> VoiceResult:
        options = options or {}
        logger.info(f"Transcribing {len(audio)} bytes of audio")

        response = await self.client.listen.v1.media.transcribe_file(
            request=audio,
            model=options.get("model") or self.config.stt_model,
            language=options.get("language") or self.config.language,
            smart_format=True,
            punctuate=True,
        )

        channels = response.results.channels if response and response.results else None
        if not channels or not channels[0].alternatives:
            raise ValueError("No transcript returned from Deepgram")

        alternative = channels[0].alternatives[0]
        words = None
        if getattr(alternative, "words", None):
            words = [
                {
                    "word": word.word,
                    "start": word.start,
                    "end": word.end,
                    "confidence": word.confidence,
                }
                for word in alternative.words
            ]

        return VoiceResult(
            text=alternative.transcript or "",
            confidence=getattr(alternative, "confidence", None),
            words=words,
        )

    async def synthesize(self, text: str, options: Optional[dict] = None) -> bytes:
        options = options or {}
        model = options.get("model") or options.get("voice") or self.config.tts_model

        logger.info(f"Synthesizing speech: {len(text)} chars, model: {model}")

        # speed and pitch have no Deepgram equivalent and are ignored
        audio = bytearray()
        async for chunk in self.client.speak.v1.audio.generate(
            text=text,
            model=model,
            encoding=self.config.encoding,
            container=self.config.container,
        ):
            if chunk:
                audio.extend(chunk)

        logger.info(f"Speech synthesis complete: {len(audio)} bytes")
        return bytes(audio)
