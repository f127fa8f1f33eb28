"""
Provider Capabilities - Narrow interfaces over external collaborators.

Agents depend on these abstract capabilities, never on a concrete SDK:

    LLMProvider     chat completion, optionally streamed token-by-token
    SearchProvider  query -> ranked snippet list
    SpeechProvider  audio -> transcript, text -> audio
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List, Optional

from chatflow.models.schemas import SearchHit, VoiceResult


class LLMProvider(ABC):
    """Chat completion capability."""

    @abstractmethod
    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        model: Optional[str] = None
    ) -> str:
        """
        Return the full completion text.

        Args:
            messages: OpenAI-style role/content dicts
            temperature: Sampling temperature
            max_tokens: Optional completion length cap
            json_mode: Ask the model for a JSON object response
            model: Override the provider's default model
        """
        pass

    @abstractmethod
    def stream(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None
    ) -> AsyncIterator[str]:
        """Yield completion text chunks as they arrive."""
        pass


class SearchProvider(ABC):
    """Web search capability."""

    @abstractmethod
    async def search(
        self,
        query: str,
        search_depth: str = "basic",
        max_results: int = 5
    ) -> List[SearchHit]:
        """Return results ranked by relevance."""
        pass


class SpeechProvider(ABC):
    """Speech-to-text and text-to-speech capability."""

    @abstractmethod
    async def transcribe(self, audio: bytes, options: Optional[dict] = None) -> VoiceResult:
        """Transcribe an audio buffer."""
        pass

    @abstractmethod
    async def synthesize(self, text: str, options: Optional[dict] = None) -> bytes:
        """Render text to an audio buffer."""
        pass
