"""
Provider Registry - Lazily constructed provider handles for one workflow.

Each workflow build gets its own registry built from the run's
credentials. A provider is only created when an agent asks for it,
so recipes that never register a search or speech node never need
those credentials.
"""

import logging
from typing import Optional

from chatflow.core.config import Settings, get_settings
from chatflow.core.exceptions import ConfigurationError
from chatflow.models.schemas import ProviderCredentials
from chatflow.services.base import LLMProvider, SearchProvider, SpeechProvider
from chatflow.services.llm_client import LiteLLMClient, LLMConfig
from chatflow.services.search_service import SearchConfig, TavilySearchService
from chatflow.services.speech_service import DeepgramSpeechService, SpeechConfig

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Creates and caches provider clients.

    Pre-built providers (e.g. test fakes) can be passed in directly and
    take precedence over anything built from credentials.
    """

    def __init__(
        self,
        credentials: Optional[ProviderCredentials] = None,
        settings: Optional[Settings] = None,
        llm: Optional[LLMProvider] = None,
        search: Optional[SearchProvider] = None,
        speech: Optional[SpeechProvider] = None
    ):
        self.credentials = credentials or ProviderCredentials()
        self.settings = settings or get_settings()
        self._llm = llm
        self._search = search
        self._speech = speech

    @property
    def default_model(self) -> str:
        return self.settings.default_model

    def llm(self) -> LLMProvider:
        """Get the LLM provider, building it on first use."""
        if self._llm is None:
            settings = self.settings
            api_key = self.credentials.api_key or settings.llm_api_key
            if settings.llm_provider == "ollama":
                config = LLMConfig(
                    model=settings.default_model,
                    provider="ollama",
                    api_key=api_key,
                    api_base=settings.ollama_base_url
                )
            else:
                if not api_key:
                    raise ConfigurationError("LLM API key is required", setting="llm_api_key")
                config = LLMConfig(
                    model=settings.default_model,
                    provider=settings.llm_provider,
                    api_key=api_key
                )
            self._llm = LiteLLMClient(config)
        return self._llm

    def search(self) -> SearchProvider:
        """Get the search provider, building it on first use."""
        if self._search is None:
            api_key = self.credentials.search_api_key or self.settings.tavily_api_key
            if not api_key:
                raise ConfigurationError("Tavily API key is not configured", setting="tavily_api_key")
            self._search = TavilySearchService(SearchConfig(
                api_key=api_key,
                base_url=self.settings.tavily_base_url,
                timeout_seconds=self.settings.search_timeout_seconds
            ))
        return self._search

    def speech(self, required: bool = True) -> Optional[SpeechProvider]:
        """
        Get the speech provider, building it on first use.

        Args:
            required: Raise ConfigurationError when no key is configured;
                      otherwise return None
        """
        if self._speech is None:
            api_key = self.credentials.voice_api_key or self.settings.deepgram_api_key
            if not api_key:
                if required:
                    raise ConfigurationError(
                        "Deepgram API key is not configured",
                        setting="deepgram_api_key"
                    )
                logger.debug("Speech provider not configured")
                return None
            self._speech = DeepgramSpeechService(SpeechConfig(
                api_key=api_key,
                stt_model=self.settings.stt_model,
                tts_model=self.settings.tts_model,
                language=self.settings.stt_language
            ))
        return self._speech
