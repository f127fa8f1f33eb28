"""
Services Layer for Chatflow
===========================

Services wrap the external providers the agents depend on:

- LiteLLMClient: Chat completions (OpenAI or local Ollama)
- TavilySearchService: Web search
- DeepgramSpeechService: Speech-to-text and text-to-speech
- ProviderRegistry: Builds the above lazily from per-run credentials

DEPENDENCY FLOW:
----------------
    credentials + Settings ──► ProviderRegistry ──┬──► LLMProvider
                                                  ├──► SearchProvider
                                                  └──► SpeechProvider
                                                         │
                                                         └──► Used by Agents
"""

from chatflow.services.base import LLMProvider, SearchProvider, SpeechProvider
from chatflow.services.llm_client import LiteLLMClient, LLMConfig
from chatflow.services.search_service import TavilySearchService, SearchConfig
from chatflow.services.speech_service import DeepgramSpeechService, SpeechConfig
from chatflow.services.registry import ProviderRegistry

__all__ = [
    "LLMProvider",
    "SearchProvider",
    "SpeechProvider",
    "LiteLLMClient",
    "LLMConfig",
    "TavilySearchService",
    "SearchConfig",
    "DeepgramSpeechService",
    "SpeechConfig",
    "ProviderRegistry",
]
