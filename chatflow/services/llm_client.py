"""
LLM Client - Chat completions through LiteLLM.

RESPONSIBILITY:
Sends OpenAI-style message lists to the configured model and returns
either the full completion or a stream of text chunks.

Supports:
  - openai: hosted OpenAI models, requires an API key
  - ollama: local Ollama server, model routed as "ollama/<model>"

No retries are performed here; failures propagate to the caller.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Optional

import litellm

from chatflow.services.base import LLMProvider

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for the LLM client."""
    model: str = "gpt-4o-mini"
    provider: str = "openai"  # "openai" or "ollama"
    api_key: Optional[str] = None
    api_base: Optional[str] = None


class LiteLLMClient(LLMProvider):
    """
    Async chat completion client.

    Usage:
        client = LiteLLMClient(LLMConfig(model="gpt-4o-mini", api_key="sk-..."))
        text = await client.complete([{"role": "user", "content": "Hi"}])

        async for chunk in client.stream(messages):
            print(chunk, end="")
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        logger.info(f"Initialized LiteLLMClient ({config.provider}) with model: {config.model}")

    def model_name(self, model: Optional[str] = None) -> str:
        """Model identifier in LiteLLM routing format."""
        name = model or self.config.model
        if self.config.provider == "ollama" and not name.startswith("ollama/"):
            return f"ollama/{name}"
        return name

    def _build_params(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: Optional[int],
        model: Optional[str]
    ) -> dict:
        params: dict = {
            "model": self.model_name(model),
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        if self.config.api_key is not None:
            params["api_key"] = self.config.api_key
        if self.config.api_base is not None:
            params["api_base"] = self.config.api_base
        return params

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        model: Optional[str] = None
    ) -> str:
        params = self._build_params(messages, temperature, max_tokens, model)
        if json_mode:
            params["response_format"] = {"type": "json_object"}

        logger.debug(f"LLM completion: model={params['model']}, messages={len(messages)}")
        response = await litellm.acompletion(**params)

        return response.choices[0].message.content or ""

    async def stream(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None
    ) -> AsyncIterator[str]:
        params = self._build_params(messages, temperature, max_tokens, model)
        params["stream"] = True

        logger.debug(f"LLM stream: model={params['model']}, messages={len(messages)}")
        stream = await litellm.acompletion(**params)

        chunk_count = 0
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta and chunk.choices[0].delta.content:
                chunk_count += 1
                yield chunk.choices[0].delta.content

        logger.debug(f"LLM stream complete: {chunk_count} chunks")
