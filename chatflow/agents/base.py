"""
Base classes for the agent architecture.

All agents inherit from BaseAgent to share one contract:

    result = await agent.execute(context)   # -> AgentResult(output, context)

Agents are built fresh for every workflow and hold only their
configuration and provider handles between invocations.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from chatflow.core.exceptions import AgentInvocationError, ConfigurationError
from chatflow.models.schemas import ExecutionContext
from chatflow.services.base import LLMProvider

logger = logging.getLogger(__name__)

TokenCallback = Callable[[str], Any]


class AgentRole(Enum):
    """Defines the role of each agent in the system."""
    QUERY = "query"
    SEARCH = "search"
    VOICE = "voice"
    SUMMARY = "summary"
    RESPONSE = "response"
    SPEECH = "speech"


@dataclass
class AgentConfig:
    """Static configuration for one agent instance."""
    name: str
    description: str = ""
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


@dataclass
class AgentResult:
    """Partial result of one agent invocation."""
    output: Any
    context: ExecutionContext


class BaseAgent(ABC):
    """
    Base class for all agents.

    Agents are single-purpose units of work over a shared context:
    - QueryAgent: Decides whether search or voice handling is needed
    - SearchAgent: Fetches web results
    - VoiceAgent: Transcribes spoken input into the message
    - SummaryAgent: Summarizes search results, history or a transcript
    - ResponseAgent: Streams the final answer
    - SpeechAgent: Converts the answer to audio

    Contract:
    - A "nothing to do" condition returns AgentResult(None, context) unchanged
    - Provider errors propagate; they are logged, never swallowed
    - Context writes happen only after the provider call succeeded
    - Every successful execution appends exactly one intermediate step
    """

    role: AgentRole
    default_temperature: float = 0.7

    def __init__(
        self,
        config: AgentConfig,
        llm: Optional[LLMProvider] = None,
        on_token: Optional[TokenCallback] = None
    ):
        """
        Initialize agent with its configuration.

        Args:
            config: Agent name, model and sampling settings
            llm: LLM provider (required by LLM-backed agents)
            on_token: Callback for streamed tokens; the workflow manager
                      binds its own sink here
        """
        self.config = config
        self.llm = llm
        self.on_token = on_token

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def temperature(self) -> float:
        if self.config.temperature is None:
            return self.default_temperature
        return self.config.temperature

    @abstractmethod
    async def execute(self, context: ExecutionContext) -> AgentResult:
        """
        Run the agent against the shared context.

        Args:
            context: Shared execution context

        Returns:
            AgentResult with this agent's output and the updated context
        """
        pass

    async def _execute_tool(self, tool_name: str, args: Dict[str, Any], context: ExecutionContext) -> Any:
        """Invoke this agent's external provider. Overridden by tool-using agents."""
        raise AgentInvocationError(
            f"{self.__class__.__name__} does not execute tools",
            agent=self.name
        )

    def _require_llm(self) -> None:
        if self.llm is None:
            raise ConfigurationError(
                f"{self.name} requires an LLM provider",
                setting="llm_api_key"
            )

    def _add_step(self, context: ExecutionContext, input: Any, output: Any) -> None:
        """Record this agent's execution in the audit trail."""
        context.record_step(self.name, input, output)

    async def _call_llm(self, messages: List[Dict[str, str]], json_mode: bool = False) -> str:
        """Make a non-streaming call to the LLM."""
        return await self.llm.complete(
            messages,
            temperature=self.temperature,
            max_tokens=self.config.max_tokens,
            json_mode=json_mode,
            model=self.config.model
        )

    async def _stream_llm(self, messages: List[Dict[str, str]]) -> str:
        """
        Stream a completion, forwarding each token to on_token.

        Returns:
            The concatenated completion text
        """
        chunks: List[str] = []
        try:
            async for token in self.llm.stream(
                messages,
                temperature=self.temperature,
                max_tokens=self.config.max_tokens,
                model=self.config.model
            ):
                chunks.append(token)
                await self._emit_token(token)
        except Exception as e:
            logger.error(f"Error in stream response ({self.name}): {e}")
            raise

        return "".join(chunks)

    async def _emit_token(self, token: str) -> None:
        if self.on_token is None:
            return
        result = self.on_token(token)
        if inspect.isawaitable(result):
            await result
