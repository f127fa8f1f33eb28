"""
Response Agent - Generates the final answer.

Builds the conversation sent to the LLM:

    [system prompt]
    [search results as a system block]   (only if search produced results)
    [history...]
    [user message]

and streams the completion, forwarding every token to on_token.
"""

import json
import logging
from typing import Dict, List, Optional

from chatflow.agents.base import AgentConfig, AgentResult, AgentRole, BaseAgent, TokenCallback
from chatflow.models.schemas import ExecutionContext
from chatflow.services.base import LLMProvider

logger = logging.getLogger(__name__)


RESPONSE_SYSTEM_PROMPT = """You are a helpful AI assistant. Your role is to:
1. Provide clear, accurate, and helpful responses
2. Use any search results provided to enhance your response
3. Keep responses concise but informative
4. Maintain a friendly and professional tone"""


class ResponseAgent(BaseAgent):
    """Streams the answer into tool_results.response."""

    role = AgentRole.RESPONSE
    default_temperature = 0.7

    def __init__(
        self,
        config: AgentConfig,
        llm: LLMProvider,
        on_token: Optional[TokenCallback] = None
    ):
        super().__init__(config, llm=llm, on_token=on_token)
        self._require_llm()

    async def execute(self, context: ExecutionContext) -> AgentResult:
        messages = self._build_messages(context)

        try:
            response = await self._stream_llm(messages)
        except Exception as e:
            logger.error(f"Response generation failed for '{context.message[:50]}': {e}")
            raise

        context.tool_results.response = response
        self._add_step(context, context.message, response)

        logger.info(f"Response generated: {len(response)} chars")
        return AgentResult(output=response, context=context)

    def _build_messages(self, context: ExecutionContext) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": RESPONSE_SYSTEM_PROMPT}]

        if context.tool_results.search:
            results = [hit.model_dump() for hit in context.tool_results.search]
            messages.append({
                "role": "system",
                "content": f"Here are some relevant search results:\n{json.dumps(results, indent=2)}"
            })

        messages.extend(message.model_dump() for message in context.history)
        messages.append({"role": "user", "content": context.message})
        return messages
