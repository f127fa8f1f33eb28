"""
Query Agent - Analyzes the user's message and decides which tools are needed.

RESPONSIBILITY:
The Query Agent is the entry point of every recipe. It asks the LLM
for a structured routing decision that downstream node conditions read:

    {"needs_search": bool, "needs_voice": bool,
     "search_query": str|null, "voice_text": str|null, "analysis": str}

FLOW:
1. Send the message with a fixed system instruction (JSON mode)
2. Parse the decision into a QueryAnalysis
3. Store it at tool_results.query_analysis
"""

import json
import logging
from typing import Optional

from chatflow.agents.base import AgentConfig, AgentResult, AgentRole, BaseAgent, TokenCallback
from chatflow.models.schemas import ExecutionContext, QueryAnalysis
from chatflow.services.base import LLMProvider

logger = logging.getLogger(__name__)


QUERY_SYSTEM_PROMPT = """You are an intelligent query analyzer. Your role is to:
1. Understand the user's query and determine what tools might be needed
2. Identify if the query requires:
   - Internet search (for current information)
   - Text-to-speech conversion
3. Extract key information and context from the query
4. Determine the best way to structure the response

Respond in JSON format with:
{
  "needs_search": boolean,
  "needs_voice": boolean,
  "search_query": string | null,
  "voice_text": string | null,
  "analysis": string
}"""


class QueryAgent(BaseAgent):
    """
    Produces the routing decision for the rest of the workflow.

    Falls back to the caller's flags when the model's answer
    cannot be parsed as JSON.
    """

    role = AgentRole.QUERY
    default_temperature = 0.3

    def __init__(
        self,
        config: AgentConfig,
        llm: LLMProvider,
        on_token: Optional[TokenCallback] = None
    ):
        super().__init__(config, llm=llm, on_token=on_token)
        self._require_llm()

    async def execute(self, context: ExecutionContext) -> AgentResult:
        messages = [
            {"role": "system", "content": QUERY_SYSTEM_PROMPT},
            {"role": "user", "content": context.message},
        ]

        try:
            response = await self._call_llm(messages, json_mode=True)
        except Exception as e:
            logger.error(f"Query analysis failed for '{context.message[:50]}': {e}")
            raise

        analysis = self._parse_analysis(response, context)

        context.tool_results.query_analysis = analysis
        self._add_step(context, context.message, analysis.model_dump())

        logger.info(
            f"Query analysis: needs_search={analysis.needs_search}, "
            f"needs_voice={analysis.needs_voice}"
        )
        return AgentResult(output=analysis, context=context)

    def _parse_analysis(self, response: str, context: ExecutionContext) -> QueryAnalysis:
        """
        Parse the LLM response into a QueryAnalysis.

        Falls back to a flag-derived decision if parsing fails.
        """
        try:
            start = response.find('{')
            end = response.rfind('}') + 1
            if start != -1 and end > start:
                return QueryAnalysis.model_validate(json.loads(response[start:end]))
        except (json.JSONDecodeError, ValueError):
            logger.warning("Failed to parse query analysis, using flags")

        return QueryAnalysis(
            needs_search=context.flags.needs_search,
            needs_voice=context.flags.needs_voice,
            voice_text=context.flags.voice_text,
            analysis="Default analysis: derived from request flags"
        )
