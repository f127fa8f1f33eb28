"""
Summary Agent - Summarizes search results, chat history or a voice transcript.

The source and prompt are picked by flags.summary_mode:

    search  ->  tool_results.search      (title, content, url per hit)
    chat    ->  history
    voice   ->  tool_results.voice.text

An empty source is a "nothing to do" condition, not an error.
"""

import json
import logging
from typing import Any, Optional

from chatflow.agents.base import AgentConfig, AgentResult, AgentRole, BaseAgent, TokenCallback
from chatflow.models.schemas import ExecutionContext
from chatflow.services.base import LLMProvider

logger = logging.getLogger(__name__)


BASE_PROMPT = (
    "You are a summarization expert. Your role is to create clear, concise, "
    "and accurate summaries while maintaining the key information and context."
)

MODE_PROMPTS = {
    "search": """Analyze search results and:
1. Extract key information and findings
2. Create a concise but comprehensive summary
3. Organize by relevance and importance
4. Highlight key dates, statistics, and quotes
5. Include source references

Format your summary with:
- Brief overview (1-2 sentences)
- Key points in bullet form
- Important quotes or statistics
- Sources referenced""",

    "chat": """Create a TLDR (Too Long; Didn't Read) summary of the chat conversation that:
1. Captures the main topics discussed
2. Highlights key decisions or conclusions
3. Notes any action items or next steps
4. Preserves important context
5. Maintains chronological flow if relevant

Format your summary with:
- Main topic/theme
- Key points discussed
- Decisions/conclusions reached
- Action items (if any)""",

    "voice": """Create a summarized transcript of the voice conversation that:
1. Captures the essential dialogue
2. Maintains speaker context
3. Highlights key points and decisions
4. Notes any action items
5. Preserves emotional context or tone where relevant

Format your summary with:
- Conversation context
- Main points of discussion
- Key decisions or outcomes
- Action items or follow-ups""",
}


class SummaryAgent(BaseAgent):
    """Streams a mode-specific summary into tool_results.summary."""

    role = AgentRole.SUMMARY
    default_temperature = 0.6

    def __init__(
        self,
        config: AgentConfig,
        llm: LLMProvider,
        on_token: Optional[TokenCallback] = None
    ):
        super().__init__(config, llm=llm, on_token=on_token)
        self._require_llm()

    async def execute(self, context: ExecutionContext) -> AgentResult:
        mode = context.flags.summary_mode or "chat"
        content = self._select_source(context, mode)
        if not content:
            logger.debug(f"Nothing to summarize for mode '{mode}'")
            return AgentResult(output=None, context=context)

        serialized = json.dumps(content, indent=2)
        messages = [
            {"role": "system", "content": f"{BASE_PROMPT}\n\n{MODE_PROMPTS[mode]}"},
            {"role": "user", "content": f"Please summarize this {mode} content:\n{serialized}"},
        ]

        try:
            summary = await self._stream_llm(messages)
        except Exception as e:
            logger.error(f"Summary generation failed (mode: {mode}): {e}")
            raise

        context.tool_results.summary = summary
        self._add_step(context, {"mode": mode, "content_length": len(serialized)}, summary)

        logger.info(f"Summary generated: {len(summary)} chars (mode: {mode})")
        return AgentResult(output=summary, context=context)

    def _select_source(self, context: ExecutionContext, mode: str) -> Any:
        """Return JSON-serializable content for the mode, or a falsy value if empty."""
        if mode == "search":
            hits = context.tool_results.search or []
            return [
                {"title": hit.title, "content": hit.content, "url": hit.url}
                for hit in hits
            ]

        if mode == "chat":
            return [message.model_dump() for message in context.history]

        voice = context.tool_results.voice
        return voice.text if voice else None
