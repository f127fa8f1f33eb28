"""
Search Agent - Fetches web results for the current message.

RESPONSIBILITY:
Runs a web search when either the caller (flags.needs_search) or the
Query Agent (tool_results.query_analysis.needs_search) asked for one,
and stores the ranked hits for the Summary and Response agents.
"""

import logging
from typing import Any, Dict, List, Optional

from chatflow.agents.base import AgentConfig, AgentResult, AgentRole, BaseAgent, TokenCallback
from chatflow.core.exceptions import AgentInvocationError, ConfigurationError
from chatflow.models.schemas import ExecutionContext, SearchHit
from chatflow.services.base import SearchProvider

logger = logging.getLogger(__name__)


class SearchAgent(BaseAgent):
    """
    Web search over the configured search provider.

    Search parameters are fixed: advanced depth, top 5 results.
    """

    role = AgentRole.SEARCH

    search_depth = "advanced"
    max_results = 5

    def __init__(
        self,
        config: AgentConfig,
        search_provider: SearchProvider,
        on_token: Optional[TokenCallback] = None
    ):
        super().__init__(config, on_token=on_token)
        if search_provider is None:
            raise ConfigurationError(
                f"{self.name} requires a search provider",
                setting="tavily_api_key"
            )
        self.search_provider = search_provider

    async def execute(self, context: ExecutionContext) -> AgentResult:
        if not self._should_search(context):
            return AgentResult(output=None, context=context)

        args = {
            "query": context.message,
            "search_depth": self.search_depth,
            "max_results": self.max_results,
        }
        results = await self._execute_tool("search", args, context)

        context.tool_results.search = results
        self._add_step(
            context,
            context.message,
            {"query": args["query"], "result_count": len(results)}
        )

        return AgentResult(output=results, context=context)

    def _should_search(self, context: ExecutionContext) -> bool:
        analysis = context.tool_results.query_analysis
        return context.flags.needs_search or bool(analysis and analysis.needs_search)

    async def _execute_tool(
        self,
        tool_name: str,
        args: Dict[str, Any],
        context: ExecutionContext
    ) -> List[SearchHit]:
        if tool_name != "search":
            raise AgentInvocationError(f"Unknown tool: {tool_name}", agent=self.name)

        logger.info(f"Search: Searching for '{args['query'][:50]}'")
        try:
            return await self.search_provider.search(
                args["query"],
                search_depth=args["search_depth"],
                max_results=args["max_results"]
            )
        except Exception as e:
            logger.error(f"Search tool execution failed: {e}")
            raise
