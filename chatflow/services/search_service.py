"""
Search Service - Web search through the Tavily API.

RESPONSIBILITY:
Turns a natural-language query into a ranked list of web snippets
that downstream agents can cite.

FLOW:
1. POST query + options to {base_url}/search
2. Raise on non-2xx (httpx.HTTPStatusError, unchanged)
3. Parse "results" into SearchHit records, best score first
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from chatflow.models.schemas import SearchHit
from chatflow.services.base import SearchProvider

logger = logging.getLogger(__name__)


@dataclass
class SearchConfig:
    """Configuration for the Tavily search service."""
    api_key: str
    base_url: str = "https://api.tavily.com"
    timeout_seconds: float = 30.0
    include_images: bool = False


class TavilySearchService(SearchProvider):
    """
    Tavily web search client.

    Usage:
        service = TavilySearchService(SearchConfig(api_key="tvly-..."))
        hits = await service.search("crop yields", search_depth="advanced")
    """

    def __init__(self, config: SearchConfig, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the search service.

        Args:
            config: Search configuration
            client: Optional shared HTTP client (a new one is opened per call otherwise)
        """
        self.config = config
        self._client = client

    async def search(
        self,
        query: str,
        search_depth: str = "basic",
        max_results: int = 5
    ) -> List[SearchHit]:
        payload = {
            "api_key": self.config.api_key,
            "query": query,
            "search_depth": search_depth,
            "include_images": self.config.include_images,
            "max_results": max_results,
        }
        url = f"{self.config.base_url.rstrip('/')}/search"

        if self._client is not None:
            response = await self._client.post(url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                response = await client.post(url, json=payload)

        response.raise_for_status()
        data = response.json()

        hits = [SearchHit.model_validate(item) for item in data.get("results", [])]
        hits.sort(key=lambda h: h.score, reverse=True)

        logger.info(f"Tavily search completed: '{query[:50]}' -> {len(hits)} results")
        return hits
