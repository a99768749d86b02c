"""Tool analysis and search orchestration for toolscout.

Wires the fetcher, the analysis and embedding caches, the search engine and
the tool catalog together behind the operations the HTTP layer exposes.
"""

import logging
from typing import Any, Dict, List, Optional

from config.settings import ServiceConfig
from indexer.analysis import AnalysisCache, ToolAnalyzer
from indexer.embeddings import EmbeddingCache
from indexer.ollama_client import OllamaClient
from indexer.search import SemanticSearchEngine
from indexer.sqlite_adapter import ToolCatalog
from pipelines.fetcher import PageFetcher, fallback_title, normalize_url
from services.shared.errors import DuplicateToolError
from services.shared.models import SENTINEL_CATEGORY, Analysis, ScoredTool, Tool, ToolCreate

logger = logging.getLogger(__name__)


def basic_analysis(url: str) -> Analysis:
    """Analysis used when a page yields too little text to summarize."""
    return Analysis(
        summary=f"This appears to be a website at {url}. We couldn't extract detailed information.",
        categories=(SENTINEL_CATEGORY,)
    )


class ToolScoutService:
    """Analyze URLs into tool profiles and search the catalog semantically."""

    def __init__(self,
                 catalog: ToolCatalog,
                 fetcher: PageFetcher,
                 analyzer: ToolAnalyzer,
                 embeddings: EmbeddingCache,
                 search_engine: SemanticSearchEngine,
                 client: Optional[OllamaClient] = None):
        self.catalog = catalog
        self.fetcher = fetcher
        self.analyzer = analyzer
        self.embeddings = embeddings
        self.search_engine = search_engine
        self.client = client

    @classmethod
    def from_config(cls, config: ServiceConfig, catalog: Optional[ToolCatalog] = None) -> 'ToolScoutService':
        """Build the full component graph from a ``ServiceConfig``."""
        client = OllamaClient.from_config(config)
        fetcher = PageFetcher(request_timeout=config.fetch_timeout, cache_ttl=config.fetch_cache_ttl)
        analysis_cache = AnalysisCache(client, cache_ttl=config.analysis_cache_ttl,
                                       prompt_text_chars=config.prompt_text_chars)
        embeddings = EmbeddingCache(client, cache_ttl=config.embedding_cache_ttl,
                                    key_prefix_chars=config.embedding_key_prefix_chars)
        search_engine = SemanticSearchEngine(embeddings, batch_size=config.search_batch_size,
                                             default_limit=config.search_limit)
        return cls(
            catalog=catalog or ToolCatalog(config.db_path),
            fetcher=fetcher,
            analyzer=ToolAnalyzer(analysis_cache),
            embeddings=embeddings,
            search_engine=search_engine,
            client=client
        )

    async def start(self):
        """Open the catalog."""
        await self.catalog.initialize()

    async def close(self):
        """Release network sessions and the catalog connection."""
        await self.fetcher.close()
        if self.client:
            await self.client.close()
        await self.catalog.close()

    async def _ensure_url_free(self, *urls: str, exclude_id: Optional[int] = None,
                               message: Optional[str] = None):
        for url in dict.fromkeys(u for u in urls if u):
            existing = await self.catalog.find_url_conflict(url, exclude_id=exclude_id)
            if existing:
                raise DuplicateToolError(
                    url, existing.name,
                    message.format(name=existing.name) if message else None
                )

    async def analyze_url(self, raw_url: str) -> Dict[str, Any]:
        """Fetch and analyze a URL into an unsaved tool profile.

        Raises:
            InvalidURL: if the URL is malformed
            DuplicateToolError: if the URL is already in the catalog
        """
        url = normalize_url(raw_url)
        await self._ensure_url_free(raw_url.strip(), url)

        doc = await self.fetcher.fetch_document(url)
        if doc.has_content:
            analysis = await self.analyzer.analyze(doc)
        else:
            logger.warning(f"Not enough content at {doc.url}, using basic analysis")
            analysis = basic_analysis(doc.url)

        return {
            'name': doc.title or fallback_title(doc.url),
            'url': doc.url,
            **analysis.to_dict()
        }

    async def search_tools(self, query: str, limit: Optional[int] = None) -> List[ScoredTool]:
        """Rank all catalog tools against ``query``.

        Raises:
            SearchError: if the query cannot be embedded
        """
        tools = await self.catalog.list_tools()
        return await self.search_engine.search(tools, query, limit)

    async def list_tools(self) -> List[Tool]:
        return await self.catalog.list_tools()

    async def create_tool(self, payload: ToolCreate) -> Tool:
        """Insert a tool unless its URL is already registered.

        Raises:
            DuplicateToolError: if the URL is taken
        """
        await self._ensure_url_free(payload.url)
        return await self.catalog.insert_tool(payload)

    async def update_tool(self, tool_id: int, payload: ToolCreate) -> Tool:
        """Update a tool unless another tool already uses its URL.

        Raises:
            DuplicateToolError: if another tool has the URL
            ToolNotFoundError: if the tool does not exist
        """
        await self._ensure_url_free(payload.url, exclude_id=tool_id,
                                    message='This URL is already used by "{name}"')
        return await self.catalog.update_tool(tool_id, payload)

    async def delete_tool(self, tool_id: int) -> None:
        await self.catalog.delete_tool(tool_id)

    def clear_caches(self) -> None:
        """Empty the fetch, analysis and embedding caches."""
        self.fetcher.clear_cache()
        self.analyzer.clear_cache()
        self.embeddings.clear_cache()
        logger.info("All caches cleared")

    def cache_stats(self) -> Dict[str, Any]:
        """Get statistics for every cache."""
        return {
            'fetch': self.fetcher.cache.stats(),
            'analysis': self.analyzer.cache.cache.stats(),
            'embedding': self.embeddings.cache.stats()
        }
