"""Indexer package for toolscout.

Provides inference transport, tool analysis, embedding caching, semantic
search and the SQLite tool catalog.
"""

from .ollama_client import OllamaClient
from .analysis import (
    AnalysisCache,
    ToolAnalyzer,
    build_prompt,
    extract_summary,
    extract_categories,
    degraded_analysis
)
from .embeddings import EmbeddingCache, embedding_cache_key
from .search import SemanticSearchEngine, cosine_similarity, tool_text
from .sqlite_adapter import ToolCatalog

__all__ = [
    # Inference
    'OllamaClient',

    # Analysis
    'AnalysisCache',
    'ToolAnalyzer',
    'build_prompt',
    'extract_summary',
    'extract_categories',
    'degraded_analysis',

    # Embeddings
    'EmbeddingCache',
    'embedding_cache_key',

    # Search
    'SemanticSearchEngine',
    'cosine_similarity',
    'tool_text',

    # Catalog
    'ToolCatalog'
]
