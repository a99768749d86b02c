"""Semantic search for toolscout.

Ranks catalog tools against a free-text query by cosine similarity between
embedding vectors. Candidates are embedded in fixed-size batches: batches run
one after another, candidates within a batch run concurrently.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

import numpy as np

from services.shared.errors import EmbeddingError, FailurePolicy, SearchError
from services.shared.models import ScoredTool, Tool
from .embeddings import EmbeddingCache

logger = logging.getLogger(__name__)


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """Calculate cosine similarity between two vectors.

    Returns exactly 0.0 for missing, empty, length-mismatched or zero-magnitude
    inputs. The result is clamped to [-1, 1].
    """
    if a is None or b is None or len(a) == 0 or len(b) == 0 or len(a) != len(b):
        return 0.0

    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)

    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = np.dot(vec_a, vec_b) / (norm_a * norm_b)
    return float(np.clip(similarity, -1.0, 1.0))


def tool_text(tool: Tool) -> str:
    """Text representation embedded for a candidate tool."""
    return f"{tool.name} {tool.summary} {' '.join(tool.categories)}"


class SemanticSearchEngine:
    """Batched embedding search over a candidate set."""

    failure_policy = FailurePolicy.ZERO_SCORE_PER_CANDIDATE

    def __init__(self, embeddings: EmbeddingCache, batch_size: int = 5, default_limit: int = 10):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.embeddings = embeddings
        self.batch_size = batch_size
        self.default_limit = default_limit

    async def search(self, candidates: Sequence[Tool], query: str,
                     limit: Optional[int] = None) -> List[ScoredTool]:
        """Rank ``candidates`` against ``query``, best first.

        Ties keep the candidates' original order. A candidate whose embedding
        fails is kept with score 0.

        Raises:
            SearchError: if the query itself cannot be embedded
        """
        if limit is None:
            limit = self.default_limit
        if not candidates:
            return []

        try:
            query_vector = await self.embeddings.embed(query)
        except EmbeddingError as e:
            raise SearchError(f"Failed to perform semantic search: {e}") from e

        results: List[ScoredTool] = []
        for start in range(0, len(candidates), self.batch_size):
            batch = candidates[start:start + self.batch_size]
            scored = await asyncio.gather(*(self._score(tool, query_vector) for tool in batch))
            results.extend(scored)

        ranked = sorted(results, key=lambda t: t.score, reverse=True)
        logger.info(f"Search for {query!r} scored {len(results)} tools, returning {min(len(ranked), max(limit, 0))}")
        return ranked[:max(limit, 0)]

    async def _score(self, tool: Tool, query_vector: List[float]) -> ScoredTool:
        try:
            vector = await self.embeddings.embed(tool_text(tool))
        except EmbeddingError as e:
            logger.warning(f"Error processing tool {tool.name}: {e}, scoring 0")
            return ScoredTool.from_tool(tool, 0.0)
        return ScoredTool.from_tool(tool, cosine_similarity(query_vector, vector))
