# toolscout Embeddings Module
# Caches text-to-vector inference in front of the Ollama embedding endpoint

import hashlib
import logging
import time
from typing import Callable, List, Optional, Tuple

from services.shared.cache import TTLCache
from services.shared.errors import FailurePolicy
from .ollama_client import OllamaClient

logger = logging.getLogger(__name__)


def embedding_cache_key(text: str, model: str = "default", prefix_chars: Optional[int] = None) -> str:
    """Generate the cache key for an embedding.

    By default the key fingerprints the model and the full text, so two texts
    only share an entry when they are identical. With ``prefix_chars`` set the
    key is the text truncated to that many characters; texts sharing the
    prefix then share a vector.
    """
    if prefix_chars:
        return f"embedding:{model}:prefix:{text[:prefix_chars]}"
    text_hash = hashlib.sha256(text.encode()).hexdigest()
    return f"embedding:{model}:{text_hash}"


class EmbeddingCache:
    """Embedding inference behind a time-bounded cache.

    Failures always propagate; a zero vector is never substituted.
    """

    failure_policy = FailurePolicy.PROPAGATE_AND_LET_CALLER_SUBSTITUTE

    def __init__(self,
                 client: OllamaClient,
                 cache_ttl: float = 86400.0,
                 cache: Optional[TTLCache] = None,
                 key_prefix_chars: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize embedding cache

        Args:
            client: Ollama client used on cache misses
            cache_ttl: Entry time-to-live in seconds
            cache: Optional pre-built cache (overrides ``cache_ttl`` and ``clock``)
            key_prefix_chars: Key by text prefix instead of a full fingerprint
            clock: Clock used by the cache
        """
        self.client = client
        self.cache = cache if cache is not None else TTLCache(cache_ttl, name="embedding_cache", clock=clock)
        self.key_prefix_chars = key_prefix_chars
        if key_prefix_chars:
            logger.info(f"Embedding cache keyed by the first {key_prefix_chars} characters of the text")
        else:
            logger.info("Embedding cache keyed by a SHA-256 fingerprint of the full text")

    def key_for(self, text: str) -> str:
        return embedding_cache_key(text, self.client.embedding_model, self.key_prefix_chars)

    async def embed(self, text: str) -> List[float]:
        """Return the vector for ``text``, from cache when fresh.

        Raises:
            EmbeddingError: if the embedding call fails; nothing is cached
        """
        vector = await self.cache.get_or_load(self.key_for(text), lambda: self._load(text))
        return list(vector)

    async def _load(self, text: str) -> Tuple[float, ...]:
        # Stored as a tuple; callers get their own list
        return tuple(await self.client.embed(text))

    def clear_cache(self) -> None:
        """Empty the embedding cache."""
        self.cache.clear()
