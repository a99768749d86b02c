"""Ollama inference client for toolscout.

Thin async transport for the two inference endpoints the service consumes:
generative text (``/api/generate``) and embeddings (``/api/embeddings``).
Every call has its own timeout; failures are raised as typed errors and never
retried here.
"""

import asyncio
import json
import logging
from numbers import Real
from typing import Any, Dict, List, Optional, Type

import aiohttp

from services.shared.errors import (
    EmbeddingError,
    EmbeddingTimeout,
    InferenceError,
    InferenceTimeout,
)

logger = logging.getLogger(__name__)

DEFAULT_GENERATE_URL = "http://localhost:11434/api/generate"
DEFAULT_EMBEDDINGS_URL = "http://localhost:11434/api/embeddings"
DEFAULT_GENERATE_MODEL = "gemma3:12b"
DEFAULT_EMBEDDING_MODEL = "nomic-embed-text"


class OllamaClient:
    """Async client for an Ollama server."""

    def __init__(self,
                 generate_url: str = DEFAULT_GENERATE_URL,
                 embeddings_url: str = DEFAULT_EMBEDDINGS_URL,
                 generate_model: str = DEFAULT_GENERATE_MODEL,
                 embedding_model: str = DEFAULT_EMBEDDING_MODEL,
                 generate_timeout: float = 30.0,
                 embedding_timeout: float = 10.0,
                 session: Optional[aiohttp.ClientSession] = None):
        """Initialize client.

        Args:
            generate_url: Generative-text endpoint
            embeddings_url: Embedding endpoint
            generate_model: Model used for summaries
            embedding_model: Model used for embeddings
            generate_timeout: Timeout for one generate call in seconds
            embedding_timeout: Timeout for one embedding call in seconds
            session: Optional shared aiohttp session; the client never closes it
        """
        self.generate_url = generate_url
        self.embeddings_url = embeddings_url
        self.generate_model = generate_model
        self.embedding_model = embedding_model
        self.generate_timeout = generate_timeout
        self.embedding_timeout = embedding_timeout
        self.session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config, session: Optional[aiohttp.ClientSession] = None) -> 'OllamaClient':
        """Create a client from a ``ServiceConfig``."""
        return cls(
            generate_url=config.ollama_generate_url,
            embeddings_url=config.ollama_embeddings_url,
            generate_model=config.generate_model,
            embedding_model=config.embedding_model,
            generate_timeout=config.inference_timeout,
            embedding_timeout=config.embedding_timeout,
            session=session
        )

    async def __aenter__(self):
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the client session if this client created it."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    async def _post_json(self, url: str, payload: Dict[str, Any], timeout: float,
                         error_cls: Type[Exception], timeout_cls: Type[Exception]) -> Dict[str, Any]:
        session = await self._get_session()
        try:
            async with session.post(url, json=payload,
                                    timeout=aiohttp.ClientTimeout(total=timeout)) as response:
                if response.status < 200 or response.status >= 300:
                    raise error_cls(f"HTTP error! status: {response.status}")
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise timeout_cls(f"Ollama request to {url} timed out after {timeout}s") from e
        except aiohttp.ClientError as e:
            raise error_cls(f"Failed to reach Ollama at {url}: {e}") from e
        except json.JSONDecodeError as e:
            raise error_cls(f"Malformed JSON from Ollama at {url}: {e}") from e

        if not isinstance(data, dict):
            raise error_cls(f"Unexpected response from Ollama at {url}: {type(data).__name__}")
        return data

    async def generate(self, prompt: str) -> str:
        """Generate a completion for ``prompt``.

        Raises:
            InferenceTimeout: if the service does not answer in time
            InferenceError: on non-2xx status, transport failure or malformed body
        """
        payload = {'model': self.generate_model, 'prompt': prompt, 'stream': False}
        logger.info(f"Requesting completion from {self.generate_model} ({len(prompt)} chars)")

        data = await self._post_json(self.generate_url, payload, self.generate_timeout,
                                     InferenceError, InferenceTimeout)

        text = data.get('response')
        if not isinstance(text, str):
            raise InferenceError("Ollama response is missing the 'response' text field")
        return text

    async def embed(self, text: str) -> List[float]:
        """Embed ``text`` into a vector.

        Raises:
            EmbeddingTimeout: if the service does not answer in time
            EmbeddingError: on non-2xx status, transport failure or malformed body
        """
        payload = {'model': self.embedding_model, 'prompt': text}
        logger.debug(f"Requesting embedding from {self.embedding_model} ({len(text)} chars)")

        data = await self._post_json(self.embeddings_url, payload, self.embedding_timeout,
                                     EmbeddingError, EmbeddingTimeout)

        vector = data.get('embedding')
        if not isinstance(vector, list) or not all(
                isinstance(x, Real) and not isinstance(x, bool) for x in vector):
            raise EmbeddingError("Ollama response is missing a numeric 'embedding' array")
        return [float(x) for x in vector]
