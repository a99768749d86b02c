"""Shared fixtures for toolscout tests."""

import asyncio
from typing import Dict, List, Optional, Set

import pytest
import pytest_asyncio

from indexer.sqlite_adapter import ToolCatalog
from services.shared.errors import EmbeddingError
from services.shared.models import Document


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeEmbeddingClient:
    """Stands in for ``OllamaClient.embed`` with scripted vectors."""

    embedding_model = "fake-embed"

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None,
                 default: Optional[List[float]] = None,
                 fail_on: Optional[Set[str]] = None,
                 delay: float = 0.0):
        self.vectors = vectors or {}
        self.default = default if default is not None else [0.0, 0.0]
        self.fail_on = fail_on or set()
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if text in self.fail_on:
                raise EmbeddingError("HTTP error! status: 500")
            return list(self.vectors.get(text, self.default))
        finally:
            self.in_flight -= 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_document():
    return Document(
        title="Acme Deploy",
        description="Ship containers to production in one click",
        text="Acme Deploy builds, tests and ships your containers. " * 5,
        url="https://acme.dev"
    )


@pytest_asyncio.fixture
async def catalog(tmp_path):
    """Initialized SQLite catalog in a temporary directory."""
    tool_catalog = ToolCatalog(str(tmp_path / "tools.db"))
    await tool_catalog.initialize()
    yield tool_catalog
    await tool_catalog.close()
