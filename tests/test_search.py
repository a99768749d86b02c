"""Tests for cosine similarity and the batched semantic search engine."""

import math

import pytest

from indexer.embeddings import EmbeddingCache
from indexer.search import SemanticSearchEngine, cosine_similarity, tool_text
from services.shared.errors import EmbeddingError, FailurePolicy, SearchError
from services.shared.models import Tool

from conftest import FakeEmbeddingClient


def make_tool(i, name=None, summary="", categories=None):
    return Tool(id=i, name=name or f"Tool {i}", url=f"https://tool{i}.dev",
                summary=summary, categories=categories or ["devops"])


def make_engine(client, clock, **kwargs):
    return SemanticSearchEngine(EmbeddingCache(client, clock=clock), **kwargs)


class TestCosineSimilarity:
    """Similarity properties."""

    @pytest.mark.parametrize("a,b", [
        ([1.0, 2.0, 3.0], [4.0, -5.0, 6.0]),
        ([0.5, 0.5], [-0.5, 0.25]),
        ([-1.0, 0.0], [1.0, 0.0]),
        ([3.0, 4.0], [6.0, 8.0]),
    ])
    def test_bounded_and_symmetric(self, a, b):
        score = cosine_similarity(a, b)
        assert -1.0 <= score <= 1.0
        assert score == cosine_similarity(b, a)

    def test_self_similarity_is_one(self):
        assert cosine_similarity([0.2, 0.7, 0.1], [0.2, 0.7, 0.1]) == pytest.approx(1.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    @pytest.mark.parametrize("a,b", [
        ([], [1.0]),
        ([1.0], []),
        ([], []),
        (None, [1.0, 0.0]),
        ([1.0, 0.0], None),
        ([1.0, 0.0], [1.0, 0.0, 0.0]),
        ([0.0, 0.0], [1.0, 0.0]),
        ([1.0, 0.0], [0.0, 0.0]),
    ])
    def test_degenerate_inputs_score_exactly_zero(self, a, b):
        assert cosine_similarity(a, b) == 0.0

    def test_returns_python_float(self):
        assert type(cosine_similarity([1, 2], [2, 1])) is float


class TestToolText:
    def test_joins_name_summary_and_categories(self):
        tool = make_tool(1, name="Docker", summary="Containers", categories=["devops", "cloud"])
        assert tool_text(tool) == "Docker Containers devops cloud"


class TestSemanticSearchEngine:
    """Batched ranking."""

    def test_failure_policy(self):
        assert SemanticSearchEngine.failure_policy is FailurePolicy.ZERO_SCORE_PER_CANDIDATE

    def test_batch_size_must_be_positive(self, clock):
        with pytest.raises(ValueError):
            make_engine(FakeEmbeddingClient(), clock, batch_size=0)

    @pytest.mark.asyncio
    async def test_ranks_three_tools(self, clock):
        tools = [make_tool(1), make_tool(2), make_tool(3)]
        client = FakeEmbeddingClient(vectors={
            "find me": [1.0, 0.0],
            tool_text(tools[0]): [1.0, 0.0],
            tool_text(tools[1]): [0.0, 1.0],
            tool_text(tools[2]): [0.7, 0.7],
        })

        results = await make_engine(client, clock).search(tools, "find me")

        assert [r.id for r in results] == [1, 3, 2]
        assert results[0].score == pytest.approx(1.0)
        assert results[1].score == pytest.approx(math.sqrt(0.5))
        assert results[2].score == 0.0

    @pytest.mark.asyncio
    async def test_one_failed_candidate_is_kept_with_zero_score(self, clock):
        tools = [make_tool(i) for i in range(7)]
        vectors = {"query": [1.0, 0.0]}
        vectors.update({tool_text(t): [1.0, 0.1 * t.id] for t in tools})
        client = FakeEmbeddingClient(vectors=vectors, fail_on={tool_text(tools[4])})

        results = await make_engine(client, clock).search(tools, "query")

        assert len(results) == 7
        assert sorted(r.id for r in results) == list(range(7))
        zero = [r for r in results if r.score == 0.0]
        assert [r.id for r in zero] == [4]
        assert results[-1].id == 4
        assert all(r.score > 0 for r in results if r.id != 4)

    @pytest.mark.asyncio
    async def test_query_embedding_failure_raises_search_error(self, clock):
        client = FakeEmbeddingClient(fail_on={"query"})

        with pytest.raises(SearchError) as excinfo:
            await make_engine(client, clock).search([make_tool(1)], "query")

        assert isinstance(excinfo.value.__cause__, EmbeddingError)
        assert client.calls == ["query"]

    @pytest.mark.asyncio
    async def test_empty_candidates_short_circuit(self, clock):
        client = FakeEmbeddingClient()
        assert await make_engine(client, clock).search([], "anything") == []
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_batches_bound_concurrency(self, clock):
        tools = [make_tool(i) for i in range(12)]
        client = FakeEmbeddingClient(default=[1.0, 1.0], delay=0.01)

        results = await make_engine(client, clock, batch_size=5).search(tools, "query", limit=20)

        assert len(results) == 12
        assert client.max_in_flight == 5
        # Batches run in order: every candidate of batch N is requested before batch N+1
        requested = client.calls[1:]
        assert requested[:5] == [tool_text(t) for t in tools[:5]]
        assert set(requested[5:10]) == {tool_text(t) for t in tools[5:10]}

    @pytest.mark.asyncio
    async def test_limit_truncates(self, clock):
        tools = [make_tool(i) for i in range(15)]
        client = FakeEmbeddingClient(default=[1.0, 0.0])
        engine = make_engine(client, clock)

        assert len(await engine.search(tools, "q")) == 10
        assert len(await engine.search(tools, "q", limit=3)) == 3
        assert await engine.search(tools, "q", limit=0) == []

    @pytest.mark.asyncio
    async def test_ties_keep_original_order(self, clock):
        tools = [make_tool(i) for i in range(8)]
        client = FakeEmbeddingClient(default=[1.0, 0.0])

        results = await make_engine(client, clock).search(tools, "q", limit=8)
        assert [r.id for r in results] == list(range(8))

    @pytest.mark.asyncio
    async def test_results_carry_tool_fields(self, clock):
        tool = make_tool(9, name="Grafana", summary="Dashboards", categories=["monitoring"])
        client = FakeEmbeddingClient(default=[1.0, 0.0])

        [result] = await make_engine(client, clock).search([tool], "q")
        assert result.name == "Grafana"
        assert result.url == "https://tool9.dev"
        assert result.categories == ["monitoring"]
        assert result.score == pytest.approx(1.0)
