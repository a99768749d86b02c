"""Tests for the SQLite tool catalog."""

import pytest

from indexer.sqlite_adapter import ToolCatalog
from services.shared.errors import ToolNotFoundError
from services.shared.models import ToolCreate


def github(**overrides):
    fields = dict(name="GitHub", url="https://github.com", summary="Code hosting",
                  categories=["development", "collaboration"])
    fields.update(overrides)
    return ToolCreate(**fields)


class TestToolCatalog:
    """CRUD over the tools table."""

    @pytest.mark.asyncio
    async def test_insert_and_get(self, catalog):
        tool = await catalog.insert_tool(github())

        assert tool.id is not None
        fetched = await catalog.get_tool(tool.id)
        assert fetched == tool
        assert fetched.categories == ["development", "collaboration"]
        assert fetched.embedding is None

    @pytest.mark.asyncio
    async def test_embedding_round_trips_as_json(self, catalog):
        tool = await catalog.insert_tool(github(), embedding=[0.25, -1.5])
        assert (await catalog.get_tool(tool.id)).embedding == [0.25, -1.5]

    @pytest.mark.asyncio
    async def test_list_tools_in_insertion_order(self, catalog):
        await catalog.insert_tool(github())
        await catalog.insert_tool(github(name="Docker", url="https://docker.com"))

        tools = await catalog.list_tools()
        assert [t.name for t in tools] == ["GitHub", "Docker"]
        assert await catalog.count_tools() == 2

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, catalog):
        assert await catalog.get_tool(404) is None
        assert await catalog.get_by_url("https://nowhere.dev") is None

    @pytest.mark.asyncio
    async def test_get_by_url(self, catalog):
        await catalog.insert_tool(github())
        found = await catalog.get_by_url("https://github.com")
        assert found.name == "GitHub"

    @pytest.mark.asyncio
    async def test_find_url_conflict_excludes_own_id(self, catalog):
        first = await catalog.insert_tool(github())
        second = await catalog.insert_tool(github(name="Docker", url="https://docker.com"))

        assert await catalog.find_url_conflict("https://github.com", exclude_id=first.id) is None
        conflict = await catalog.find_url_conflict("https://github.com", exclude_id=second.id)
        assert conflict.id == first.id
        assert (await catalog.find_url_conflict("https://github.com")).id == first.id

    @pytest.mark.asyncio
    async def test_update(self, catalog):
        tool = await catalog.insert_tool(github())
        updated = await catalog.update_tool(tool.id, github(summary="Git hosting", categories=["devops"]))

        assert updated.id == tool.id
        assert updated.summary == "Git hosting"
        assert updated.categories == ["devops"]

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, catalog):
        with pytest.raises(ToolNotFoundError):
            await catalog.update_tool(99, github())

    @pytest.mark.asyncio
    async def test_delete(self, catalog):
        tool = await catalog.insert_tool(github())
        await catalog.delete_tool(tool.id)
        assert await catalog.get_tool(tool.id) is None

        with pytest.raises(ToolNotFoundError):
            await catalog.delete_tool(tool.id)

    @pytest.mark.asyncio
    async def test_non_list_categories_are_normalized(self, catalog):
        tool = await catalog.insert_tool(github(categories="development"))
        assert tool.categories == ["uncategorized"]

    @pytest.mark.asyncio
    async def test_malformed_stored_categories_are_normalized(self, catalog):
        tool = await catalog.insert_tool(github())
        catalog.conn.execute("UPDATE tools SET categories = ? WHERE id = ?", ("{not json", tool.id))
        catalog.conn.commit()

        assert (await catalog.get_tool(tool.id)).categories == ["uncategorized"]

    @pytest.mark.asyncio
    async def test_health_check(self, catalog):
        health = await catalog.health_check()
        assert health == {"status": "healthy", "database": "sqlite", "tools": 0}

    @pytest.mark.asyncio
    async def test_uninitialized_catalog(self, tmp_path):
        tool_catalog = ToolCatalog(str(tmp_path / "never.db"))
        with pytest.raises(RuntimeError):
            await tool_catalog.list_tools()
        assert (await tool_catalog.health_check())["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_context_manager(self, tmp_path):
        async with ToolCatalog(str(tmp_path / "ctx.db")) as tool_catalog:
            await tool_catalog.insert_tool(github())
            assert await tool_catalog.count_tools() == 1
        assert tool_catalog.conn is None
