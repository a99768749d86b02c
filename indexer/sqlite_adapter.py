"""SQLite tool catalog for toolscout.

Stores tool records (name, url, summary, categories, optional embedding).
Categories and embeddings are stored as JSON text. URL uniqueness is checked
by callers before insert/update, not enforced by the schema.
"""

import sqlite3
import logging
import json
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone

from services.shared.errors import ToolNotFoundError
from services.shared.models import Tool, ToolCreate, normalize_categories

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tools (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    url TEXT NOT NULL,
    summary TEXT NOT NULL DEFAULT '',
    categories TEXT NOT NULL DEFAULT '["uncategorized"]',
    embedding TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_tools_url ON tools(url);
"""


class ToolCatalog:
    """SQLite-backed catalog of tools."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    async def initialize(self):
        """Open the SQLite connection and ensure the schema exists."""
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self.conn.executescript(SCHEMA_SQL)
            self.conn.commit()
            logger.info(f"Tool catalog initialized: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize tool catalog: {e}")
            raise

    async def close(self):
        """Close SQLite connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("Tool catalog connection closed")

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise RuntimeError("Tool catalog is not initialized")
        return self.conn

    @staticmethod
    def _row_to_tool(row: sqlite3.Row) -> Tool:
        try:
            categories = json.loads(row['categories']) if row['categories'] else None
        except json.JSONDecodeError:
            logger.warning(f"Tool {row['id']} has malformed categories, using default")
            categories = None

        embedding = json.loads(row['embedding']) if row['embedding'] else None

        return Tool(
            id=row['id'],
            name=row['name'],
            url=row['url'],
            summary=row['summary'] or '',
            categories=normalize_categories(categories),
            embedding=embedding
        )

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    async def list_tools(self) -> List[Tool]:
        """Return every tool, oldest first."""
        rows = self._require_conn().execute("SELECT * FROM tools ORDER BY id").fetchall()
        return [self._row_to_tool(row) for row in rows]

    async def count_tools(self) -> int:
        """Return the number of stored tools."""
        row = self._require_conn().execute("SELECT COUNT(*) AS n FROM tools").fetchone()
        return row['n']

    async def get_tool(self, tool_id: int) -> Optional[Tool]:
        """Return one tool by id, or None."""
        row = self._require_conn().execute("SELECT * FROM tools WHERE id = ?", (tool_id,)).fetchone()
        return self._row_to_tool(row) if row else None

    async def get_by_url(self, url: str) -> Optional[Tool]:
        """Return the first tool registered under ``url``, or None."""
        row = self._require_conn().execute(
            "SELECT * FROM tools WHERE url = ? ORDER BY id LIMIT 1", (url,)
        ).fetchone()
        return self._row_to_tool(row) if row else None

    async def find_url_conflict(self, url: str, exclude_id: Optional[int] = None) -> Optional[Tool]:
        """Return another tool already using ``url``, ignoring ``exclude_id``."""
        if exclude_id is None:
            return await self.get_by_url(url)
        row = self._require_conn().execute(
            "SELECT * FROM tools WHERE url = ? AND id != ? ORDER BY id LIMIT 1", (url, exclude_id)
        ).fetchone()
        return self._row_to_tool(row) if row else None

    async def insert_tool(self, tool: ToolCreate, embedding: Optional[List[float]] = None) -> Tool:
        """Insert a tool and return it with its new id."""
        conn = self._require_conn()
        now = self._now()
        cursor = conn.execute(
            """
            INSERT INTO tools (name, url, summary, categories, embedding, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (tool.name, tool.url, tool.summary, json.dumps(tool.categories),
             json.dumps(embedding) if embedding is not None else None, now, now)
        )
        conn.commit()
        logger.info(f"Inserted tool {cursor.lastrowid}: {tool.name} ({tool.url})")
        return await self.get_tool(cursor.lastrowid)

    async def update_tool(self, tool_id: int, tool: ToolCreate) -> Tool:
        """Replace a tool's fields.

        Raises:
            ToolNotFoundError: if no tool has ``tool_id``
        """
        conn = self._require_conn()
        cursor = conn.execute(
            """
            UPDATE tools SET name = ?, url = ?, summary = ?, categories = ?, updated_at = ?
            WHERE id = ?
            """,
            (tool.name, tool.url, tool.summary, json.dumps(tool.categories), self._now(), tool_id)
        )
        conn.commit()
        if cursor.rowcount == 0:
            raise ToolNotFoundError(tool_id)
        logger.info(f"Updated tool {tool_id}")
        return await self.get_tool(tool_id)

    async def delete_tool(self, tool_id: int) -> None:
        """Delete a tool.

        Raises:
            ToolNotFoundError: if no tool has ``tool_id``
        """
        conn = self._require_conn()
        cursor = conn.execute("DELETE FROM tools WHERE id = ?", (tool_id,))
        conn.commit()
        if cursor.rowcount == 0:
            raise ToolNotFoundError(tool_id)
        logger.info(f"Deleted tool {tool_id}")

    async def health_check(self) -> Dict[str, Any]:
        """Check catalog health."""
        try:
            count = await self.count_tools()
            return {'status': 'healthy', 'database': 'sqlite', 'tools': count}
        except (sqlite3.Error, RuntimeError) as e:
            return {'status': 'unhealthy', 'database': 'sqlite', 'error': str(e)}
